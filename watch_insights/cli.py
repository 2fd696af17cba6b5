from __future__ import annotations
import argparse, json, logging, sys
from typing import List, Optional

from .config import load_settings
from .dashboard import DashboardSession

logger = logging.getLogger("watch_insights")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="watch-insights",
        description="Turn a streaming viewing-activity export (and optional search history) into dashboard stats.",
    )
    ap.add_argument("viewing", nargs="?", help="Viewing activity CSV")
    ap.add_argument("--search", help="Search history CSV (optional)")
    ap.add_argument("--sample", action="store_true", help="Use the bundled sample exports")
    ap.add_argument("--out", help="Write the dashboard JSON here instead of stdout")
    ap.add_argument("--charts", metavar="DIR", help="Also save PNG charts into DIR")
    ap.add_argument("--recap", action="store_true", help="Ask OpenAI for a short recap (needs OPENAI_API_KEY)")
    ap.add_argument("--tz", help="Timezone for naive timestamps and day/hour buckets (default: UTC)")
    ap.add_argument("--log-level", help="Logging level (default: INFO)")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    if not args.viewing and not args.sample:
        ap.error("pass a viewing CSV or --sample")

    settings = load_settings(tz=args.tz)
    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    session = DashboardSession(tz=settings.tz, top_titles=settings.top_titles)
    if args.sample:
        ok = session.load_sample()
    else:
        ok = session.upload_viewing(args.viewing)
        if ok and args.search:
            ok = session.upload_search(args.search)
    if not ok:
        logger.error("Could not load export: %s", session.status.error)
        return 2

    dashboard = session.dashboard()
    payload = dashboard.to_dict()
    payload["status"] = {"viewing": session.status.viewing, "search": session.status.search}

    if args.recap:
        from .openai_llm import openai_llm_call, write_recap
        payload["recap"] = write_recap(
            dashboard.summary, dashboard.insights,
            lambda prompt: openai_llm_call(prompt, model=settings.openai_model),
        )

    if args.charts:
        from .viz import save_dashboard_charts
        payload["charts"] = save_dashboard_charts(dashboard, args.charts)

    text = json.dumps(payload, indent=2, default=str)
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(text)
        logger.info("Wrote dashboard to %s", args.out)
    else:
        sys.stdout.write(text + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
