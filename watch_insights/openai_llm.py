# watch_insights/openai_llm.py
import os, time, random
from typing import Callable, Optional, Sequence
from openai import APIError, OpenAI, RateLimitError

from .models import Insight, WatchHighlights

_SYSTEM = (
    "You write a short, upbeat recap of someone's streaming habits for their personal dashboard. "
    "Use only the numbers and observations you are given; do not invent titles or statistics."
)

_recap_client: Optional[OpenAI] = None

def _get_client(api_key: Optional[str] = None) -> OpenAI:
    """Client for recap calls; the env-keyed one is shared across calls."""
    global _recap_client
    if api_key:
        return OpenAI(api_key=api_key)
    if _recap_client is None:
        env_key = os.getenv("OPENAI_API_KEY")
        if not env_key:
            raise RuntimeError(
                "The recap needs an OpenAI key: set OPENAI_API_KEY before using --recap or write_recap()."
            )
        _recap_client = OpenAI(api_key=env_key)
    return _recap_client

def openai_llm_call(prompt: str, model: str = "gpt-4o-mini", api_key: Optional[str] = None) -> str:
    """
    Calls Chat Completions and returns the message text.
    Retries rate limits / API errors with exponential backoff (4 attempts).
    """
    client = _get_client(api_key)

    for attempt in range(4):
        try:
            resp = client.chat.completions.create(
                model=model,
                temperature=0.4,
                messages=[
                    {"role": "system", "content": _SYSTEM},
                    {"role": "user", "content": prompt},
                ],
            )
            return resp.choices[0].message.content or ""
        except (RateLimitError, APIError):
            if attempt == 3:
                raise
            time.sleep(1.2 * (2 ** attempt) + random.random() * 0.4)
    return ""


# ----------------------------
# Recap prompt
# ----------------------------
def build_recap_prompt(watch: WatchHighlights, insights: Sequence[Insight]) -> str:
    facts = [
        f"- Total hours watched: {watch.total_hours}",
        f"- Sessions: {watch.total_sessions} (about {watch.average_session_minutes} min each)",
        f"- Distinct titles: {watch.total_titles}",
        f"- Busiest day: {watch.peak_day}",
        f"- Busiest hours: {watch.peak_hour_range}",
    ]
    if watch.top_title is not None:
        facts.append(f"- Most watched: {watch.top_title.value} ({watch.top_title.count} h)")
    observations = "\n".join(f"- {i.label}: {i.detail} {i.highlight}" for i in insights)
    return (
        "Write a 2-3 sentence recap in the second person.\n\n"
        "Facts:\n" + "\n".join(facts) + "\n\n"
        "Observations:\n" + (observations or "- none") + "\n\nRecap:"
    )

def write_recap(
    watch: WatchHighlights,
    insights: Sequence[Insight],
    llm_call_fn: Callable[[str], str],
) -> str:
    """Recap paragraph from the summary + insights. `llm_call_fn` takes a prompt and returns text."""
    return (llm_call_fn(build_recap_prompt(watch, insights)) or "").strip()
