import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Settings:
    tz: str = "UTC"
    log_level: str = "INFO"
    top_titles: int = 6
    openai_model: str = "gpt-4o-mini"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def load_settings(env_prefix: str = "WATCH_INSIGHTS_", tz: Optional[str] = None) -> Settings:
    """
    Read settings from the environment:
      WATCH_INSIGHTS_TZ, WATCH_INSIGHTS_LOG_LEVEL,
      WATCH_INSIGHTS_TOP_TITLES, WATCH_INSIGHTS_OPENAI_MODEL
    An explicit `tz` wins over the environment.
    """
    defaults = Settings()
    return Settings(
        tz=tz or os.getenv(f"{env_prefix}TZ") or defaults.tz,
        log_level=(os.getenv(f"{env_prefix}LOG_LEVEL") or defaults.log_level).upper(),
        top_titles=_int_env(f"{env_prefix}TOP_TITLES", defaults.top_titles),
        openai_model=os.getenv(f"{env_prefix}OPENAI_MODEL") or defaults.openai_model,
    )
