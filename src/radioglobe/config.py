"""Runtime settings read from the environment (.env is loaded by the entry points)."""

import logging
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    """All tunables in one place. Built once per app run."""

    radio_browser_url: str = "https://de1.api.radio-browser.info"
    radio_browser_timeout: float = 10.0  # seconds
    anthropic_api_key: str | None = None
    anthropic_model: str = "claude-sonnet-4-6"
    # Region whose stations are placed ahead of the global list on initial load
    priority_country: str = "Turkey"
    priority_code: str = "TR"
    priority_tag: str = "turkish"
    global_limit: int = 50
    country_limit: int = 200
    tag_limit: int = 100
    search_limit: int = 50
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        env = os.environ
        defaults = cls()
        return cls(
            radio_browser_url=env.get(
                "RADIO_BROWSER_URL", defaults.radio_browser_url
            ).rstrip("/"),
            radio_browser_timeout=float(
                env.get("RADIO_BROWSER_TIMEOUT", defaults.radio_browser_timeout)
            ),
            anthropic_api_key=env.get("ANTHROPIC_API_KEY") or None,
            anthropic_model=env.get("ANTHROPIC_MODEL", defaults.anthropic_model),
            priority_country=env.get(
                "RADIOGLOBE_PRIORITY_COUNTRY", defaults.priority_country
            ),
            priority_code=env.get("RADIOGLOBE_PRIORITY_CODE", defaults.priority_code),
            priority_tag=env.get("RADIOGLOBE_PRIORITY_TAG", defaults.priority_tag),
            log_level=env.get("RADIOGLOBE_LOG_LEVEL", defaults.log_level).upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the app and scripts."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Request lines from httpx drown out our own messages at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
