"""Runtime settings read from the environment."""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_PROGRESS_INTERVAL = 2.0


def _parse_tokens(raw: str) -> Dict[str, str]:
    """Parse ``token:user_id`` pairs separated by commas."""
    tokens = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        token, sep, user_id = item.partition(":")
        if not sep or not token or not user_id:
            raise ValueError(f"Invalid DBMT_API_TOKENS entry: {item!r}")
        tokens[token] = user_id
    return tokens


@dataclass
class Settings:
    """Configuration for the orchestration service."""

    # Bearer token -> user id. Empty accepts any non-empty token.
    api_tokens: Dict[str, str] = field(default_factory=dict)

    # Delay between simulated progress steps
    progress_interval: float = DEFAULT_PROGRESS_INTERVAL

    # Persist tables to this JSON file when set
    data_file: Optional[str] = None

    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "Settings":
        """Build settings from ``DBMT_*`` environment variables."""
        env = os.environ if environ is None else environ

        origins = [
            o.strip() for o in env.get("DBMT_CORS_ORIGINS", "*").split(",") if o.strip()
        ]

        return cls(
            api_tokens=_parse_tokens(env.get("DBMT_API_TOKENS", "")),
            progress_interval=float(
                env.get("DBMT_PROGRESS_INTERVAL", DEFAULT_PROGRESS_INTERVAL)
            ),
            data_file=env.get("DBMT_DATA_FILE") or None,
            cors_origins=origins or ["*"],
            log_level=env.get("DBMT_LOG_LEVEL", "INFO").upper(),
            host=env.get("DBMT_HOST", "127.0.0.1"),
            port=int(env.get("DBMT_PORT", 8000)),
        )
