from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class Settings:
    # Where the game snapshot is written; None keeps everything in memory.
    state_path: str | None = None
    log_level: str = "INFO"


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    return Settings(
        state_path=env.get("THROWDOWN_STATE_PATH") or None,
        log_level=env.get("THROWDOWN_LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
