"""
Environment driven settings
"""

import os
from dataclasses import dataclass

from .constants import DEFAULT_CYCLE_SECS

DEFAULT_SUBGRAPH_URL = "https://api.thegraph.com/subgraphs/name/drips-network/drips-on-ethereum"


def _env_int(k: str, default: int) -> int:
    v = (os.getenv(k, "") or "").strip()
    if not v:
        return int(default)
    try:
        return int(v)
    except ValueError:
        return int(default)


def _env_str(k: str, default: str) -> str:
    v = os.getenv(k, "")
    return (v if v is not None else default).strip() or default


@dataclass(frozen=True)
class DripsSettings:
    subgraph_url: str = DEFAULT_SUBGRAPH_URL
    timeout: int = 30
    page_size: int = 100
    cycle_secs: int = DEFAULT_CYCLE_SECS

    @staticmethod
    def from_env() -> "DripsSettings":
        return DripsSettings(
            subgraph_url=_env_str("DRIPS_SUBGRAPH_URL", DEFAULT_SUBGRAPH_URL),
            timeout=_env_int("DRIPS_HTTP_TIMEOUT", 30),
            page_size=_env_int("DRIPS_PAGE_SIZE", 100),
            cycle_secs=_env_int("DRIPS_CYCLE_SECS", DEFAULT_CYCLE_SECS),
        )
