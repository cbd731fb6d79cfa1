"""
Auction configuration parameters for Clearhouse.

Defaults live on the dataclass; deployments override them through
CLEARHOUSE_* environment variables, optionally read from a .env file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "CLEARHOUSE_"


@dataclass
class ClearingConfig:
    """Auction-wide configuration parameters"""

    # Listing and bidding rules
    min_reserve: int = 1  # A listing can never be bid-free
    max_content_length: int = 4096  # Characters per item content

    # Round lifecycle
    start_open: bool = False  # Open the first round on construction

    # Paths
    data_dir: Path = field(default_factory=lambda: Path("data"))
    log_dir: Path = field(default_factory=lambda: Path("logs"))
    db_name: str = "auction.db"

    def __post_init__(self):
        if self.min_reserve < 1:
            raise ValueError(f"min_reserve must be >= 1, got {self.min_reserve}")
        if self.max_content_length < 1:
            raise ValueError(f"max_content_length must be >= 1, got {self.max_content_length}")
        self.data_dir = Path(self.data_dir)
        self.log_dir = Path(self.log_dir)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_config(env_file: Optional[str] = None) -> ClearingConfig:
    """
    Load configuration from the environment.

    Args:
        env_file: Optional path to a .env file. Values already present
            in the process environment take precedence.

    Returns:
        ClearingConfig instance
    """
    if env_file:
        load_dotenv(env_file, override=False)

    defaults = ClearingConfig()
    return ClearingConfig(
        min_reserve=_env_int("MIN_RESERVE", defaults.min_reserve),
        max_content_length=_env_int("MAX_CONTENT_LENGTH", defaults.max_content_length),
        start_open=_env_bool("START_OPEN", defaults.start_open),
        data_dir=Path(os.environ.get(ENV_PREFIX + "DATA_DIR") or defaults.data_dir),
        log_dir=Path(os.environ.get(ENV_PREFIX + "LOG_DIR") or defaults.log_dir),
        db_name=os.environ.get(ENV_PREFIX + "DB_NAME") or defaults.db_name,
    )
