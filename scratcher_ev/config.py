import os
from dataclasses import dataclass

from scratcher_ev.trends import TrendConfig


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_str(name: str, default: str) -> str:
    v = os.getenv(name, default)
    return default if v is None else str(v)


@dataclass(frozen=True)
class Settings:
    # Source site
    base_url: str = _env_str("SCRATCHER_BASE_URL", "https://www.calottery.com")
    fetch_timeout: float = _env_float("FETCH_TIMEOUT", 20.0)
    max_workers: int = _env_int("MAX_WORKERS", 8)

    # Storage
    snapshot_path: str = _env_str("SNAPSHOT_PATH", "snapshots.jsonl")

    # Trend thresholds
    trend_window_days: float = _env_float("TREND_WINDOW_DAYS", 7.0)
    ev_growth_threshold_percent: float = _env_float("EV_GROWTH_THRESHOLD_PERCENT", 0.5)
    min_elapsed_days: float = _env_float("MIN_ELAPSED_DAYS", 0.1)

    log_level: str = _env_str("LOG_LEVEL", "INFO")

    def trend_config(self) -> TrendConfig:
        return TrendConfig(
            ev_growth_threshold_percent=self.ev_growth_threshold_percent,
            min_elapsed_days=self.min_elapsed_days,
            window_days=self.trend_window_days,
        )
