from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

REPO_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=str(REPO_ROOT / '.env'), env_file_encoding='utf-8', extra='ignore')

    app_name: str = 'PeriodNarrator'
    log_level: str = 'INFO'

    default_timezone: str = 'UTC'
    default_period: str = 'mtd'

    frontend_origin: str = 'http://localhost:3000'
    frontend_origins_csv: str = 'http://localhost:3000,http://127.0.0.1:3000'

    max_rows: int = 50000

    chart_width: int = 600
    chart_height: int = 240
    chart_padding_top: float = 20.0
    chart_padding_right: float = 100.0
    chart_padding_bottom: float = 30.0
    chart_padding_left: float = 100.0
    hit_threshold_px: float = 10.0

    color_background: str = '#f7f7f7'
    color_reference: str = '#e0e0e0'
    color_yesterday_line: str = '#999999'
    color_yesterday_label: str = '#666666'
    color_comparison: str = '#999999'
    color_current: str = '#1f77b4'
    color_cumulative: str = '#4A90E2'

    @property
    def frontend_origins(self) -> list[str]:
        raw = [s.strip() for s in self.frontend_origins_csv.split(',') if s.strip()]
        if self.frontend_origin and self.frontend_origin not in raw:
            raw.append(self.frontend_origin)
        seen: set[str] = set()
        out: list[str] = []
        for origin in raw:
            if origin in seen:
                continue
            seen.add(origin)
            out.append(origin)
        return out


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
