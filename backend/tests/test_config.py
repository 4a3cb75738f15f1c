from __future__ import annotations

from narrator.core.config import Settings
from narrator.services.charting.render import ChartStyle


def test_frontend_origins_are_merged_and_deduplicated() -> None:
    settings = Settings(
        frontend_origin='http://localhost:5173',
        frontend_origins_csv='http://localhost:3000, http://localhost:3000,,http://127.0.0.1:3000',
    )
    assert settings.frontend_origins == [
        'http://localhost:3000',
        'http://127.0.0.1:3000',
        'http://localhost:5173',
    ]


def test_chart_style_reads_every_chart_setting() -> None:
    settings = Settings(chart_padding_left=40, color_current='#000000', hit_threshold_px=6)
    style = ChartStyle.from_settings(settings)
    assert style.padding.left == 40
    assert style.padding.right == 100
    assert style.current == '#000000'
    assert style.hit_threshold_px == 6
