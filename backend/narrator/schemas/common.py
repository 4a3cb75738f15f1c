from __future__ import annotations

from enum import Enum


class PeriodType(str, Enum):
    wtd = 'wtd'
    mtd = 'mtd'
    qtd = 'qtd'
    last_day = 'lastDay'
    last_week = 'lastWeek'
    last_month = 'lastMonth'
    rolling7 = 'rolling7'
    rolling14 = 'rolling14'
    rolling28 = 'rolling28'


class PeriodCategory(str, Enum):
    period_to_date = 'period_to_date'
    complete_period = 'complete_period'
    rolling_window = 'rolling_window'


class Timezone(str, Enum):
    utc = 'UTC'
    jst = 'JST'


class SeriesName(str, Enum):
    comparison = 'comparison'
    current = 'current'
