"""Engine modules for LilLearner integration.

Contains pure computation engines (no Home Assistant imports):
- xp_engine: Level math, XP values, and the XP ledger
- statistics_engine: Streaks, active days, and entry aggregates
- achievement_engine: Achievement criteria evaluation
- report_engine: Periodic report aggregation and narrative
"""

from .achievement_engine import AchievementEngine
from .report_engine import ReportEngine
from .statistics_engine import StatisticsEngine
from .xp_engine import XpEngine

__all__ = [
    "AchievementEngine",
    "ReportEngine",
    "StatisticsEngine",
    "XpEngine",
]
