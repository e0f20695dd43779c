"""Managers for LilLearner stateful operations.

Managers own every write to the storage document. Engines stay pure and
are called from here.
"""

from .achievement_manager import AchievementManager
from .base_manager import BaseManager
from .child_manager import ChildManager
from .entry_manager import EntryManager
from .progress_manager import ProgressManager
from .report_manager import ReportManager
from .voice_manager import VoiceManager

__all__ = [
    "AchievementManager",
    "BaseManager",
    "ChildManager",
    "EntryManager",
    "ProgressManager",
    "ReportManager",
    "VoiceManager",
]
