from services.analytics.models import InteractionRecord, SearchRecord, UserPreferences
from services.analytics.repository import AnalyticsSink, BehaviorRepository
from services.analytics.service import AnalyticsRecorder

__all__ = [
    "AnalyticsRecorder",
    "AnalyticsSink",
    "BehaviorRepository",
    "InteractionRecord",
    "SearchRecord",
    "UserPreferences",
]
