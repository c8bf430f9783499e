from .announcement import AnnouncementService
from .directory import DirectoryService
from .events import SwapCompleted
from .moderation import ModerationService, UserStatusFilter
from .notification import LoggingNotifier, NotificationDispatcher, Notifier
from .rating import RatingService
from .stats import ReportService, StatsService
from .swap import SwapService
from .user import UserService

__all__ = [
    "AnnouncementService",
    "DirectoryService",
    "LoggingNotifier",
    "ModerationService",
    "NotificationDispatcher",
    "Notifier",
    "RatingService",
    "ReportService",
    "StatsService",
    "SwapCompleted",
    "SwapService",
    "UserService",
    "UserStatusFilter",
]
