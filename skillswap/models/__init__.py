from .announcement import Announcement, AnnouncementType
from .base import Base
from .definitions import Availability, User
from .swap import OPEN_STATUSES, TERMINAL_STATUSES, SwapRequest, SwapStatus

__all__ = [
    "Announcement",
    "AnnouncementType",
    "Availability",
    "Base",
    "OPEN_STATUSES",
    "SwapRequest",
    "SwapStatus",
    "TERMINAL_STATUSES",
    "User",
]
