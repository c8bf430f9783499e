from .announcement import AnnouncementRepository
from .swap import SwapRepository
from .user import UserRepository

__all__ = ["AnnouncementRepository", "SwapRepository", "UserRepository"]
