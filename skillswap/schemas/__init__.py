from .announcement import AnnouncementRequest, AnnouncementResponse
from .common import Page, PageRequest, Pagination
from .stats import (
    ActivityReport,
    AdminDashboard,
    ProfileView,
    SkillCount,
    SwapReport,
    SwapStatistics,
    UserCounts,
    UserReport,
    UserWithStats,
)
from .swap import (
    SwapCompleteRequest,
    SwapCreateRequest,
    SwapDashboard,
    SwapListKind,
    SwapListQuery,
    SwapResponse,
    SwapStats,
)
from .user import BanResult, DirectoryFilters, ProfileRequest, PublicProfile, UserRequest, UserResponse, UserSummary

__all__ = [
    "ActivityReport",
    "AdminDashboard",
    "AnnouncementRequest",
    "AnnouncementResponse",
    "BanResult",
    "DirectoryFilters",
    "Page",
    "PageRequest",
    "Pagination",
    "ProfileView",
    "ProfileRequest",
    "PublicProfile",
    "SkillCount",
    "SwapCompleteRequest",
    "SwapCreateRequest",
    "SwapDashboard",
    "SwapListKind",
    "SwapListQuery",
    "SwapReport",
    "SwapResponse",
    "SwapStatistics",
    "SwapStats",
    "UserCounts",
    "UserReport",
    "UserRequest",
    "UserResponse",
    "UserSummary",
    "UserWithStats",
]
