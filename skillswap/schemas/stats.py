"""Read models for dashboards and admin reports."""

from datetime import datetime

from pydantic import BaseModel, Field

from .swap import SwapStats
from .user import PublicProfile, UserResponse


class SkillCount(BaseModel):
    skill: str
    count: int


class UserCounts(BaseModel):
    total_users: int = 0
    public_users: int = 0
    banned_users: int = 0
    admin_users: int = 0


class AdminDashboard(BaseModel):
    users: UserCounts
    swaps: SwapStats
    recent_registrations: int
    top_skills: list[SkillCount]


class UserWithStats(BaseModel):
    user: UserResponse
    swap_stats: SwapStats


class UserReport(BaseModel):
    users: list[UserWithStats]
    total_users: int
    generated_at: datetime


class SwapStatistics(BaseModel):
    total: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    by_month: dict[str, int] = Field(default_factory=dict, description="Counts keyed by creation month, YYYY-MM")
    average_rating: float = 0.0
    total_ratings: int = 0


class SwapReport(BaseModel):
    statistics: SwapStatistics
    generated_at: datetime


class ActivityUsers(BaseModel):
    total: int
    active: int
    banned: int
    new_this_month: int
    new_this_week: int


class ActivitySwaps(BaseModel):
    total: int
    pending: int
    completed: int
    this_month: int
    this_week: int


class ActivityReport(BaseModel):
    users: ActivityUsers
    swaps: ActivitySwaps
    top_skills: list[SkillCount]
    generated_at: datetime
    period_from: datetime
    period_to: datetime


class ProfileView(BaseModel):
    profile: PublicProfile
    swap_stats: SwapStats
    completed_swaps: int
