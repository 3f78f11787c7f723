from pydantic import BaseModel, Field, model_validator
from typing import List, Optional


class RewardTier(BaseModel):
    """A named bracket of consecutive streak days with per-day coin rewards."""
    level: int = Field(..., ge=1, description="Position of the tier in the ladder")
    name: str = Field(..., description="Tier name, e.g. Bronze")
    days: int = Field(..., gt=0, description="Number of streak days in this tier")
    rewards: List[int] = Field(..., description="Coins awarded on each day of the tier")

    @model_validator(mode="after")
    def check_rewards_length(self) -> "RewardTier":
        if len(self.rewards) != self.days:
            raise ValueError(f"Tier {self.name} defines {len(self.rewards)} rewards for {self.days} days")
        return self


class LevelInfo(RewardTier):
    """A tier together with the user's position inside it."""
    dayInLevel: int = Field(..., ge=0, description="1-indexed day within the tier (0 for an empty streak)")
    isFinalLevel: bool = Field(..., description="True once the streak cycles inside the last tier")
    totalDaysInLevel: int = Field(..., description="Same as days")


class RewardsStatusResponse(BaseModel):
    """Response model for rewards status."""
    currentStreak: int = Field(..., description="Consecutive days with a check-in")
    lastLoginDate: Optional[str] = Field(None, description="Last check-in date (YYYY-MM-DD)")
    coins: int = Field(..., description="Coins collected so far")
    level: LevelInfo = Field(..., description="Current tier and progress")
    todayReward: Optional[int] = Field(None, description="Coins for the current day in the tier, null before the first check-in")
    tiers: List[RewardTier] = Field(..., description="The full tier ladder")


class CheckInResponse(BaseModel):
    """Response model for the daily check-in."""
    currentStreak: int = Field(..., description="Streak after this check-in")
    coinsAwarded: int = Field(..., description="Coins credited by this check-in")
    coins: int = Field(..., description="Coin balance after this check-in")
    alreadyCheckedIn: bool = Field(..., description="True when today's check-in was already recorded")
    level: LevelInfo


class LeaderboardEntry(BaseModel):
    rank: int = Field(..., ge=1)
    id: str
    name: str
    avatarUrl: Optional[str] = None
    coins: int
    streak: int = 0


class LeaderboardResponse(BaseModel):
    """Top students by coin balance."""
    students: List[LeaderboardEntry]
