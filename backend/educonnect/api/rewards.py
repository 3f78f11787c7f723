from datetime import datetime, timezone
from fastapi import APIRouter, Depends

from educonnect.auth.dependencies import get_current_profile
from educonnect.models.rewards import CheckInResponse, LeaderboardResponse, RewardsStatusResponse
from educonnect.models.user import BaseProfile
from educonnect.services.firestore_service import get_db
from educonnect.services.rewards_service import (
    REWARD_LEVELS,
    get_leaderboard,
    get_level_info,
    record_daily_check_in,
    reward_for_day,
)

router = APIRouter(
    prefix="/rewards",
    tags=["rewards"],
)


@router.get(
    "/status",
    response_model=RewardsStatusResponse,
    summary="Get rewards status",
    description="Returns the current streak, coin balance and position in the reward tier ladder.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
    },
)
def get_rewards_status(
    profile: BaseProfile = Depends(get_current_profile),
) -> RewardsStatusResponse:
    level_info = get_level_info(profile.streak)
    return RewardsStatusResponse(
        currentStreak=profile.streak,
        lastLoginDate=profile.lastLoginDate,
        coins=profile.coins,
        level=level_info,
        todayReward=reward_for_day(level_info),
        tiers=REWARD_LEVELS,
    )


@router.post(
    "/check-in",
    response_model=CheckInResponse,
    summary="Record daily check-in",
    description="Counts today's login towards the streak (at most once per UTC day) and credits the day's coins.",
)
def check_in(
    profile: BaseProfile = Depends(get_current_profile),
    db=Depends(get_db),
) -> CheckInResponse:
    today = datetime.now(timezone.utc).date()
    result = record_daily_check_in(db, profile.id, today)
    print(f"[REWARDS] Check-in for user {profile.id}: streak={result.currentStreak}, awarded={result.coinsAwarded}")
    return result


@router.get(
    "/leaderboard",
    response_model=LeaderboardResponse,
    summary="Get coins leaderboard",
    description="Returns the ten students with the most coins, highest first.",
)
def leaderboard(
    profile: BaseProfile = Depends(get_current_profile),
    db=Depends(get_db),
) -> LeaderboardResponse:
    return LeaderboardResponse(students=get_leaderboard(db))
