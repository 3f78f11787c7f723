"""Daily check-in streaks and the reward tier ladder."""
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence

from firebase_admin import firestore

from educonnect.models.rewards import CheckInResponse, LevelInfo, RewardTier
from educonnect.services.firestore_service import get_document, stream_query, update_document

logger = logging.getLogger(__name__)

REWARD_LEVELS = [
    RewardTier(level=1, name="Bronze", days=7, rewards=[5, 10, 15, 20, 25, 30, 50]),
    RewardTier(level=2, name="Silver", days=7, rewards=[10, 15, 20, 25, 30, 40, 75]),
    RewardTier(level=3, name="Gold", days=7, rewards=[15, 20, 25, 30, 40, 50, 100]),
    RewardTier(
        level=4,
        name="Platinum",
        days=14,
        rewards=[20, 25, 30, 35, 40, 45, 50, 25, 30, 35, 40, 45, 50, 150],
    ),
]


def get_level_info(total_streak: int, levels: Sequence[RewardTier] = REWARD_LEVELS) -> LevelInfo:
    """Find the tier containing ``total_streak`` and the day within it.

    Tiers are walked in order with a running total of their days. Once the
    streak is past every defined tier it cycles inside the last one.

    A streak of 0 lands in the first tier with ``dayInLevel == 0``. That value
    sits outside the 1-indexed range used everywhere else and is returned
    unchanged; ``reward_for_day`` treats it as "no reward yet".

    Raises:
        ValueError: negative streak or empty tier list
    """
    if total_streak < 0:
        raise ValueError("Streak cannot be negative")
    if not levels:
        raise ValueError("At least one reward tier is required")

    cumulative_days = 0
    for tier in levels:
        if total_streak <= cumulative_days + tier.days:
            return LevelInfo(
                **tier.model_dump(),
                dayInLevel=total_streak - cumulative_days,
                isFinalLevel=False,
                totalDaysInLevel=tier.days,
            )
        cumulative_days += tier.days

    last_tier = levels[-1]
    days_into_last_level = (total_streak - cumulative_days - 1) % last_tier.days
    return LevelInfo(
        **last_tier.model_dump(),
        dayInLevel=days_into_last_level + 1,
        isFinalLevel=True,
        totalDaysInLevel=last_tier.days,
    )


def reward_for_day(level_info: LevelInfo) -> Optional[int]:
    if level_info.dayInLevel < 1:
        return None
    return level_info.rewards[level_info.dayInLevel - 1]


def next_streak(current_streak: int, last_login_date: Optional[str], today: date) -> Optional[int]:
    """Streak after a check-in on ``today``, or None if today is already counted."""
    if last_login_date == today.isoformat():
        return None
    if last_login_date == (today - timedelta(days=1)).isoformat():
        return current_streak + 1
    return 1


def record_daily_check_in(db, uid: str, today: date) -> CheckInResponse:
    """Count today's login towards the streak and credit the day's reward.

    The user document is only written when the streak changes, so repeated
    check-ins on the same day are harmless.
    """
    user_data = get_document(db, "users", uid, label="User profile")
    current_streak = int(user_data.get("streak") or 0)
    coins = int(user_data.get("coins") or 0)

    new_streak = next_streak(current_streak, user_data.get("lastLoginDate"), today)
    if new_streak is None:
        return CheckInResponse(
            currentStreak=current_streak,
            coinsAwarded=0,
            coins=coins,
            alreadyCheckedIn=True,
            level=get_level_info(current_streak),
        )

    level_info = get_level_info(new_streak)
    awarded = reward_for_day(level_info) or 0
    update_document(db, "users", uid, {
        "streak": new_streak,
        "lastLoginDate": today.isoformat(),
        "coins": coins + awarded,
    })
    logger.info("Check-in for %s: streak=%d level=%s awarded=%d", uid, new_streak, level_info.name, awarded)

    return CheckInResponse(
        currentStreak=new_streak,
        coinsAwarded=awarded,
        coins=coins + awarded,
        alreadyCheckedIn=False,
        level=level_info,
    )


LEADERBOARD_SIZE = 10


def get_leaderboard(db, limit: int = LEADERBOARD_SIZE) -> List[Dict[str, Any]]:
    """Students with the most coins, ranked from 1."""
    query = db.collection("users") \
        .where("role", "==", "student") \
        .order_by("coins", direction=firestore.Query.DESCENDING) \
        .limit(limit)
    students = stream_query(query, "users")
    return [
        {
            "rank": rank,
            "id": student["id"],
            "name": student.get("name") or "Student",
            "avatarUrl": student.get("avatarUrl"),
            "coins": int(student.get("coins") or 0),
            "streak": int(student.get("streak") or 0),
        }
        for rank, student in enumerate(students, start=1)
    ]
