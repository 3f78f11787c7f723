"""
Reward tier ladder and daily check-in.

Goals:
- Streaks map to exactly one tier and day, cycling inside the last tier.
- Check-ins count once per day, continue from yesterday, reset otherwise.
- The leaderboard ranks students only, by coins.
"""
from datetime import date

import pytest

from educonnect.models.rewards import RewardTier
from educonnect.services.rewards_service import (
    REWARD_LEVELS,
    get_leaderboard,
    get_level_info,
    next_streak,
    record_daily_check_in,
    reward_for_day,
)

from fakes import STUDENT, TEACHER


TOTAL_DEFINED_DAYS = sum(t.days for t in REWARD_LEVELS)


@pytest.mark.parametrize(
    "streak, level, day, is_final",
    [
        (1, 1, 1, False),
        (7, 1, 7, False),
        (8, 2, 1, False),
        (10, 2, 3, False),
        (21, 3, 7, False),
        (22, 4, 1, False),
        (35, 4, 14, False),
        (36, 4, 1, True),
        (49, 4, 14, True),
        (50, 4, 1, True),
    ],
)
def test_level_info_examples(streak, level, day, is_final):
    info = get_level_info(streak)
    assert info.level == level
    assert info.dayInLevel == day
    assert info.isFinalLevel is is_final
    assert info.totalDaysInLevel == info.days


def test_day_stays_within_tier_for_defined_range():
    for streak in range(1, TOTAL_DEFINED_DAYS + 1):
        info = get_level_info(streak)
        assert 1 <= info.dayInLevel <= info.days
        assert not info.isFinalLevel


def test_cycles_with_period_of_last_tier():
    last = REWARD_LEVELS[-1]
    for streak in range(TOTAL_DEFINED_DAYS + 1, TOTAL_DEFINED_DAYS + 3 * last.days):
        info = get_level_info(streak)
        assert info.isFinalLevel
        assert info.dayInLevel == get_level_info(streak + last.days).dayInLevel


def test_zero_streak_is_day_zero_without_reward():
    info = get_level_info(0)
    assert info.level == 1
    assert info.dayInLevel == 0
    assert reward_for_day(info) is None


def test_negative_streak_rejected():
    with pytest.raises(ValueError):
        get_level_info(-1)


def test_custom_tiers():
    tiers = [RewardTier(level=1, name="Only", days=3, rewards=[1, 2, 3])]
    assert get_level_info(3, tiers).dayInLevel == 3
    assert get_level_info(4, tiers).isFinalLevel
    assert get_level_info(5, tiers).dayInLevel == 2


def test_tier_rewards_must_match_days():
    with pytest.raises(ValueError):
        RewardTier(level=1, name="Broken", days=3, rewards=[1, 2])


def test_reward_for_day_uses_one_based_index():
    assert reward_for_day(get_level_info(7)) == 50
    assert reward_for_day(get_level_info(35)) == 150


def test_next_streak_rules():
    today = date(2026, 3, 10)
    assert next_streak(4, "2026-03-10", today) is None
    assert next_streak(4, "2026-03-09", today) == 5
    assert next_streak(4, "2026-03-01", today) == 1
    assert next_streak(0, None, today) == 1


def test_check_in_continues_streak_and_credits_coins(db):
    db.put("users", "u1", {"id": "u1", "name": "A", "role": "student", "streak": 7, "coins": 100, "lastLoginDate": "2026-03-09"})

    result = record_daily_check_in(db, "u1", date(2026, 3, 10))

    assert result.currentStreak == 8
    assert result.level.level == 2
    assert result.coinsAwarded == 10
    assert result.coins == 110
    stored = db.store["users"]["u1"]
    assert stored["streak"] == 8
    assert stored["lastLoginDate"] == "2026-03-10"
    assert stored["coins"] == 110


def test_second_check_in_same_day_changes_nothing(db):
    db.put("users", "u1", {"id": "u1", "name": "A", "role": "student", "streak": 3, "coins": 30, "lastLoginDate": "2026-03-10"})

    result = record_daily_check_in(db, "u1", date(2026, 3, 10))

    assert result.alreadyCheckedIn
    assert result.coinsAwarded == 0
    assert db.store["users"]["u1"]["streak"] == 3


def test_missed_day_resets_streak(db):
    db.put("users", "u1", {"id": "u1", "name": "A", "role": "student", "streak": 12, "coins": 0, "lastLoginDate": "2026-03-05"})

    result = record_daily_check_in(db, "u1", date(2026, 3, 10))

    assert result.currentStreak == 1
    assert result.coinsAwarded == 5


def test_rewards_api(client):
    status = client.get("/api/rewards/status")
    assert status.status_code == 200
    body = status.json()
    assert body["currentStreak"] == 0
    assert body["todayReward"] is None
    assert len(body["tiers"]) == 4

    check_in = client.post("/api/rewards/check-in")
    assert check_in.status_code == 200
    assert check_in.json()["currentStreak"] == 1
    assert check_in.json()["coinsAwarded"] == 5

    again = client.post("/api/rewards/check-in")
    assert again.json()["alreadyCheckedIn"] is True


def test_leaderboard_ranks_students_by_coins(db):
    db.store["users"][TEACHER["id"]]["coins"] = 999
    for i, coins in enumerate([40, 120, 75]):
        db.put("users", f"student-{i + 10}", {"id": f"student-{i + 10}", "name": f"Student {i}", "role": "student", "coins": coins})

    board = get_leaderboard(db)

    assert [entry["coins"] for entry in board] == [120, 75, 40, 0]
    assert [entry["rank"] for entry in board] == [1, 2, 3, 4]
    assert TEACHER["id"] not in {entry["id"] for entry in board}


def test_leaderboard_keeps_top_ten(db):
    for i in range(12):
        db.put("users", f"s{i}", {"id": f"s{i}", "name": f"S{i}", "role": "student", "coins": i * 10})

    board = get_leaderboard(db)

    assert len(board) == 10
    assert board[0]["coins"] == 110


def test_leaderboard_api(client, db):
    db.store["users"][STUDENT["id"]]["coins"] = 55

    body = client.get("/api/rewards/leaderboard").json()

    assert body["students"][0] == {
        "rank": 1, "id": STUDENT["id"], "name": STUDENT["name"],
        "avatarUrl": None, "coins": 55, "streak": 0,
    }
