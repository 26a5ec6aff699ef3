import unittest
from types import SimpleNamespace
from uuid import uuid4

from animetrack.services.binge_math import (
    compute_profile_stats,
    estimate_remaining,
    remaining_episodes,
    round_one_decimal,
    split_minutes,
)


def _entry(**overrides):
    base = {
        "id": uuid4(),
        "status": "watching",
        "total_episodes": None,
        "episodes_watched": 0,
        "rating": None,
    }
    base.update(overrides)
    return SimpleNamespace(**base)


class TestEstimateRemaining(unittest.TestCase):
    def test_all_scope_sums_remaining_and_splits_time(self) -> None:
        entries = [
            _entry(total_episodes=12, episodes_watched=5),
            _entry(total_episodes=24, episodes_watched=24),
        ]
        estimate = estimate_remaining(entries, "all", 24)

        self.assertEqual(estimate.total_episodes_remaining, 7)
        self.assertEqual(estimate.total_minutes, 168)
        self.assertEqual((estimate.days, estimate.hours, estimate.minutes), (0, 2, 48))

    def test_overwatched_entry_never_goes_negative(self) -> None:
        entries = [_entry(total_episodes=10, episodes_watched=14)]
        self.assertEqual(estimate_remaining(entries, "all", 24).total_episodes_remaining, 0)
        self.assertEqual(remaining_episodes(entries[0]), 0)

    def test_missing_totals_count_as_zero(self) -> None:
        entries = [
            _entry(total_episodes=None, episodes_watched=3),
            _entry(total_episodes=5, episodes_watched=None),
        ]
        self.assertEqual(estimate_remaining(entries, "all", 24).total_episodes_remaining, 5)

    def test_watching_only_scope_filters_status(self) -> None:
        entries = [
            _entry(status="watching", total_episodes=10, episodes_watched=2),
            _entry(status="watch_later", total_episodes=50),
            _entry(status="completed", total_episodes=12, episodes_watched=6),
        ]
        self.assertEqual(
            estimate_remaining(entries, "watching-only", 24).total_episodes_remaining, 8
        )
        # Short alias
        self.assertEqual(
            estimate_remaining(entries, "watching", 24).total_episodes_remaining, 8
        )

    def test_single_entry_scope(self) -> None:
        target = _entry(total_episodes=26, episodes_watched=1)
        entries = [_entry(total_episodes=100), target]

        estimate = estimate_remaining(entries, str(target.id), 45)
        self.assertEqual(estimate.total_episodes_remaining, 25)
        self.assertEqual(estimate.total_minutes, 1125)
        self.assertEqual((estimate.days, estimate.hours, estimate.minutes), (0, 18, 45))

    def test_unknown_entry_scope_is_zero(self) -> None:
        entries = [_entry(total_episodes=12)]
        estimate = estimate_remaining(entries, str(uuid4()), 24)
        self.assertEqual(estimate.total_episodes_remaining, 0)
        self.assertEqual(estimate.total_minutes, 0)

    def test_arbitrary_episode_length_and_days(self) -> None:
        entries = [_entry(total_episodes=100)]
        estimate = estimate_remaining(entries, "all", 30)
        # 3000 min = 2 days 2 hours 0 minutes
        self.assertEqual((estimate.days, estimate.hours, estimate.minutes), (2, 2, 0))

    def test_days_at_two_per_day_rounds_up(self) -> None:
        expected = {0: 0, 1: 1, 2: 1, 3: 2, 100: 50}
        for remaining, days in expected.items():
            with self.subTest(remaining=remaining):
                entries = [_entry(total_episodes=remaining)]
                for length in (12, 24, 45):
                    estimate = estimate_remaining(entries, "all", length)
                    self.assertEqual(estimate.days_at_two_per_day, days)

    def test_split_minutes_truncates(self) -> None:
        self.assertEqual(split_minutes(0), (0, 0, 0))
        self.assertEqual(split_minutes(59), (0, 0, 59))
        self.assertEqual(split_minutes(1439), (0, 23, 59))
        self.assertEqual(split_minutes(1440), (1, 0, 0))


class TestProfileStats(unittest.TestCase):
    def test_empty_collection(self) -> None:
        stats = compute_profile_stats([])
        self.assertEqual(stats.total, 0)
        self.assertEqual(stats.average_rating, 0)
        self.assertEqual(stats.total_episodes_watched, 0)
        self.assertEqual(
            stats.percentages,
            {"watch_later": 0.0, "watching": 0.0, "completed": 0.0},
        )

    def test_counts_and_average_rating(self) -> None:
        entries = [
            _entry(status="completed", rating=8),
            _entry(status="completed", rating=10),
            _entry(status="watching"),
        ]
        stats = compute_profile_stats(entries)
        self.assertEqual(stats.completed_count, 2)
        self.assertEqual(stats.watching_count, 1)
        self.assertEqual(stats.watch_later_count, 0)
        self.assertEqual(stats.total, 3)
        self.assertEqual(stats.average_rating, 9.0)

    def test_zero_rating_is_treated_as_unrated(self) -> None:
        stats = compute_profile_stats([_entry(rating=0), _entry(rating=7)])
        self.assertEqual(stats.average_rating, 7.0)

    def test_average_rating_rounds_to_one_decimal(self) -> None:
        stats = compute_profile_stats([_entry(rating=7), _entry(rating=8), _entry(rating=8)])
        self.assertEqual(stats.average_rating, 7.7)

    def test_episodes_watched_total_treats_missing_as_zero(self) -> None:
        stats = compute_profile_stats([
            _entry(episodes_watched=12),
            _entry(episodes_watched=None),
            _entry(episodes_watched=3),
        ])
        self.assertEqual(stats.total_episodes_watched, 15)

    def test_percentages(self) -> None:
        entries = [
            _entry(status="completed"),
            _entry(status="watching"),
            _entry(status="watching"),
        ]
        stats = compute_profile_stats(entries)
        self.assertEqual(stats.percentage(stats.completed_count), 33.3)
        self.assertEqual(stats.percentage(stats.watching_count), 66.7)
        self.assertEqual(stats.percentages["watch_later"], 0.0)

    def test_unrecognized_status_counts_toward_total_only(self) -> None:
        stats = compute_profile_stats([_entry(status="watch-later"), _entry(status="completed")])
        self.assertEqual(stats.total, 2)
        self.assertEqual(stats.watch_later_count, 0)
        self.assertEqual(stats.completed_count, 1)

    def test_round_one_decimal_is_half_up(self) -> None:
        self.assertEqual(round_one_decimal(8.25), 8.3)
        self.assertEqual(round_one_decimal(8.35), 8.4)


if __name__ == "__main__":
    unittest.main()
