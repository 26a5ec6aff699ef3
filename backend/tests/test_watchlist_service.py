import unittest
from uuid import uuid4

from sqlalchemy.exc import IntegrityError

from sqlite_session import make_session, make_user

from animetrack.db.models import WatchStatusEnum
from animetrack.schemas.watchlist import AddWatchlistEntryRequest, UpdateWatchlistEntryRequest
from animetrack.services.watchlist_service import (
    DuplicateEntryError,
    EntryNotFoundError,
    add_entry,
    delete_entry,
    estimate_for_owner,
    grouped_watchlist,
    is_unique_violation,
    list_entries,
    owned_media_ids,
    stats_for_owner,
    update_entry,
)


def _add(db, owner_id, media_id, **overrides):
    payload = {"external_media_id": media_id, "title": f"Anime {media_id}"}
    payload.update(overrides)
    return add_entry(db, owner_id, AddWatchlistEntryRequest(**payload))


class TestWatchlistService(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session()
        self.owner = make_user(self.db)
        self.other = make_user(self.db)

    def tearDown(self) -> None:
        self.db.close()

    def test_add_defaults_to_watch_later_with_zero_progress(self) -> None:
        entry = _add(self.db, self.owner.id, 21, total_episodes=1000)

        self.assertEqual(entry.status, "watch_later")
        self.assertEqual(entry.episodes_watched, 0)
        self.assertIsNone(entry.rating)
        self.assertEqual(entry.owner_id, self.owner.id)

    def test_duplicate_add_is_rejected_and_list_unchanged(self) -> None:
        _add(self.db, self.owner.id, 21)

        with self.assertRaises(DuplicateEntryError) as ctx:
            _add(self.db, self.owner.id, 21, status=WatchStatusEnum.WATCHING)

        self.assertEqual(str(ctx.exception), "This anime is already in your list")
        entries = list_entries(self.db, self.owner.id)
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].status, "watch_later")

    def test_same_anime_for_different_owners_is_allowed(self) -> None:
        _add(self.db, self.owner.id, 21)
        _add(self.db, self.other.id, 21)

        self.assertEqual(owned_media_ids(self.db, self.owner.id), {21})
        self.assertEqual(owned_media_ids(self.db, self.other.id), {21})

    def test_list_is_scoped_to_owner_and_filters_status(self) -> None:
        _add(self.db, self.owner.id, 1, status=WatchStatusEnum.WATCHING)
        _add(self.db, self.owner.id, 2, status=WatchStatusEnum.COMPLETED)
        _add(self.db, self.other.id, 3)

        mine = list_entries(self.db, self.owner.id)
        self.assertEqual({e.external_media_id for e in mine}, {1, 2})

        watching = list_entries(self.db, self.owner.id, [WatchStatusEnum.WATCHING])
        self.assertEqual([e.external_media_id for e in watching], [1])

    def test_update_progress_rating_and_notes(self) -> None:
        entry = _add(self.db, self.owner.id, 5, total_episodes=12)

        updated = update_entry(
            self.db,
            self.owner.id,
            entry.id,
            UpdateWatchlistEntryRequest(
                status=WatchStatusEnum.WATCHING,
                episodes_watched=4,
                rating=8,
                notes="  great opening  ",
            ),
        )
        self.assertEqual(updated.status, "watching")
        self.assertEqual(updated.episodes_watched, 4)
        self.assertEqual(updated.rating, 8)
        self.assertEqual(updated.notes, "great opening")

        cleared = update_entry(
            self.db,
            self.owner.id,
            entry.id,
            UpdateWatchlistEntryRequest(rating=0, notes="   "),
        )
        self.assertIsNone(cleared.rating)
        self.assertIsNone(cleared.notes)
        # Fields not sent stay as they were
        self.assertEqual(cleared.episodes_watched, 4)
        self.assertEqual(cleared.status, "watching")

    def test_update_of_someone_elses_entry_is_not_found(self) -> None:
        entry = _add(self.db, self.other.id, 5)

        with self.assertRaises(EntryNotFoundError):
            update_entry(
                self.db,
                self.owner.id,
                entry.id,
                UpdateWatchlistEntryRequest(episodes_watched=3),
            )

    def test_delete_is_scoped_to_owner(self) -> None:
        entry = _add(self.db, self.owner.id, 9)

        self.assertFalse(delete_entry(self.db, self.other.id, entry.id))
        self.assertFalse(delete_entry(self.db, self.owner.id, uuid4()))
        self.assertTrue(delete_entry(self.db, self.owner.id, entry.id))
        self.assertEqual(list_entries(self.db, self.owner.id), [])

    def test_grouped_watchlist_buckets(self) -> None:
        _add(self.db, self.owner.id, 1, status=WatchStatusEnum.WATCHING)
        _add(self.db, self.owner.id, 2)

        grouped = grouped_watchlist(self.db, self.owner.id)

        self.assertEqual([e.external_media_id for e in grouped["watching"]], [1])
        self.assertEqual([e.external_media_id for e in grouped["watch_later"]], [2])
        self.assertEqual(grouped["completed"], [])
        self.assertEqual(grouped["unrecognized_count"], 0)

    def test_estimate_and_stats_use_owner_entries(self) -> None:
        first = _add(self.db, self.owner.id, 1, total_episodes=12)
        second = _add(self.db, self.owner.id, 2, total_episodes=24)
        update_entry(
            self.db, self.owner.id, first.id,
            UpdateWatchlistEntryRequest(status=WatchStatusEnum.WATCHING, episodes_watched=5),
        )
        update_entry(
            self.db, self.owner.id, second.id,
            UpdateWatchlistEntryRequest(
                status=WatchStatusEnum.COMPLETED, episodes_watched=24, rating=10,
            ),
        )
        _add(self.db, self.other.id, 3, total_episodes=500)

        estimate = estimate_for_owner(self.db, self.owner.id, "all", 24)
        self.assertEqual(estimate.total_episodes_remaining, 7)
        self.assertEqual((estimate.days, estimate.hours, estimate.minutes), (0, 2, 48))

        single = estimate_for_owner(self.db, self.owner.id, str(first.id), 24)
        self.assertEqual(single.total_episodes_remaining, 7)

        stats = stats_for_owner(self.db, self.owner.id)
        self.assertEqual(stats.total, 2)
        self.assertEqual(stats.completed_count, 1)
        self.assertEqual(stats.watching_count, 1)
        self.assertEqual(stats.average_rating, 10.0)
        self.assertEqual(stats.total_episodes_watched, 29)


class PgError(Exception):
    def __init__(self, message: str, pgcode: str) -> None:
        super().__init__(message)
        self.pgcode = pgcode


def _integrity_error(orig: Exception) -> IntegrityError:
    return IntegrityError("INSERT INTO watchlist_entries ...", {}, orig)


class TestIsUniqueViolation(unittest.TestCase):
    def test_unique_violations_are_recognised(self) -> None:
        for orig in [
            PgError('duplicate key value violates unique constraint "uq_watchlist_owner_media"', "23505"),
            Exception("UNIQUE constraint failed: watchlist_entries.owner_id"),
        ]:
            with self.subTest(orig=str(orig)):
                self.assertTrue(is_unique_violation(_integrity_error(orig)))

    def test_other_integrity_failures_are_not(self) -> None:
        for orig in [
            PgError('insert or update on table "watchlist_entries" violates foreign key constraint', "23503"),
            PgError('null value in column "title" violates not-null constraint', "23502"),
            Exception("NOT NULL constraint failed: watchlist_entries.title"),
            Exception("CHECK constraint failed: chk_watchlist_rating_1_10"),
        ]:
            with self.subTest(orig=str(orig)):
                self.assertFalse(is_unique_violation(_integrity_error(orig)))


if __name__ == "__main__":
    unittest.main()
