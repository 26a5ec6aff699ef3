import unittest
from unittest.mock import patch

from sqlite_session import make_session, make_user

from animetrack.db.models import ThemeEnum, UserProfile
from animetrack.schemas.watchlist import AddWatchlistEntryRequest
from animetrack.services import profile_service
from animetrack.services.profile_service import get_profile, get_theme, list_themes, set_theme
from animetrack.services.watchlist_service import add_entry


class TestProfileService(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session()
        self.user = make_user(self.db, email="fan@example.com")

    def tearDown(self) -> None:
        self.db.close()

    def test_theme_defaults_to_starry_without_profile_row(self) -> None:
        self.assertEqual(get_theme(self.db, self.user.id), ThemeEnum.STARRY)
        self.assertEqual(self.db.query(UserProfile).count(), 0)

    def test_set_theme_creates_then_updates_profile(self) -> None:
        set_theme(self.db, self.user, ThemeEnum.NEON)
        self.assertEqual(get_theme(self.db, self.user.id), ThemeEnum.NEON)

        set_theme(self.db, self.user, ThemeEnum.SAKURA)
        self.assertEqual(get_theme(self.db, self.user.id), ThemeEnum.SAKURA)
        self.assertEqual(self.db.query(UserProfile).count(), 1)

    def test_set_theme_recovers_when_profile_created_concurrently(self) -> None:
        # Another request inserts the row between our read and our insert
        competing = UserProfile(id=self.user.id, email=self.user.email, theme="neon")
        self.db.add(competing)
        self.db.commit()
        self.db.expunge(competing)

        real_find_profile = profile_service._find_profile
        calls = []

        def find_profile(db, user_id):
            calls.append(user_id)
            if len(calls) == 1:
                return None
            return real_find_profile(db, user_id)

        with patch(
            "animetrack.services.profile_service._find_profile",
            side_effect=find_profile,
        ):
            result = set_theme(self.db, self.user, ThemeEnum.SAKURA)

        self.assertEqual(result, ThemeEnum.SAKURA)
        self.assertEqual(len(calls), 2)
        self.assertEqual(get_theme(self.db, self.user.id), ThemeEnum.SAKURA)
        self.assertEqual(self.db.query(UserProfile).count(), 1)

    def test_list_themes_covers_every_theme(self) -> None:
        keys = [theme["key"] for theme in list_themes()]
        self.assertEqual(keys, list(ThemeEnum))

    def test_profile_includes_stats(self) -> None:
        add_entry(
            self.db,
            self.user.id,
            AddWatchlistEntryRequest(external_media_id=1, title="Mushishi"),
        )

        profile = get_profile(self.db, self.user)

        self.assertEqual(profile["email"], "fan@example.com")
        self.assertEqual(profile["theme"], ThemeEnum.STARRY)
        self.assertEqual(profile["stats"]["total"], 1)
        self.assertEqual(profile["stats"]["watch_later_count"], 1)
        self.assertEqual(profile["stats"]["average_rating"], 0)


if __name__ == "__main__":
    unittest.main()
