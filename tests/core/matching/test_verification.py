"""Tests for fuzzy title verification."""

from __future__ import annotations

import pytest
from conftest import make_media

from aniresolve.config import ResolverSettings
from aniresolve.core.matching import TitleVerifier, is_verified, title_distance
from aniresolve.core.matching.verification import entity_has_season, threshold_for_title
from aniresolve.core.parser import ParsedName
from aniresolve.shared.constants import VerificationThresholds


class TestTitleDistance:
    """Distance between a query and a single title."""

    def test_identical_titles(self) -> None:
        assert title_distance("Attack on Titan", "Attack on Titan") == 0.0

    def test_case_and_punctuation_are_ignored(self) -> None:
        assert title_distance("frieren beyond journeys end", "Frieren: Beyond Journey's End") <= 0.05

    def test_prefix_of_longer_title(self) -> None:
        assert title_distance("Frieren", "Frieren: Beyond Journey's End") == 0.0

    def test_accents_are_stripped(self) -> None:
        assert title_distance("Pokemon", "Pokémon") == 0.0

    def test_match_offset_adds_penalty(self) -> None:
        assert title_distance("Titan", "Attack on Titan") == pytest.approx(0.1)

    def test_unrelated_titles_are_far(self) -> None:
        assert title_distance("Naruto", "Bleach") > 0.5

    @pytest.mark.parametrize(("query", "text"), [("", "Bleach"), ("Bleach", ""), ("!!", "Bleach")])
    def test_empty_input_is_maximal(self, query: str, text: str) -> None:
        assert title_distance(query, text) == 1.0


class TestThresholds:
    """Length-scaled thresholds."""

    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Frieren", VerificationThresholds.SHORT),
            ("Kimi no Na wa", VerificationThresholds.MEDIUM),
            ("Attack on Titan S2", VerificationThresholds.LONG),
        ],
    )
    def test_threshold_scales_with_length(self, title: str, expected: float) -> None:
        assert threshold_for_title(title) == expected

    def test_settings_override_thresholds(self) -> None:
        settings = ResolverSettings(short_title_threshold=0.05)

        assert TitleVerifier(settings).threshold_for("Frieren") == 0.05


class TestEntityHasSeason:
    @pytest.mark.parametrize(
        "title",
        ["Attack on Titan Season 2", "Attack on Titan 2nd Season", "Show S2"],
    )
    def test_season_titles(self, title: str) -> None:
        assert entity_has_season(make_media(1, title), VerificationThresholds.TITLE_KEYS)

    def test_plain_title(self) -> None:
        assert not entity_has_season(make_media(1, "Seasons of Love"), VerificationThresholds.TITLE_KEYS)


class TestIsVerified:
    """Acceptance of catalogue matches."""

    def test_missing_media_is_rejected(self) -> None:
        assert not is_verified(None, ParsedName(anime_title="Frieren"))

    def test_exact_title_is_accepted(self) -> None:
        media = make_media(1, "Sousou no Frieren")

        assert is_verified(media, ParsedName(anime_title="Sousou no Frieren"), threshold=0.1)

    def test_synonym_is_checked(self) -> None:
        media = make_media(1, "Sousou no Frieren", synonyms=["Frieren at the Funeral"])

        assert is_verified(media, ParsedName(anime_title="Frieren at the Funeral"), threshold=0.1)

    def test_unrelated_title_is_rejected(self) -> None:
        media = make_media(1, "Bleach")

        assert not is_verified(media, ParsedName(anime_title="Naruto Shippuden"), threshold=0.2)

    def test_later_year_is_rejected(self) -> None:
        media = make_media(1, "Hunter x Hunter", season_year=1999)

        assert not is_verified(media, ParsedName(anime_title="Hunter x Hunter", anime_year=2011), threshold=0.2)

    def test_unknown_season_year_with_parsed_year_is_rejected(self) -> None:
        media = make_media(1, "Hunter x Hunter")

        assert not is_verified(media, ParsedName(anime_title="Hunter x Hunter", anime_year=2011), threshold=0.2)

    def test_same_year_is_accepted(self) -> None:
        media = make_media(1, "Hunter x Hunter", season_year=2011)

        assert is_verified(media, ParsedName(anime_title="Hunter x Hunter", anime_year=2011), threshold=0.2)

    def test_season_marker_matches_ordinal_title(self) -> None:
        media = make_media(2, "Attack on Titan 2nd Season")
        parsed = ParsedName(anime_title="Attack on Titan S2", anime_season=2)

        assert is_verified(media, parsed, threshold=0.2)

    def test_season_marker_matches_season_title(self) -> None:
        media = make_media(2, "Attack on Titan Season 2")
        parsed = ParsedName(anime_title="Attack on Titan S2", anime_season=2)

        assert is_verified(media, parsed, threshold=0.2)

    def test_verifier_uses_length_threshold(self) -> None:
        verifier = TitleVerifier()
        media = make_media(1, "Attack on Titan")

        assert verifier.is_verified(media, ParsedName(anime_title="Attack on Titan"))
