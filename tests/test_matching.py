"""Unit tests for the Haversine estimator and the tiered text matcher."""

import math

import pytest

from medifly.domain.distance import distance_km, haversine_km
from medifly.domain.entities import GeoPoint
from medifly.domain.matching import (
    digits_only,
    levenshtein,
    match_score,
    phone_score,
)


class TestHaversine:
    def test_same_point_is_zero(self):
        p = GeoPoint(12.9716, 77.5946)
        assert distance_km(p, p) == 0.0

    def test_known_distance(self):
        # Bangalore MG Road -> Indiranagar ~4 km
        d = haversine_km(12.9756, 77.6050, 12.9784, 77.6408)
        assert 3.5 < d < 4.5

    def test_one_degree_latitude(self):
        # 2πR / 360 on the default 6371 km sphere
        d = haversine_km(0.0, 0.0, 1.0, 0.0)
        assert d == pytest.approx(2 * math.pi * 6371 / 360, rel=1e-9)

    @pytest.mark.parametrize(
        "a, b",
        [
            (GeoPoint(19.0, 72.0), GeoPoint(20.0, 73.0)),
            (GeoPoint(40.7128, -74.0060), GeoPoint(34.0522, -118.2437)),
            (GeoPoint(-33.86, 151.2), GeoPoint(51.5, -0.12)),
        ],
    )
    def test_symmetric(self, a, b):
        assert distance_km(a, b) == pytest.approx(distance_km(b, a), rel=1e-9)

    def test_antipodes_do_not_fail(self):
        d = haversine_km(0.0, 0.0, 0.0, 180.0)
        assert d == pytest.approx(math.pi * 6371, rel=1e-9)

    def test_custom_radius_scales_linearly(self):
        a, b = GeoPoint(0, 0), GeoPoint(0, 1)
        assert distance_km(a, b, radius_km=1.0) * 6371 == pytest.approx(
            distance_km(a, b)
        )


class TestLevenshtein:
    @pytest.mark.parametrize(
        "a, b, expected",
        [
            ("", "", 0),
            ("abc", "", 3),
            ("", "abc", 3),
            ("kitten", "sitting", 3),
            ("flaw", "lawn", 2),
            ("paracetamol", "paracetmol", 1),
        ],
    )
    def test_known_values(self, a, b, expected):
        assert levenshtein(a, b) == expected


class TestMatchScore:
    def test_exact_is_case_insensitive(self):
        assert match_score("central pharmacy", "Central Pharmacy") == 100

    def test_substring_scores_80(self):
        assert match_score("Para", "Paracetamol 500mg") == 80

    def test_fuzzy_uses_sixty_point_scale(self):
        # one edit over 11 characters
        assert match_score("paracetmol", "paracetamol") == pytest.approx(10 / 11 * 60)

    def test_fuzzy_cap_scales_only_the_fuzzy_tier(self):
        assert match_score("paracetmol", "paracetamol", fuzzy_cap=30) == pytest.approx(10 / 11 * 30)
        assert match_score("para", "paracetamol", fuzzy_cap=30) == 80
        assert match_score("paracetamol", "Paracetamol", fuzzy_cap=30) == 100

    def test_completely_different_scores_zero(self):
        assert match_score("abc", "xyz") == 0

    def test_both_empty_is_exact(self):
        assert match_score("", "") == 100

    def test_empty_query_is_contained_everywhere(self):
        assert match_score("", "anything") == 80

    @pytest.mark.parametrize(
        "query, candidate",
        [
            ("pharmcy", "pharmacy"),
            ("centrall", "central"),
            ("ab", "ba"),
            ("medplus koramangala", "koramangala medplus"),
            ("x", "y"),
        ],
    )
    def test_fuzzy_never_reaches_substring_tier(self, query, candidate):
        assert query.lower() not in candidate.lower()
        assert match_score(query, candidate) < 80

    @pytest.mark.parametrize(
        "query, candidate",
        [("main", "123 Main St"), ("MG", "MG Road Pharmacy"), ("st", "123 main st")],
    )
    def test_containment_at_least_80(self, query, candidate):
        assert match_score(query, candidate) >= 80


class TestPhoneScore:
    def test_digits_only(self):
        assert digits_only("+1-212-555-0100") == "12125550100"

    def test_formatted_query_matches(self):
        assert phone_score("555-0100", "+1-212-555-0100") == 100

    def test_plain_digits_match(self):
        assert phone_score("5550100", "+1-212-555-0100") == 100

    def test_short_digit_runs_ignored(self):
        assert phone_score("55", "+1-212-555-0100") == 0

    def test_text_query_never_matches(self):
        assert phone_score("central", "+1-212-555-0100") == 0

    def test_non_matching_digits(self):
        assert phone_score("999", "+1-212-555-0100") == 0
