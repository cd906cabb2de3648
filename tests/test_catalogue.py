"""Unit tests for medicine catalogue search and maintenance helpers."""

import pytest

from medifly.domain.catalogue import (
    duplicate_medicines,
    list_categories,
    search_medicines,
)
from medifly.domain.entities import Medicine
from medifly.domain.matching import match_score


def _medicine(id, name, description="", category="Pain Relief", in_stock=True):
    return Medicine(
        id=id,
        name=name,
        description=description,
        category=category,
        price=5.0,
        in_stock=in_stock,
    )


@pytest.fixture
def catalogue():
    return [
        _medicine(1, "Paracetamol 500mg", "Pain reliever and fever reducer"),
        _medicine(2, "Amoxicillin 250mg", "Antibiotic for bacterial infections", "Antibiotics"),
        _medicine(3, "Ibuprofen 400mg", "Anti-inflammatory pain reliever"),
        _medicine(4, "Cetirizine 10mg", "Antihistamine for allergies", "Allergy"),
        _medicine(5, "Vitamin D3", "Bone health", "Vitamins", in_stock=False),
    ]


class TestSearchMedicines:
    def test_no_query_returns_in_stock(self, catalogue):
        assert [m.id for m in search_medicines(catalogue)] == [1, 2, 3, 4]

    def test_category_filter(self, catalogue):
        found = search_medicines(catalogue, category="Pain Relief")
        assert [m.id for m in found] == [1, 3]

    def test_empty_category_is_no_filter(self, catalogue):
        assert search_medicines(catalogue, category="") == search_medicines(catalogue)

    def test_unknown_category_is_empty(self, catalogue):
        assert search_medicines(catalogue, category="Cardiology") == []

    def test_substring_on_name_or_description(self, catalogue):
        # "pain" appears in the descriptions of 1 and 3
        found = search_medicines(catalogue, text="PAIN")
        assert [m.id for m in found[:2]] == [1, 3]

    def test_substring_hits_before_fuzzy(self, catalogue):
        found = search_medicines(catalogue, text="ibuprofen")
        assert found[0].id == 3

    def test_misspelling_found_by_fuzzy_tier(self, catalogue):
        found = search_medicines(catalogue, text="paracetmol 500mg")
        assert found[0].id == 1
        assert match_score("paracetmol 500mg", found[0].name) == pytest.approx(16 / 17 * 60)

    def test_out_of_stock_never_returned(self, catalogue):
        assert search_medicines(catalogue, text="vitamin") == []

    def test_nonsense_returns_nothing(self, catalogue):
        assert search_medicines(catalogue, text="qqqqqqqqqq") == []

    def test_threshold_is_configurable(self, catalogue):
        loose = search_medicines(catalogue, text="paracetmol 500mg", threshold=0)
        assert len(loose) >= 1
        strict = search_medicines(catalogue, text="paracetmol 500mg", threshold=59)
        assert strict == []

    def test_fuzzy_cap_is_configurable(self, catalogue):
        # 16/17 similarity: 56.5 at the default cap, 18.8 at a cap of 20
        assert search_medicines(catalogue, text="paracetmol 500mg", fuzzy_cap=20) == []

    def test_blank_text_is_no_filter(self, catalogue):
        assert search_medicines(catalogue, text="  ") == search_medicines(catalogue)


class TestCategoriesAndDuplicates:
    def test_categories_sorted_and_distinct(self, catalogue):
        assert list_categories(catalogue) == [
            "Allergy",
            "Antibiotics",
            "Pain Relief",
            "Vitamins",
        ]

    def test_duplicates_keep_first(self):
        meds = [
            _medicine(1, "Paracetamol 500mg"),
            _medicine(2, "Ibuprofen 400mg"),
            _medicine(3, "Paracetamol 500mg"),
            _medicine(4, "Paracetamol 500mg"),
        ]
        assert [m.id for m in duplicate_medicines(meds)] == [3, 4]

    def test_no_duplicates(self, catalogue):
        assert duplicate_medicines(catalogue) == []
