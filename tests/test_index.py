# tests/test_index.py
"""Tests for the identifier index and its builder."""

from pathlib import Path

import pytest

from assetdir.asset import Entry
from assetdir.errors import FallbackMissingError
from assetdir.index import AssetIndex, IndexBuilder, normalize_locale

ROOT = Path("/data/weapons")


def entry(name: str, value=None) -> Entry:
    return Entry(path=ROOT / name, value=value if value is not None else name)


class TestNormalizeLocale:
    def test_default_used(self):
        assert normalize_locale(None, "en_us") == "en_us"
        assert normalize_locale("", "en_us") == "en_us"

    def test_lower_cased(self):
        assert normalize_locale(" FR_FR ", "en_us") == "fr_fr"


class TestFlatIndex:
    """Test non-localized indexes."""

    def test_lookup(self):
        builder = IndexBuilder(ROOT)
        builder.insert("sword", None, entry("sword.yml"))
        index = builder.build()
        assert index.lookup("sword").path == ROOT / "sword.yml"
        assert index.lookup("bow") is None

    def test_locale_ignored(self):
        builder = IndexBuilder(ROOT)
        builder.insert("sword", "fr_fr", entry("sword.yml"))
        index = builder.build()
        assert index.lookup("sword", "de_de") is not None
        assert index.locales() == []

    def test_empty_lookup_is_none(self):
        assert AssetIndex(ROOT).lookup("anything") is None


class TestLocalizedIndex:
    """Test locale partitions and fallback."""

    def build(self, *items):
        builder = IndexBuilder(ROOT, "en_us")
        for identifier, locale, name in items:
            builder.insert(identifier, locale, entry(name))
        return builder.build()

    def test_missing_locale_goes_to_default(self):
        index = self.build(("sword", None, "sword.yml"))
        assert index.locales() == ["en_us"]

    def test_exact_partition(self):
        index = self.build(("sword", "en_us", "en.yml"), ("sword", "fr_fr", "fr.yml"))
        assert index.lookup("sword", "fr_fr").path == ROOT / "fr.yml"
        assert index.lookup("sword").path == ROOT / "en.yml"

    def test_locale_case_insensitive(self):
        index = self.build(("sword", "FR_FR", "fr.yml"), ("sword", "en_us", "en.yml"))
        assert index.lookup("sword", "fr_FR").path == ROOT / "fr.yml"

    def test_fallback_to_default(self):
        """A locale without a partition reads the default partition."""
        index = self.build(("sword", "en_us", "en.yml"))
        assert index.lookup("sword", "fr_fr").path == ROOT / "en.yml"

    def test_no_fallback_inside_existing_partition(self):
        """A present partition is used even when it lacks the identifier."""
        index = self.build(("sword", "en_us", "en.yml"), ("bow", "fr_fr", "bow.yml"))
        assert index.lookup("sword", "fr_fr") is None

    def test_fallback_missing(self):
        index = self.build(("sword", "de_de", "de.yml"))
        with pytest.raises(FallbackMissingError) as exc_info:
            index.lookup("sword", "fr_fr")
        assert "Couldn't fallback to default locale" in str(exc_info.value)
        assert "en_us" in str(exc_info.value)

    def test_empty_localized_index_raises(self):
        with pytest.raises(FallbackMissingError):
            AssetIndex(ROOT, "en_us").lookup("sword")

    def test_lookup_any_prefers_default(self):
        index = self.build(("sword", "fr_fr", "fr.yml"), ("sword", "en_us", "en.yml"),
                           ("bow", "fr_fr", "bow.yml"))
        assert index.lookup_any("sword").path == ROOT / "en.yml"
        assert index.lookup_any("bow").path == ROOT / "bow.yml"
        assert index.lookup_any("axe") is None

    def test_identifiers_union(self):
        index = self.build(("sword", "fr_fr", "a.yml"), ("bow", "en_us", "b.yml"),
                           ("sword", "en_us", "c.yml"))
        assert index.identifiers() == {"sword", "bow"}
        assert len(index) == 2
        assert "bow" in index
        assert "axe" not in index

    def test_peek_has_no_fallback(self):
        index = self.build(("sword", "en_us", "en.yml"))
        assert index.peek("sword", "fr_fr") is None
        assert index.peek("sword", "EN_US").path == ROOT / "en.yml"


class TestDuplicates:
    """Test last-wins collisions."""

    def test_last_insert_wins(self):
        builder = IndexBuilder(ROOT)
        builder.insert("sword", None, entry("a/sword.yml", "first"))
        previous = builder.insert("sword", None, entry("b/sword.yml", "second"))
        assert previous.value == "first"
        assert builder.build().lookup("sword").value == "second"

    def test_all_paths_recorded(self):
        builder = IndexBuilder(ROOT)
        for name in ("a.yml", "b.yml", "c.yml"):
            builder.insert("sword", None, entry(name))
        duplicates = list(builder.duplicates)
        assert len(duplicates) == 1
        assert duplicates[0].paths == [ROOT / "a.yml", ROOT / "b.yml", ROOT / "c.yml"]
        assert "'sword'" in duplicates[0].describe()

    def test_same_identifier_other_locale_not_duplicate(self):
        builder = IndexBuilder(ROOT, "en_us")
        builder.insert("sword", "en_us", entry("en.yml"))
        builder.insert("sword", "fr_fr", entry("fr.yml"))
        assert len(builder.duplicates) == 0
        assert len(builder) == 2


class TestWithEntry:
    """Test copy-on-write updates."""

    def test_original_untouched(self):
        builder = IndexBuilder(ROOT)
        builder.insert("sword", None, entry("sword.yml"))
        before = builder.build()
        after = before.with_entry("bow", None, entry("bow.yml"))
        assert "bow" in after
        assert "bow" not in before

    def test_replace(self):
        index = AssetIndex(ROOT).with_entry("sword", None, entry("sword.yml", "old"))
        index = index.with_entry("sword", None, entry("sword.yml", "new"))
        assert index.lookup("sword").value == "new"
        assert len(index) == 1

    def test_new_partition(self):
        index = AssetIndex(ROOT, "en_us").with_entry("sword", "fr_fr", entry("fr.yml"))
        assert index.locales() == ["fr_fr"]
        assert index.lookup("sword", "fr_fr").path == ROOT / "fr.yml"

    def test_entries(self):
        index = AssetIndex(ROOT, "en_us")
        index = index.with_entry("sword", "fr_fr", entry("fr.yml"))
        index = index.with_entry("bow", None, entry("bow.yml"))
        assert [(k, e.path.name) for k, e in index.entries()] == [
            ("en_us", "bow.yml"),
            ("fr_fr", "fr.yml"),
        ]
