import os

import pytest

from trackbot.catalog import TrackCatalog


def test_lookup_resolves_against_base_dir(catalog):
    assert catalog.lookup("Летова") == os.path.join("/srv/assets", "letov1.mp3")
    assert catalog.lookup("че-нить пушистое") == os.path.join("/srv/assets", "fluff.mp3")


def test_lookup_unknown_and_empty(catalog):
    assert catalog.lookup("Моцарт") is None
    assert catalog.lookup("") is None
    assert "Моцарт" not in catalog


def test_lookup_is_case_insensitive_fallback():
    c = TrackCatalog({"Летова": "a.mp3", "летова": "b.mp3"})
    assert c.lookup("летова") == "b.mp3"
    assert c.lookup("ЛЕТОВА") == "a.mp3"


def test_absolute_paths_are_kept():
    absolute = os.path.abspath("x.mp3")
    c = TrackCatalog({"x": absolute}, base_dir="/elsewhere")
    assert c.lookup("x") == absolute


def test_catalog_is_read_only(catalog):
    assert len(catalog) == 3
    assert sorted(catalog) == sorted(catalog.names())
    with pytest.raises(TypeError):
        catalog._entries["new"] = "new.mp3"


def test_catalog_is_independent_of_source_mapping():
    entries = {"a": "a.mp3"}
    c = TrackCatalog(entries)
    entries["b"] = "b.mp3"
    assert c.lookup("b") is None


def test_from_config():
    c = TrackCatalog.from_config({"tracks": {"a": "a.mp3"}, "assets_dir": "music"})
    assert c.lookup("a") == os.path.join("music", "a.mp3")
    assert len(TrackCatalog.from_config({})) == 0
