"""Tests for BundleMetadata and listing decoding."""

import pytest
from bundle_downloader.errors import MetadataDecodeError
from bundle_downloader.models import BundleMetadata
from bundle_downloader.models import dump_listing
from bundle_downloader.models import parse_listing

from .conftest import listing_bytes
from .conftest import make_entry


class TestParseListing:
    def test_parses_wire_fields(self):
        listing = parse_listing(
            listing_bytes(
                {
                    "forest": {
                        "name": "Forest",
                        "description": "Trees",
                        "author": "ana",
                        "bundles": {"Windows": ["forest_win", "forest_shared"], "Android": ["forest_android"]},
                        "tags": ["nature", "outdoor"],
                        "lastUpdated": 1700000000,
                    }
                }
            )
        )

        forest = listing["forest"]
        assert forest.name == "Forest"
        assert forest.author == "ana"
        assert forest.bundles["Windows"] == ["forest_win", "forest_shared"]
        assert forest.tags == ["nature", "outdoor"]
        assert forest.last_updated == 1700000000
        assert forest.error is None

    def test_keeps_source_error(self):
        listing = parse_listing(listing_bytes({"broken": make_entry(1, error="build failed")}))
        assert listing["broken"].error == "build failed"

    def test_ignores_unknown_fields(self):
        listing = parse_listing(listing_bytes({"forest": make_entry(1, thumbnail="forest.png")}))
        assert "forest" in listing

    def test_invalid_json_raises_decode_error(self):
        with pytest.raises(MetadataDecodeError, match="Malformed bundle listing from https://example.com/a.json"):
            parse_listing(b"{not json", url="https://example.com/a.json")

    def test_wrong_shape_raises_decode_error(self):
        with pytest.raises(MetadataDecodeError) as exc_info:
            parse_listing(listing_bytes({"forest": {"lastUpdated": "yesterday"}}))
        assert exc_info.value.url is None

    def test_top_level_array_is_rejected(self):
        with pytest.raises(MetadataDecodeError):
            parse_listing(b"[]")

    def test_empty_object_is_empty_listing(self):
        assert parse_listing(b"{}") == {}


class TestBundleMetadata:
    def test_error_omitted_from_dump_when_absent(self):
        metadata = BundleMetadata.model_validate(make_entry(3))
        dumped = metadata.to_dict()

        assert "error" not in dumped
        assert dumped["lastUpdated"] == 3

    def test_error_included_when_present(self):
        metadata = BundleMetadata.model_validate(make_entry(3, error="missing files"))
        assert metadata.to_dict()["error"] == "missing files"

    def test_populate_by_field_name(self):
        metadata = BundleMetadata(name="x", last_updated=9)
        assert metadata.last_updated == 9

    def test_is_newer_than_is_strict(self):
        older = BundleMetadata(last_updated=1)
        same = BundleMetadata(last_updated=1)
        newer = BundleMetadata(last_updated=2)

        assert newer.is_newer_than(older)
        assert not same.is_newer_than(older)
        assert not older.is_newer_than(newer)

    def test_dump_listing_uses_wire_names(self):
        listing = parse_listing(listing_bytes({"forest": make_entry(5, platforms=("OSX",))}))
        assert dump_listing(listing) == {
            "forest": {
                "name": "Bundle",
                "description": "",
                "author": "tester",
                "bundles": {"OSX": ["osx.bundle"]},
                "tags": [],
                "lastUpdated": 5,
            }
        }
