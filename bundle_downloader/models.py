"""Pydantic schemas for bundle metadata listings."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import TypeAdapter
from pydantic import ValidationError

from .errors import MetadataDecodeError


class BundleMetadata(BaseModel):
    """Metadata describing one downloadable bundle."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field("", description="Display name")
    description: str = Field("", description="Human-readable description")
    author: str = Field("", description="Bundle author")
    bundles: dict[str, list[str]] = Field(
        default_factory=dict, description="Platform identifier -> ordered file identifiers"
    )
    tags: list[str] = Field(default_factory=list, description="Descriptive tags")
    error: str | None = Field(None, description="Problem reported by the source for this entry")
    last_updated: int = Field(0, alias="lastUpdated", description="Freshness timestamp")

    def is_newer_than(self, other: BundleMetadata) -> bool:
        """Strictly newer; equal timestamps are not newer."""
        return self.last_updated > other.last_updated

    def supports(self, platform: str) -> bool:
        return platform in self.bundles

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire format (camelCase keys, ``error`` omitted when absent)."""
        return self.model_dump(by_alias=True, exclude_none=True)


BundleListing = dict[str, BundleMetadata]

_listing_adapter: TypeAdapter[BundleListing] = TypeAdapter(BundleListing)


def parse_listing(payload: bytes | str, url: str | None = None) -> BundleListing:
    """Deserialize a metadata listing.

    Args:
        payload: Raw JSON body, an object keyed by bundle identifier
        url: Source the payload came from (for error messages)

    Returns:
        Mapping of bundle identifier to BundleMetadata

    Raises:
        MetadataDecodeError: If the body is not valid JSON or doesn't match the schema
    """
    try:
        return _listing_adapter.validate_json(payload)
    except ValidationError as e:
        where = f" from {url}" if url else ""
        raise MetadataDecodeError(
            f"Malformed bundle listing{where}: {e.error_count()} validation error(s)", url=url
        ) from e


def dump_listing(listing: BundleListing) -> dict[str, dict[str, Any]]:
    return {bundle_id: metadata.to_dict() for bundle_id, metadata in listing.items()}
