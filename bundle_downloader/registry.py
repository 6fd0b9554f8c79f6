"""Metadata registry: merged, deduplicated bundle metadata keyed by bundle identifier."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from collections.abc import Mapping

from .errors import BundleNotFoundError
from .models import BundleMetadata

logger = logging.getLogger(__name__)


class MetadataRegistry:
    """Holds the authoritative BundleMetadata per bundle identifier.

    Conflicts are resolved purely by freshness: an incoming record replaces
    the known one only when its ``lastUpdated`` is strictly greater. Ties keep
    the existing record, so merging the same listing twice is a no-op.
    """

    def __init__(self) -> None:
        self._entries: dict[str, BundleMetadata] = {}
        self._lock = threading.Lock()

    def merge_incoming(self, incoming: Mapping[str, BundleMetadata]) -> list[str]:
        """Merge a listing into the registry.

        Args:
            incoming: Mapping of bundle identifier to metadata from one source

        Returns:
            Identifiers that were inserted or replaced
        """
        changed: list[str] = []
        with self._lock:
            for bundle_id, metadata in incoming.items():
                known = self._entries.get(bundle_id)
                if known is not None and not metadata.is_newer_than(known):
                    logger.debug(
                        f"Discarding {bundle_id} (lastUpdated {metadata.last_updated} "
                        f"<= known {known.last_updated})"
                    )
                    continue
                self._entries[bundle_id] = metadata
                changed.append(bundle_id)

        if changed:
            logger.debug(f"Merged {len(changed)} of {len(incoming)} incoming bundle entries")
        return changed

    def lookup(self, bundle_id: str) -> BundleMetadata:
        """Get metadata for a bundle.

        Raises:
            BundleNotFoundError: If no source has described this bundle
        """
        try:
            return self._entries[bundle_id]
        except KeyError:
            raise BundleNotFoundError(bundle_id) from None

    def get(self, bundle_id: str) -> BundleMetadata | None:
        return self._entries.get(bundle_id)

    def compatible_bundles(self, platform: str) -> list[BundleMetadata]:
        """Entries that ship a variant for ``platform``, in registry order."""
        return [metadata for metadata in list(self._entries.values()) if metadata.supports(platform)]

    def compatible_ids(self, platform: str) -> list[str]:
        return [bundle_id for bundle_id, metadata in list(self._entries.items()) if metadata.supports(platform)]

    def ids(self) -> list[str]:
        return list(self._entries)

    def entries(self) -> dict[str, BundleMetadata]:
        """Snapshot of the registry contents."""
        return dict(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, bundle_id: object) -> bool:
        return bundle_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))
