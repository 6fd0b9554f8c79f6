"""Bundle downloader: metadata sync and payload fetch orchestration."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from types import TracebackType
from urllib.parse import urljoin

from .cache import BundleCache
from .cache import PayloadHandle
from .errors import BundleNotFoundError
from .models import BundleMetadata
from .models import parse_listing
from .platform_key import detect_platform
from .registry import MetadataRegistry
from .settings import DownloaderSettings
from .transport import HttpxTransport
from .transport import Transport

logger = logging.getLogger(__name__)


class BundleDownloader:
    """Fetches bundle metadata listings and bundle payloads.

    Owns one MetadataRegistry and one BundleCache for the lifetime of the
    session. Create a fresh instance to start over.
    """

    def __init__(
        self,
        settings: DownloaderSettings | None = None,
        transport: Transport | None = None,
        registry: MetadataRegistry | None = None,
        cache: BundleCache | None = None,
    ):
        """Initialize downloader.

        Args:
            settings: Effective settings. If None, defaults are used.
            transport: Fetch primitive. If None, an HttpxTransport is created and closed by aclose().
            registry: Metadata registry to merge into (new one if None)
            cache: Payload cache (new one if None)
        """
        self.settings = settings or DownloaderSettings()
        self._owns_transport = transport is None
        self.transport: Transport = transport or HttpxTransport(timeout=self.settings.timeout)
        self.registry = registry or MetadataRegistry()
        self.cache = cache or BundleCache()
        self.platform = detect_platform(self.settings.platform)

    async def __aenter__(self) -> BundleDownloader:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_transport:
            await self.transport.aclose()

    def on_enable(self) -> None:
        """Discard payloads from a previous session if configured to."""
        if self.settings.unload_on_enable:
            self.unload_all()

    # ----- Metadata -----

    async def sync_all(self, sources: Sequence[str] | None = None) -> None:
        """Request metadata listings from all sources and merge them.

        Sources are fetched concurrently and each listing is merged as soon as
        it arrives. Waits for every source; if any failed, the first failure
        (in source order) is raised afterwards. Listings merged from other
        sources are kept.

        Args:
            sources: Listing URLs. If None, the configured sources are used.

        Raises:
            TransportError: A source could not be fetched
            MetadataDecodeError: A source returned a malformed listing
        """
        sources = list(self.settings.sources if sources is None else sources)
        logger.info(f"Syncing bundle metadata from {len(sources)} source(s)")

        results = await asyncio.gather(*(self._sync_source(url) for url in sources), return_exceptions=True)

        failures = [
            (url, result) for url, result in zip(sources, results, strict=True) if isinstance(result, BaseException)
        ]
        if not failures:
            logger.info(f"Metadata sync complete: {len(self.registry)} known bundle(s)")
            return

        for url, error in failures[1:]:
            logger.warning(f"Additional metadata source failure for {url}: {error}")
        raise failures[0][1]

    async def _sync_source(self, url: str) -> None:
        body = await self.transport.fetch(url)
        listing = parse_listing(body, url=url)
        changed = self.registry.merge_incoming(listing)
        logger.debug(f"{url}: {len(listing)} entries, {len(changed)} new or updated")

    def get_bundle_metadata(self, bundle_id: str) -> BundleMetadata:
        """Metadata for a known bundle.

        Raises:
            BundleNotFoundError: If no source has described the bundle
        """
        return self.registry.lookup(bundle_id)

    def get_bundle_files(self, bundle_id: str) -> list[str]:
        """File identifiers of a bundle's variant for the session platform.

        Raises:
            BundleNotFoundError: If the bundle is unknown or has no variant for this platform
        """
        metadata = self.registry.lookup(bundle_id)
        if not metadata.supports(self.platform):
            raise BundleNotFoundError(bundle_id, f"Bundle {bundle_id} has no {self.platform} variant")
        return list(metadata.bundles[self.platform])

    def compatible_bundles(self) -> list[BundleMetadata]:
        """Known bundles that ship a variant for the session platform."""
        return self.registry.compatible_bundles(self.platform)

    # ----- Payloads -----

    def bundle_url(self, filename: str) -> str:
        """Resolve the URL a bundle filename is served from."""
        if self.settings.bundle_base_url:
            return urljoin(self.settings.bundle_base_url.rstrip("/") + "/", filename)
        return filename

    async def get_bundle(self, filename: str) -> PayloadHandle:
        """Get a bundle payload, downloading it unless it is already cached.

        Raises:
            TransportError: If the payload could not be downloaded
        """
        logger.debug(f"Bundle requested: {filename}")

        async def load() -> PayloadHandle:
            url = self.bundle_url(filename)
            data = await self.transport.fetch(url)
            logger.info(f"Downloaded bundle {filename} ({len(data)} bytes)")
            return PayloadHandle(filename, data, url=url)

        return await self.cache.get_or_load(filename, load)

    def unload_all(self) -> int:
        """Release and forget all cached payloads."""
        return self.cache.unload_all()
