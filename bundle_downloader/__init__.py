"""Client-side registry and download cache for content bundles."""

from .cache import BundleCache
from .cache import PayloadHandle
from .downloader import BundleDownloader
from .errors import BundleDownloaderError
from .errors import BundleNotFoundError
from .errors import MetadataDecodeError
from .errors import PayloadReleasedError
from .errors import TransportError
from .models import BundleMetadata
from .models import parse_listing
from .platform_key import detect_platform
from .platform_key import normalize_platform
from .registry import MetadataRegistry
from .settings import DownloaderSettings
from .settings import SettingsManager
from .transport import HttpxTransport
from .transport import Transport

__all__ = [
    "BundleCache",
    "BundleDownloader",
    "BundleDownloaderError",
    "BundleMetadata",
    "BundleNotFoundError",
    "DownloaderSettings",
    "HttpxTransport",
    "MetadataDecodeError",
    "MetadataRegistry",
    "PayloadHandle",
    "PayloadReleasedError",
    "SettingsManager",
    "Transport",
    "TransportError",
    "detect_platform",
    "normalize_platform",
    "parse_listing",
]
