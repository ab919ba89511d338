"""Extension system for extcli.

This module provides the extension metadata, the gallery client used to
look extensions up in the marketplace, and the local management service
that records installed extensions.

Extensions are stored in ~/.extcli/extensions/ by default.
"""

from extensions.manifest import ExtensionManifest, ManifestError, get_extension_id
from extensions.gallery import (
    ExtensionGalleryService,
    GalleryError,
    QueryOptions,
    QueryResult,
)
from extensions.management import ExtensionManagementService, InstallError

__all__ = [
    "ExtensionGalleryService",
    "ExtensionManagementService",
    "ExtensionManifest",
    "GalleryError",
    "InstallError",
    "ManifestError",
    "QueryOptions",
    "QueryResult",
    "get_extension_id",
]
