"""Local extension management for extcli.

Keeps track of installed extensions in the extensions directory. Every
installed extension lives in its own ``<publisher>.<name>-<version>``
folder holding a manifest.yaml and, when the gallery offered one, the
downloaded package.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path

import httpx
import yaml

from extensions.manifest import ExtensionManifest, ManifestError, get_extension_id

logger = logging.getLogger(__name__)

MANIFEST_FILE = "manifest.yaml"


class InstallError(Exception):
    """Raised when extension installation fails."""

    pass


class ExtensionManagementService:
    """Install and enumerate extensions locally.

    Example:
        >>> service = ExtensionManagementService(Path("~/.extcli/extensions"))
        >>> await service.get_installed()
        >>> await service.install(manifest)
    """

    def __init__(
        self,
        extensions_dir: Path | str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ):
        """Initialize the service.

        Args:
            extensions_dir: Local extensions directory.
            client: HTTP client used to download packages.
            timeout: Download timeout in seconds.
        """
        self.extensions_dir = Path(extensions_dir).expanduser()
        self.timeout = timeout
        self._client = client

    async def get_installed(self) -> list[ExtensionManifest]:
        """List all installed extensions.

        Returns:
            Installed extension manifests, ordered by folder name.
        """
        return await asyncio.to_thread(self._scan)

    def _scan(self) -> list[ExtensionManifest]:
        installed: list[ExtensionManifest] = []

        if not self.extensions_dir.exists():
            return installed

        for ext_dir in sorted(self.extensions_dir.iterdir()):
            if not ext_dir.is_dir():
                continue
            manifest_path = ext_dir / MANIFEST_FILE
            if not manifest_path.exists():
                continue
            try:
                installed.append(ExtensionManifest.from_yaml(manifest_path))
            except ManifestError as e:
                logger.warning(f"Skipping invalid extension in {ext_dir}: {e}")

        return installed

    async def install(self, extension: ExtensionManifest) -> ExtensionManifest:
        """Install an extension.

        Args:
            extension: Manifest of the extension to install.

        Returns:
            Installed extension manifest.

        Raises:
            InstallError: If installation fails.
        """
        target_dir = self._get_target_dir(extension)
        if target_dir.exists():
            raise InstallError(
                f"Extension '{get_extension_id(extension)}' already exists in {target_dir}"
            )

        package: bytes | None = None
        if extension.download_url:
            package = await self._download(extension)

        try:
            installed = await asyncio.to_thread(self._write, target_dir, extension, package)
        except FileExistsError:
            raise InstallError(
                f"Extension '{get_extension_id(extension)}' already exists in {target_dir}"
            )
        except BaseException as e:
            await asyncio.to_thread(shutil.rmtree, target_dir, ignore_errors=True)
            if isinstance(e, (OSError, ManifestError, yaml.YAMLError)):
                raise InstallError(f"Failed to install {get_extension_id(extension)}: {e}")
            raise

        logger.info(f"Installed {get_extension_id(extension)} v{extension.version} into {target_dir}")
        return installed

    def _get_target_dir(self, extension: ExtensionManifest) -> Path:
        """Get installation directory for an extension."""
        return self.extensions_dir / f"{get_extension_id(extension)}-{extension.version}"

    def _write(
        self, target_dir: Path, extension: ExtensionManifest, package: bytes | None
    ) -> ExtensionManifest:
        target_dir.mkdir(parents=True)
        if package is not None:
            package_path = target_dir / f"{target_dir.name}.vsix"
            package_path.write_bytes(package)
        extension.to_yaml(target_dir / MANIFEST_FILE)
        return ExtensionManifest.from_yaml(target_dir / MANIFEST_FILE)

    async def _download(self, extension: ExtensionManifest) -> bytes:
        """Download the extension package as-is."""
        logger.debug(f"Downloading {extension.download_url}")
        try:
            if self._client is not None:
                response = await self._client.get(extension.download_url)
            else:
                async with httpx.AsyncClient(
                    timeout=self.timeout, follow_redirects=True
                ) as client:
                    response = await client.get(extension.download_url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise InstallError(
                f"Failed to download {get_extension_id(extension)}: "
                f"HTTP {e.response.status_code}"
            )
        except httpx.RequestError as e:
            raise InstallError(f"Failed to download {get_extension_id(extension)}: {e}")
        return response.content
