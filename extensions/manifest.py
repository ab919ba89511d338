"""Extension manifest schema for extcli.

Defines the metadata kept for every extension, whether it comes from the
gallery or from the local extensions directory (manifest.yaml).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


class ManifestError(Exception):
    """Raised when manifest parsing or validation fails."""

    pass


@dataclass
class ExtensionManifest:
    """Extension metadata.

    Attributes:
        publisher: Publisher name (left part of the extension id).
        name: Extension name (right part of the extension id).
        version: Version string as published (e.g., "1.0.0").
        display_name: Human readable name. Defaults to ``name``.
        description: Short description of what the extension does.
        download_url: Package download link, when known.
        categories: Gallery categories.
        engine: Engine version range the extension targets.
    """

    publisher: str
    name: str
    version: str
    display_name: str = ""
    description: str = ""
    download_url: str | None = None
    categories: list[str] = field(default_factory=list)
    engine: str | None = None

    def __post_init__(self) -> None:
        """Validate the manifest after initialization."""
        if not self.publisher:
            raise ManifestError("Extension publisher is required")
        if not self.name:
            raise ManifestError("Extension name is required")
        if not self.version:
            raise ManifestError("Extension version is required")
        if not self.display_name:
            self.display_name = self.name

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> ExtensionManifest:
        """Load manifest from a YAML file.

        Args:
            yaml_path: Path to manifest.yaml file.

        Returns:
            Parsed ExtensionManifest.

        Raises:
            ManifestError: If file is missing or invalid.
        """
        if not yaml_path.exists():
            raise ManifestError(f"Manifest not found: {yaml_path}")

        try:
            with open(yaml_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ManifestError(f"Invalid YAML in {yaml_path}: {e}")

        if not isinstance(data, dict):
            raise ManifestError(f"Manifest must be a YAML mapping: {yaml_path}")

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtensionManifest:
        """Create manifest from a dictionary.

        Raises:
            ManifestError: If required fields are missing or invalid.
        """
        try:
            return cls(
                publisher=str(data.get("publisher") or ""),
                name=str(data.get("name") or ""),
                version=str(data.get("version") or ""),
                display_name=str(data.get("display_name") or ""),
                description=data.get("description", ""),
                download_url=data.get("download_url"),
                categories=list(data.get("categories", [])),
                engine=data.get("engine"),
            )
        except (TypeError, ValueError) as e:
            raise ManifestError(f"Invalid manifest data: {e}")

    @classmethod
    def from_gallery(cls, data: dict[str, Any]) -> ExtensionManifest:
        """Create manifest from a gallery query entry.

        The gallery nests the publisher and lists versions newest first;
        only the first version is used.
        """
        try:
            publisher = data["publisher"]["publisherName"]
            versions = data.get("versions") or []
            if not versions:
                raise ManifestError(
                    f"Gallery entry {publisher}.{data['extensionName']} has no versions"
                )
            latest = versions[0]

            download_url = None
            for asset in latest.get("files", []):
                if asset.get("assetType") == "Microsoft.VisualStudio.Services.VSIXPackage":
                    download_url = asset.get("source")
                    break
            if download_url is None and latest.get("assetUri"):
                download_url = (
                    latest["assetUri"] + "/Microsoft.VisualStudio.Services.VSIXPackage"
                )

            engine = None
            for prop in latest.get("properties", []):
                if prop.get("key") == "Microsoft.VisualStudio.Code.Engine":
                    engine = prop.get("value")

            return cls(
                publisher=publisher,
                name=data["extensionName"],
                version=latest.get("version", ""),
                display_name=data.get("displayName") or "",
                description=data.get("shortDescription", ""),
                download_url=download_url,
                categories=list(data.get("categories", [])),
                engine=engine,
            )
        except (KeyError, TypeError) as e:
            raise ManifestError(f"Invalid gallery entry: {e}")

    def to_dict(self) -> dict[str, Any]:
        """Convert manifest to dictionary."""
        result: dict[str, Any] = {
            "publisher": self.publisher,
            "name": self.name,
            "version": self.version,
            "display_name": self.display_name,
        }

        if self.description:
            result["description"] = self.description
        if self.download_url:
            result["download_url"] = self.download_url
        if self.categories:
            result["categories"] = self.categories
        if self.engine:
            result["engine"] = self.engine

        return result

    def to_yaml(self, yaml_path: Path) -> None:
        """Save manifest to a YAML file.

        Args:
            yaml_path: Path to write manifest.yaml.
        """
        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                self.to_dict(),
                f,
                default_flow_style=False,
                sort_keys=False,
            )

    @property
    def id(self) -> str:
        return get_extension_id(self)

    def __repr__(self) -> str:
        return f"ExtensionManifest(id={self.id!r}, version={self.version!r})"


def get_extension_id(extension: ExtensionManifest) -> str:
    """Return the canonical ``publisher.name`` identifier of an extension."""
    return f"{extension.publisher}.{extension.name}"
