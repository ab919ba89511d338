"""Command dispatch for extcli.

``Main`` interprets the parsed command line and runs either the list or
the install flow against the gallery and the local management service.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from cli.extcli.nls import Localizer, default_localizer
from cli.extcli.output import print_line
from extensions.gallery import ExtensionGalleryService, QueryOptions
from extensions.management import ExtensionManagementService
from extensions.manifest import ExtensionManifest, get_extension_id

logger = logging.getLogger(__name__)

EXAMPLE_EXTENSION_ID = "ms-vscode.csharp"


class CommandError(Exception):
    """Raised when a command cannot complete for a user-facing reason."""

    pass


class ExtensionNotFoundError(CommandError):
    """The requested extension is not in the gallery."""

    def __init__(self, extension_id: str, message: str):
        super().__init__(message)
        self.extension_id = extension_id


class ExtensionAlreadyInstalledError(CommandError):
    """The requested extension is already installed locally."""

    def __init__(self, extension_id: str, message: str):
        super().__init__(message)
        self.extension_id = extension_id


class Main:
    """Run one extcli command.

    Example:
        >>> main = Main(ExtensionManagementService(path), ExtensionGalleryService())
        >>> await main.run({"install-extension": "ms-python.python"})
    """

    def __init__(
        self,
        extension_management_service: ExtensionManagementService,
        extension_gallery_service: ExtensionGalleryService,
        output: Callable[[str], None] = print_line,
        localizer: Localizer = default_localizer,
    ):
        self.extension_management_service = extension_management_service
        self.extension_gallery_service = extension_gallery_service
        self.output = output
        self.localize = localizer.localize

    async def run(self, argv: Mapping[str, Any]) -> None:
        """Dispatch to the flow selected by the arguments.

        ``list-extensions`` wins over ``install-extension``. With neither
        present nothing happens.
        """
        if argv.get("list-extensions"):
            await self.list_extensions()
        elif argv.get("install-extension"):
            await self.install_extension(argv["install-extension"])

    async def list_extensions(self) -> None:
        extensions = await self.extension_management_service.get_installed()
        for extension in extensions:
            self.output(f"{extension.display_name} ({get_extension_id(extension)})")

    async def install_extension(self, extension_id: str) -> ExtensionManifest:
        """Install an extension from the gallery by its full id.

        Raises:
            ExtensionNotFoundError: The gallery has no such extension.
            ExtensionAlreadyInstalledError: The extension is installed already.
        """
        result = await self.extension_gallery_service.query(QueryOptions(ids=[extension_id]))
        extension = result.first_page[0] if result.first_page else None

        if extension is None:
            not_found = self.localize("notFound", "Extension '{0}' not found.", extension_id)
            use_id = self.localize(
                "useId",
                "Make sure you use the full extension id, eg: {0}",
                EXAMPLE_EXTENSION_ID,
            )
            raise ExtensionNotFoundError(extension_id, f"{not_found}\n{use_id}")

        installed = await self.extension_management_service.get_installed()
        if any(get_extension_id(e) == extension_id for e in installed):
            raise ExtensionAlreadyInstalledError(
                extension_id,
                self.localize(
                    "alreadyInstalled", "Extension '{0}' is already installed.", extension_id
                ),
            )

        self.output(self.localize("foundExtension", "Found '{0}' in the marketplace.", extension_id))
        self.output(self.localize("installing", "Installing..."))

        logger.debug(f"Installing {get_extension_id(extension)} v{extension.version}")
        installed_extension = await self.extension_management_service.install(extension)

        self.output(
            self.localize(
                "successInstall",
                "Extension '{0}' v{1} was successfully installed!",
                get_extension_id(installed_extension),
                installed_extension.version,
            )
        )
        return installed_extension
