"""extcli command line.

Lists installed extensions and installs extensions from the gallery.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from cli.extcli.output import console, print_error

app = typer.Typer(
    name="extcli",
    help="List installed extensions and install extensions from the marketplace.",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        from cli.extcli import __version__

        console.print(f"extcli v{__version__}")
        raise typer.Exit()


def setup_logging(level: str) -> None:
    """Send log records to stderr so stdout stays clean for command output."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_main(config):
    """Wire the services the commands need from configuration."""
    from cli.extcli.main import Main
    from cli.extcli.nls import Localizer, default_localizer
    from extensions import ExtensionGalleryService, ExtensionManagementService

    gallery = ExtensionGalleryService(
        service_url=config.gallery.service_url,
        timeout=config.gallery.timeout,
        page_size=config.gallery.page_size,
    )
    management = ExtensionManagementService(
        config.extensions.get_extensions_dir(),
        timeout=config.extensions.download_timeout,
    )

    localizer = default_localizer
    if config.cli.locale_file:
        localizer = Localizer.from_file(Path(config.cli.locale_file).expanduser())

    return Main(management, gallery, localizer=localizer)


@app.command()
def run(
    list_extensions: bool = typer.Option(
        False,
        "--list-extensions",
        help="List the installed extensions.",
    ),
    install_extension: Optional[str] = typer.Option(
        None,
        "--install-extension",
        help="Install an extension by its full id (publisher.name).",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Path to config.toml",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Show debug logging.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show extcli version.",
    ),
) -> None:
    """Manage extensions from the command line.

    Examples:
        extcli --list-extensions
        extcli --install-extension ms-python.python
    """
    from cli.extcli.main import CommandError
    from environment.config import reload_config
    from extensions import GalleryError, InstallError, ManifestError

    if config_path is not None and not config_path.is_file():
        print_error(f"Config file not found: {config_path}")
        raise typer.Exit(1)

    config = reload_config(config_path)
    setup_logging("DEBUG" if verbose else config.cli.log_level)

    argv = {
        "list-extensions": list_extensions,
        "install-extension": install_extension,
    }

    main = create_main(config)

    try:
        asyncio.run(main.run(argv))
    except (CommandError, GalleryError, InstallError, ManifestError) as e:
        print_error(str(e))
        raise typer.Exit(1)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
