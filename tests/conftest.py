from __future__ import annotations

import pytest

from extensions.gallery import QueryOptions, QueryResult
from extensions.manifest import ExtensionManifest


def make_manifest(
    publisher: str = "pub",
    name: str = "ext",
    version: str = "1.0.0",
    display_name: str = "",
) -> ExtensionManifest:
    return ExtensionManifest(
        publisher=publisher,
        name=name,
        version=version,
        display_name=display_name,
    )


class FakeGallery:
    """Gallery stand-in returning canned results."""

    def __init__(
        self,
        extensions: list[ExtensionManifest] | None = None,
        error: Exception | None = None,
    ):
        self.extensions = extensions or []
        self.error = error
        self.queries: list[QueryOptions] = []

    async def query(self, options: QueryOptions | None = None) -> QueryResult:
        self.queries.append(options)
        if self.error is not None:
            raise self.error
        return QueryResult(
            first_page=list(self.extensions),
            total=len(self.extensions),
            page_size=10,
        )


class FakeManagement:
    """Management service stand-in that records calls."""

    def __init__(
        self,
        installed: list[ExtensionManifest] | None = None,
        install_error: Exception | None = None,
    ):
        self.installed = installed or []
        self.install_error = install_error
        self.get_installed_calls = 0
        self.install_calls: list[ExtensionManifest] = []

    async def get_installed(self) -> list[ExtensionManifest]:
        self.get_installed_calls += 1
        return list(self.installed)

    async def install(self, extension: ExtensionManifest) -> ExtensionManifest:
        self.install_calls.append(extension)
        if self.install_error is not None:
            raise self.install_error
        self.installed.append(extension)
        return extension


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for var in (
        "EXTCLI_EXTENSIONS_DIR",
        "EXTCLI_GALLERY_URL",
        "EXTCLI_GALLERY_TIMEOUT",
        "EXTCLI_LOCALE_FILE",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def output() -> list[str]:
    return []
