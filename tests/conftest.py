"""
Pytest configuration and fixtures
"""
import io
import zipfile
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer
from rich.console import Console

from jardownloader.cli.progress_manager import ProgressManager
from jardownloader.models.config import DownloadConfig
from jardownloader.transfer import close_connection_pool


def build_jar_bytes(entries: dict[str, str | bytes]) -> bytes:
    """Builds an in-memory jar (a ZIP archive) holding the given entries."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as jar:
        for name, content in entries.items():
            jar.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def make_jar(tmp_path):
    """Factory writing a jar file with the given entries below tmp_path."""

    def _make_jar(relative_path: str, entries: dict[str, str | bytes]) -> Path:
        jar_path = tmp_path / relative_path
        jar_path.parent.mkdir(parents=True, exist_ok=True)
        jar_path.write_bytes(build_jar_bytes(entries))
        return jar_path

    return _make_jar


@pytest.fixture
def config(tmp_path) -> DownloadConfig:
    """A config that writes into tmp_path and retries without waiting."""
    return DownloadConfig(
        config_path=str(tmp_path / "config"),
        download_dir=str(tmp_path / "libs"),
        max_workers=4,
        max_attempts=2,
        retry_delay=0,
    )


@pytest.fixture
def progress_manager() -> ProgressManager:
    console = Console(file=io.StringIO(), force_terminal=False)
    return ProgressManager(console=console, dry_run=False)


class FileServer:
    """A local HTTP server handing out registered files and counting requests."""

    def __init__(self):
        self.files: dict[str, bytes] = {}
        self.failures_before_success: dict[str, int] = {}
        self.requests: list[str] = []
        self._server: TestServer | None = None

    def add(self, name: str, content: bytes) -> str:
        self.files[name] = content
        return self.url(name)

    def url(self, name: str) -> str:
        return str(self._server.make_url(f"/libs/{name}"))

    async def _handle(self, request: web.Request) -> web.Response:
        name = request.match_info["name"]
        self.requests.append(name)
        if self.failures_before_success.get(name, 0) > 0:
            self.failures_before_success[name] -= 1
            return web.Response(status=500, text="try again")
        if name not in self.files:
            return web.Response(status=404, text="not found")
        return web.Response(body=self.files[name])

    async def start(self):
        app = web.Application()
        app.router.add_get("/libs/{name}", self._handle)
        self._server = TestServer(app)
        await self._server.start_server()

    async def close(self):
        await self._server.close()


@pytest_asyncio.fixture
async def file_server():
    server = FileServer()
    await server.start()
    yield server
    await close_connection_pool()
    await server.close()
