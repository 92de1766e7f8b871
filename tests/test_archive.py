"""
Tests for the download archive database
"""
import pytest

from jardownloader.storage.archive import DownloadArchive


@pytest.mark.asyncio
async def test_add_and_check(tmp_path):
    archive = DownloadArchive(tmp_path)

    await archive.add_downloads(
        [
            {
                "url": "https://example.org/a.jar",
                "file_name": "a.jar",
                "size_bytes": 10,
                "source": "deps.txt",
            }
        ]
    )
    status = await archive.check_if_downloaded(
        ["https://example.org/a.jar", "https://example.org/b.jar"]
    )

    assert status == {
        "https://example.org/a.jar": True,
        "https://example.org/b.jar": False,
    }


@pytest.mark.asyncio
async def test_check_empty_list(tmp_path):
    archive = DownloadArchive(tmp_path)

    assert await archive.check_if_downloaded([]) == {}


@pytest.mark.asyncio
async def test_stats_and_clear(tmp_path):
    archive = DownloadArchive(tmp_path)
    await archive.add_downloads(
        [
            {"url": "https://e.org/a.jar", "file_name": "a.jar", "size_bytes": 100, "source": "x.jar!dependencies.txt"},
            {"url": "https://e.org/b.jar", "file_name": "b.jar", "size_bytes": 50, "source": "x.jar!dependencies.txt"},
            {"url": "https://e.org/c.jar", "file_name": "c.jar", "size_bytes": 1, "source": "deps.txt"},
        ]
    )

    stats = await archive.get_stats()

    assert stats["total_files"] == 3
    assert stats["total_bytes"] == 151
    assert stats["top_sources"][0] == ("x.jar!dependencies.txt", 2)

    assert await archive.clear()
    stats = await archive.get_stats()
    assert stats["total_files"] == 0
    assert stats["total_bytes"] == 0


@pytest.mark.asyncio
async def test_records_survive_reopen(tmp_path):
    await DownloadArchive(tmp_path).add_downloads(
        [{"url": "https://e.org/a.jar", "file_name": "a.jar"}]
    )

    reopened = DownloadArchive(tmp_path)

    assert (await reopened.check_if_downloaded(["https://e.org/a.jar"]))[
        "https://e.org/a.jar"
    ]
    assert await reopened.vacuum()
