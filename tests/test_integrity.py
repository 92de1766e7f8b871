"""
Tests for downloaded archive validation
"""
from jardownloader.transfer.integrity import ArchiveIntegrityChecker
from tests.conftest import build_jar_bytes


def test_applies_to_zip_family():
    assert ArchiveIntegrityChecker.applies_to("lib.jar")
    assert ArchiveIntegrityChecker.applies_to("bundle.ZIP")
    assert ArchiveIntegrityChecker.applies_to("app.war")
    assert not ArchiveIntegrityChecker.applies_to("native.so")
    assert not ArchiveIntegrityChecker.applies_to("notes.txt")


def test_valid_jar_passes(tmp_path):
    jar = tmp_path / "ok.jar"
    jar.write_bytes(build_jar_bytes({"a.txt": "hello" * 100}))

    assert ArchiveIntegrityChecker.check_zip(str(jar)) is True


def test_truncated_jar_fails(tmp_path):
    data = build_jar_bytes({"a.txt": "hello" * 100})
    jar = tmp_path / "truncated.jar"
    jar.write_bytes(data[: len(data) // 2])

    assert ArchiveIntegrityChecker.check_zip(str(jar)) is False


def test_html_error_page_fails(tmp_path):
    jar = tmp_path / "error.jar"
    jar.write_bytes(b"<html><body>404 Not Found</body></html>")

    assert ArchiveIntegrityChecker.check_zip(str(jar)) is False
