import asyncio
import zipfile
from pathlib import Path

from doc_batch.conversion.models import ConversionSuccess
from doc_batch.conversion.packager import ArchivePackager, unique_entry_names


def _success(tmp_path: Path, name: str, content: bytes) -> ConversionSuccess:
    path = tmp_path / f"src-{len(list(tmp_path.iterdir()))}-{name}"
    path.write_bytes(content)
    return ConversionSuccess(suggested_name=name, content_path=path)


class TestUniqueEntryNames:
    def test_distinct_names_unchanged(self) -> None:
        assert unique_entry_names(["a.txt", "b.txt"]) == ["a.txt", "b.txt"]

    def test_repeated_names_numbered(self) -> None:
        assert unique_entry_names(["a.txt", "a.txt", "a.txt"]) == ["a.txt", "a (2).txt", "a (3).txt"]


class TestArchivePackager:
    def test_one_entry_per_output(self, tmp_path: Path) -> None:
        outputs = [
            _success(tmp_path, "one.txt", b"first"),
            _success(tmp_path, "two.docx", b"second"),
        ]
        archive_path = asyncio.run(ArchivePackager().package(outputs, tmp_path / "out" / "bundle.zip"))

        with zipfile.ZipFile(archive_path) as archive:
            assert archive.namelist() == ["one.txt", "two.docx"]
            assert archive.read("one.txt") == b"first"
            assert archive.read("two.docx") == b"second"
            assert all(i.compress_type == zipfile.ZIP_DEFLATED for i in archive.infolist())

    def test_duplicate_names_become_distinct_entries(self, tmp_path: Path) -> None:
        outputs = [
            _success(tmp_path, "report.txt", b"a"),
            _success(tmp_path, "report.txt", b"b"),
        ]
        archive_path = ArchivePackager().package_sync(outputs, tmp_path / "bundle.zip")

        with zipfile.ZipFile(archive_path) as archive:
            assert archive.namelist() == ["report.txt", "report (2).txt"]
            assert archive.read("report (2).txt") == b"b"

    def test_archive_is_complete_when_package_returns(self, tmp_path: Path) -> None:
        outputs = [_success(tmp_path, f"f{i}.txt", b"x" * 10_000) for i in range(5)]
        archive_path = asyncio.run(ArchivePackager().package(outputs, tmp_path / "bundle.zip"))

        with zipfile.ZipFile(archive_path) as archive:
            assert archive.testzip() is None
            assert len(archive.namelist()) == 5
