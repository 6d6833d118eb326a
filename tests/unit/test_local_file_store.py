from pathlib import Path

import pytest

from bulkgen.storage.exceptions import (
    FileStoreError,
    FileStoreUnavailableError,
    OutputWriteError,
    StoredFileNotFoundError,
)
from bulkgen.storage.local_file_store import LocalFileStore, project_file_path


def _make_project(root: Path, files: dict[str, bytes]) -> None:
    for name, data in files.items():
        path = root / "proj" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)


class TestProjectFilePath:
    def test_builds_path(self) -> None:
        assert project_file_path(Path("/files"), "proj", "a.txt") == Path("/files/proj/a.txt")


class TestCheckAvailable:
    def test_existing_project(self, tmp_path: Path) -> None:
        _make_project(tmp_path, {"a.txt": b"x"})
        LocalFileStore(files_root=tmp_path).check_available("proj")  # Should not raise

    def test_missing_project(self, tmp_path: Path) -> None:
        with pytest.raises(FileStoreUnavailableError, match="nope"):
            LocalFileStore(files_root=tmp_path).check_available("nope")


class TestReadFile:
    def test_returns_bytes(self, tmp_path: Path) -> None:
        _make_project(tmp_path, {"a.txt": b"alpha"})
        assert LocalFileStore(files_root=tmp_path).read_file("proj", "a.txt") == b"alpha"

    def test_reads_nested_file(self, tmp_path: Path) -> None:
        _make_project(tmp_path, {"src/app.js": b"code"})
        assert LocalFileStore(files_root=tmp_path).read_file("proj", "src/app.js") == b"code"

    def test_missing_file(self, tmp_path: Path) -> None:
        _make_project(tmp_path, {"a.txt": b"alpha"})
        with pytest.raises(StoredFileNotFoundError, match="missing"):
            LocalFileStore(files_root=tmp_path).read_file("proj", "missing.txt")

    def test_rejects_path_outside_project(self, tmp_path: Path) -> None:
        _make_project(tmp_path, {"a.txt": b"alpha"})
        (tmp_path / "secret.txt").write_bytes(b"secret")
        with pytest.raises(FileStoreError, match="escapes"):
            LocalFileStore(files_root=tmp_path).read_file("proj", "../secret.txt")


class TestWriteOutput:
    def test_writes_under_output_dir(self, tmp_path: Path) -> None:
        _make_project(tmp_path, {"a.txt": b"alpha"})
        store = LocalFileStore(files_root=tmp_path)

        path = store.write_output("proj", "a.txt", b"result")

        assert path == (tmp_path / "proj" / "processed" / "a.txt").resolve()
        assert path.read_bytes() == b"result"

    def test_custom_output_dir_and_nested_name(self, tmp_path: Path) -> None:
        _make_project(tmp_path, {"src/app.js": b"code"})
        store = LocalFileStore(files_root=tmp_path, output_dir_name="out")

        path = store.write_output("proj", "src/app.js", b"result")

        assert path == (tmp_path / "proj" / "out" / "src" / "app.js").resolve()

    def test_rejects_path_outside_project(self, tmp_path: Path) -> None:
        _make_project(tmp_path, {"a.txt": b"alpha"})
        store = LocalFileStore(files_root=tmp_path)
        with pytest.raises(OutputWriteError, match="escapes"):
            store.write_output("proj", "../../evil.txt", b"x")


class TestProjectOutsideRoot:
    def _store_with_sibling(self, tmp_path: Path) -> LocalFileStore:
        root = tmp_path / "root"
        (root / "proj").mkdir(parents=True)
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "a.txt").write_bytes(b"secret")
        return LocalFileStore(files_root=root)

    def test_read_rejects_project_escaping_root(self, tmp_path: Path) -> None:
        store = self._store_with_sibling(tmp_path)
        with pytest.raises(FileStoreError, match="escapes files root"):
            store.read_file("../outside", "a.txt")

    def test_write_rejects_project_escaping_root(self, tmp_path: Path) -> None:
        store = self._store_with_sibling(tmp_path)
        with pytest.raises(OutputWriteError, match="escapes files root"):
            store.write_output("../outside", "a.txt", b"x")
        assert not (tmp_path / "outside" / "processed").exists()

    def test_check_rejects_project_escaping_root(self, tmp_path: Path) -> None:
        store = self._store_with_sibling(tmp_path)
        with pytest.raises(FileStoreError, match="escapes files root"):
            store.check_available("../outside")

    def test_root_itself_is_not_a_project(self, tmp_path: Path) -> None:
        store = self._store_with_sibling(tmp_path)
        with pytest.raises(FileStoreError, match="escapes files root"):
            store.read_file(".", "proj/a.txt")
