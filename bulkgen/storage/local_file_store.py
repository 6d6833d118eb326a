from pathlib import Path

from bulkgen.storage.base import BaseFileStore
from bulkgen.storage.exceptions import (
    FileStoreError,
    FileStoreUnavailableError,
    OutputWriteError,
    StoredFileNotFoundError,
)


def project_file_path(files_root: Path, project_id: str, file_id: str) -> Path:
    """Build path to a project file: {files_root}/{project_id}/{file_id}"""
    return files_root / project_id / file_id


class LocalFileStore(BaseFileStore):
    """Reads project files from and writes outputs to the local filesystem."""

    FILES_ROOT = Path("/app/projects")
    OUTPUT_DIR_NAME = "processed"

    def __init__(
        self,
        files_root: Path | None = None,
        output_dir_name: str | None = None,
    ) -> None:
        self._files_root = files_root if files_root is not None else self.FILES_ROOT
        self._output_dir_name = output_dir_name or self.OUTPUT_DIR_NAME

    def check_available(self, project_id: str) -> None:
        project_dir = self._project_dir(project_id)
        if not project_dir.is_dir():
            raise FileStoreUnavailableError(f"Project directory not found: {project_dir}")

    def read_file(self, project_id: str, file_id: str) -> bytes:
        """Read project file bytes from disk.

        Raises:
            StoredFileNotFoundError: if the file does not exist at resolved path.
            FileStoreError: if the path escapes the project or cannot be read.
        """
        path = self._resolve_inside(project_id, project_file_path(
            self._files_root, project_id, file_id
        ))
        if not path.is_file():
            raise StoredFileNotFoundError(f"File not found: {path}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise FileStoreError(f"Failed to read {path}: {exc}") from exc

    def write_output(self, project_id: str, file_name: str, data: bytes) -> Path:
        """Write output under {files_root}/{project_id}/{output_dir_name}/."""
        try:
            output_dir = self._project_dir(project_id) / self._output_dir_name
            path = self._resolve_inside(project_id, output_dir / file_name)
        except FileStoreError as exc:
            raise OutputWriteError(str(exc)) from exc
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise OutputWriteError(f"Failed to write {path}: {exc}") from exc
        return path

    def _project_dir(self, project_id: str) -> Path:
        root = self._files_root.resolve()
        project_dir = (root / project_id).resolve()
        if root not in project_dir.parents:
            raise FileStoreError(f"Project escapes files root: {project_id}")
        return project_dir

    def _resolve_inside(self, project_id: str, path: Path) -> Path:
        project_dir = self._project_dir(project_id)
        resolved = path.resolve()
        if resolved != project_dir and project_dir not in resolved.parents:
            raise FileStoreError(f"Path escapes project directory: {path}")
        return resolved
