from abc import ABC, abstractmethod
from pathlib import Path


class BaseFileStore(ABC):
    """Contract for project file storage used by the processing engine."""

    @abstractmethod
    def check_available(self, project_id: str) -> None:
        """Verify the store can serve the project.

        Raises:
            FileStoreUnavailableError: if the project cannot be reached at all.
        """

    @abstractmethod
    def read_file(self, project_id: str, file_id: str) -> bytes:
        """Read the raw bytes of one project file.

        Raises:
            StoredFileNotFoundError: if the file does not exist.
            FileStoreError: on any other read failure.
        """

    @abstractmethod
    def write_output(self, project_id: str, file_name: str, data: bytes) -> Path:
        """Persist generated output for a project file.

        Returns:
            Location the output was written to.

        Raises:
            OutputWriteError: if the output cannot be written.
        """
