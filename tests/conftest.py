import threading
import time
from collections.abc import Callable, Generator, Mapping
from pathlib import Path

import pytest

from bulkgen.generation.base import BaseGenerationClient
from bulkgen.generation.exceptions import GenerationUpstreamError
from bulkgen.generation.prompt_builder import PromptBuilder
from bulkgen.jobs.engine import ProcessingEngine
from bulkgen.jobs.registry import JobRegistry
from bulkgen.storage.base import BaseFileStore
from bulkgen.storage.exceptions import FileStoreUnavailableError, StoredFileNotFoundError


class InMemoryFileStore(BaseFileStore):
    """File store backed by dicts; records every output written."""

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files = dict(files or {})
        self.outputs: dict[str, bytes] = {}
        self.available = True
        self.reads: list[str] = []

    def check_available(self, project_id: str) -> None:
        if not self.available:
            raise FileStoreUnavailableError(f"Project {project_id} unreachable")

    def read_file(self, project_id: str, file_id: str) -> bytes:
        self.reads.append(file_id)
        if file_id not in self.files:
            raise StoredFileNotFoundError(f"File not found: {file_id}")
        return self.files[file_id]

    def write_output(self, project_id: str, file_name: str, data: bytes) -> Path:
        self.outputs[file_name] = data
        return Path("/out") / project_id / file_name


class SlowFileStore(InMemoryFileStore):
    """In-memory store whose reads and availability checks can stall.

    ``read_delays`` maps a file id to seconds slept before reading;
    ``check_delay`` is slept before every availability check.
    """

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        super().__init__(files)
        self.read_delays: dict[str, float] = {}
        self.check_delay = 0.0

    def check_available(self, project_id: str) -> None:
        time.sleep(self.check_delay)
        super().check_available(project_id)

    def read_file(self, project_id: str, file_id: str) -> bytes:
        time.sleep(self.read_delays.get(file_id, 0.0))
        return super().read_file(project_id, file_id)


class ScriptedGenerationClient(BaseGenerationClient):
    """Generation client whose behaviour is scripted per file name.

    ``failures`` names files whose call raises an upstream error;
    ``hooks`` maps a file name to a callable run before answering.
    """

    def __init__(
        self,
        failures: set[str] | None = None,
        hooks: dict[str, Callable[[], None]] | None = None,
        configured: bool = True,
    ) -> None:
        self.failures = failures or set()
        self.hooks = hooks or {}
        self.configured = configured
        self.prompts: list[str] = []
        self._lock = threading.Lock()

    def is_configured(self) -> bool:
        return self.configured

    def generate(self, prompt: str, config: Mapping[str, object]) -> str:
        with self._lock:
            self.prompts.append(prompt)
        file_name = self._file_name(prompt)
        hook = self.hooks.get(file_name)
        if hook is not None:
            hook()
        if file_name in self.failures:
            raise GenerationUpstreamError(f"upstream rejected {file_name}")
        return f"generated for {file_name}"

    @staticmethod
    def _file_name(prompt: str) -> str:
        for line in prompt.splitlines():
            if line.startswith("File: "):
                return line[len("File: "):]
        return ""


@pytest.fixture()
def registry() -> JobRegistry:
    return JobRegistry()


@pytest.fixture()
def file_store() -> InMemoryFileStore:
    return InMemoryFileStore({
        "a.txt": b"alpha",
        "b.txt": b"bravo",
        "c.txt": b"charlie",
    })


@pytest.fixture()
def generation_client() -> ScriptedGenerationClient:
    return ScriptedGenerationClient()


@pytest.fixture()
def engine(
    registry: JobRegistry,
    file_store: InMemoryFileStore,
    generation_client: ScriptedGenerationClient,
) -> Generator[ProcessingEngine, None, None]:
    engine = ProcessingEngine(
        registry,
        file_store,
        generation_client,
        PromptBuilder(),
        file_read_timeout_seconds=2.0,
        generation_timeout_seconds=2.0,
    )
    yield engine
    engine.shutdown()


@pytest.fixture()
def slow_file_store() -> SlowFileStore:
    return SlowFileStore({
        "a.txt": b"alpha",
        "b.txt": b"bravo",
        "c.txt": b"charlie",
    })
