from collections.abc import Generator
from pathlib import Path

import pytest

from bulkgen.config.settings import Settings
from bulkgen.jobs.service import JobService, build_job_service


@pytest.fixture()
def project_root(tmp_path: Path) -> Path:
    project = tmp_path / "test-project"
    (project / "src").mkdir(parents=True)
    (project / "a.txt").write_text("first file", encoding="utf-8")
    (project / "b.txt").write_text("second file", encoding="utf-8")
    (project / "src" / "app.js").write_text("console.log('hi');", encoding="utf-8")
    return tmp_path


@pytest.fixture()
def test_settings(project_root: Path) -> Settings:
    return Settings(  # type: ignore[call-arg]
        _env_file=None,
        files_root=str(project_root),
        generation_provider="example",
        generation_timeout_seconds=5,
        file_read_timeout_seconds=5,
    )


@pytest.fixture()
def job_service(test_settings: Settings) -> Generator[JobService, None, None]:
    service = build_job_service(test_settings)
    yield service
    service.shutdown(wait=False)
