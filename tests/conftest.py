"""Pytest configuration for harmatch tests."""

import sys
from pathlib import Path

import pytest
import structlog
from structlog._config import BoundLoggerLazyProxy

# Add src directory to sys.path for test imports
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate each test from the developer's environment.

    This fixture:
    - Runs the test from an empty directory so no stray .env is read
    - Removes any OpenAI key from the environment
    - Resets the global settings instance before each test
    """
    monkeypatch.chdir(tmp_path)
    for var in ("OPENAI_API_KEY", "HARMATCH_OPENAI_API_KEY", "HARMATCH_MAX_WORKERS"):
        monkeypatch.delenv(var, raising=False)

    from harmatch.config import reset_settings

    reset_settings()

    return tmp_path


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Route logs to stderr at WARNING for each test, then reset structlog.

    structlog's defaults print every level to stdout, which would mix log
    lines into CLI output parsed by the tests, so each test starts from the
    CLI's own configuration.

    CliRunner captures stderr with a temporary file. When configure_logging()
    runs inside CliRunner, structlog binds loggers to that temp file. After
    the test, CliRunner closes the file.
    """
    from harmatch.logging import configure_logging

    configure_logging(level="WARNING")
    yield
    structlog.reset_defaults()
    for module in list(sys.modules.values()):
        for attr in getattr(module, "__dict__", {}).values():
            if isinstance(attr, BoundLoggerLazyProxy):
                attr.__dict__.pop("bind", None)
