import os

import pytest

from uipdec.config import EngineConfig
from uipdec.result import Err, Ok

_VARS = ("UIPDEC_SEARCH_DEPTH", "UIPDEC_MAX_DESTRUCT_STEPS", "UIPDEC_LOG_LEVEL")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    assert EngineConfig.from_env() == Ok(EngineConfig())


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("UIPDEC_SEARCH_DEPTH", "5")
    monkeypatch.setenv("UIPDEC_MAX_DESTRUCT_STEPS", "10")
    monkeypatch.setenv("UIPDEC_LOG_LEVEL", "debug")
    match EngineConfig.from_env():
        case Ok(config):
            assert config == EngineConfig(search_depth=5, max_destruct_steps=10, log_level="DEBUG")
        case Err(e):
            pytest.fail(f"unexpected error: {e}")


def test_reads_dotenv_file(tmp_path) -> None:
    (tmp_path / ".env").write_text("UIPDEC_SEARCH_DEPTH=7\n")
    try:
        match EngineConfig.from_env():
            case Ok(config):
                assert config.search_depth == 7
            case Err(e):
                pytest.fail(f"unexpected error: {e}")
    finally:
        os.environ.pop("UIPDEC_SEARCH_DEPTH", None)


@pytest.mark.parametrize(
    "name,value",
    [
        ("UIPDEC_SEARCH_DEPTH", "deep"),
        ("UIPDEC_MAX_DESTRUCT_STEPS", "-1"),
        ("UIPDEC_LOG_LEVEL", "LOUD"),
    ],
)
def test_invalid_values(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    match EngineConfig.from_env():
        case Err(e):
            assert isinstance(e, ValueError)
        case Ok(config):
            pytest.fail(f"accepted {value!r}: {config}")
