"""FlowConfig environment and YAML loading tests."""

from pathlib import Path

import pytest

from flow_app.config import FlowConfig

_ENV_KEYS = (
    "APP_ENV",
    "APP_CONFIG_PATH",
    "FLOW_CONFIG_DIR",
    "STORAGE_BACKEND",
    "STORAGE_PATH",
    "BAG_CAPACITY",
    "BURN_DOWN_DAYS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_environment() -> None:
    config = FlowConfig.from_env()
    assert config.storage_backend == "json"
    assert config.storage_path is None
    assert config.bag_capacity == 30
    assert config.burn_down_days == 14
    assert config.log_level == "INFO"
    assert config.environment is None


def test_environment_yaml_is_loaded(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "staging.yaml").write_text(
        "# staging settings\n"
        "storage_backend: sqlite\n"
        'storage_path: "/var/lib/wardrobe/state.db"\n'
        "bag_capacity: 40\n"
        "log_level: debug\n"
    )
    monkeypatch.setenv("APP_ENV", "staging")
    monkeypatch.setenv("FLOW_CONFIG_DIR", str(tmp_path))

    config = FlowConfig.from_env()
    assert config.environment == "staging"
    assert config.storage_backend == "sqlite"
    assert config.storage_path == "/var/lib/wardrobe/state.db"
    assert config.bag_capacity == 40
    assert config.log_level == "DEBUG"


def test_environment_variables_override_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_file = tmp_path / "custom.yaml"
    config_file.write_text("bag_capacity: 40\nburn_down_days: 7\n")
    monkeypatch.setenv("APP_CONFIG_PATH", str(config_file))
    monkeypatch.setenv("BAG_CAPACITY", "12")

    config = FlowConfig.from_env()
    assert config.bag_capacity == 12
    assert config.burn_down_days == 7


def test_invalid_values_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORAGE_BACKEND", "postgres")
    monkeypatch.setenv("BAG_CAPACITY", "lots")
    monkeypatch.setenv("BURN_DOWN_DAYS", "-3")

    config = FlowConfig.from_env()
    assert config.storage_backend == "json"
    assert config.bag_capacity == 30
    assert config.burn_down_days == 0
