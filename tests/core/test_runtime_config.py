import logging
from pathlib import Path

import pytest

from pitschpatsch.core.runtime_config import (
    LoggingConfig,
    SyncConfig,
    configure_logging,
    runtime_config,
    set_config_path,
)


@pytest.fixture(autouse=True)
def _reset_runtime_config() -> None:
    set_config_path(None)
    yield
    set_config_path(None)


def _isolate_config_discovery(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_packaged_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    cfg = runtime_config()
    assert cfg.config_path is None
    assert cfg.sync.debounce_ms == 1000
    assert cfg.sync.eval_mode == "static"
    assert cfg.analysis.classifier_window == 20
    assert cfg.analysis.skip_line_markers == ("loadScript",)
    assert cfg.analysis.outputs == ("o0", "o1", "o2", "o3")
    assert cfg.parameter_gui_title == "Hydra Controls"
    assert cfg.parameter_gui_window_size == (420, 720)
    assert cfg.logging == LoggingConfig(enabled=True, level="INFO")


def test_config_is_cached_until_path_changes(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    assert runtime_config() is runtime_config()


def test_discovered_config_overrides_packaged_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    _isolate_config_discovery(tmp_path, monkeypatch)
    discovered = _write(tmp_path / ".pitschpatsch" / "config.yaml", "sync:\n  debounce_ms: 250\n")

    cfg = runtime_config()
    assert cfg.config_path == discovered
    assert cfg.sync.debounce_ms == 250
    # 同じセクションの他のキーは同梱デフォルトのまま残る。
    assert cfg.sync.eval_mode == "static"


def test_home_config_is_discovered(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)
    home_cfg = _write(
        tmp_path / ".config" / "pitschpatsch" / "config.yaml",
        'ui:\n  parameter_gui:\n    title: "Mine"\n',
    )

    cfg = runtime_config()
    assert cfg.config_path == home_cfg
    assert cfg.parameter_gui_title == "Mine"
    assert cfg.parameter_gui_window_size == (420, 720)


def test_explicit_config_overrides_discovered_config(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    _isolate_config_discovery(tmp_path, monkeypatch)
    _write(tmp_path / ".pitschpatsch" / "config.yaml", "sync:\n  debounce_ms: 250\n")
    explicit = _write(tmp_path / "explicit.yaml", "sync:\n  debounce_ms: 50\n  eval_mode: Arrow\n")

    set_config_path(explicit)
    cfg = runtime_config()
    assert cfg.config_path == explicit
    assert cfg.sync.debounce_ms == 50
    assert cfg.sync.eval_mode == "arrow"


def test_missing_explicit_config_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)
    set_config_path(tmp_path / "nope.yaml")
    with pytest.raises(FileNotFoundError):
        runtime_config()


@pytest.mark.parametrize(
    "text",
    [
        "sync:\n  eval_mode: lazy\n",
        "sync:\n  debounce_ms: -1\n",
        "analysis:\n  classifier_window: 0\n",
        "logging:\n  level: LOUD\n",
    ],
)
def test_invalid_values_raise_value_error(
    text: str, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    _isolate_config_discovery(tmp_path, monkeypatch)
    set_config_path(_write(tmp_path / "bad.yaml", text))
    with pytest.raises(ValueError):
        runtime_config()


@pytest.mark.parametrize(
    "text",
    [
        "- just\n- a list\n",
        "version: 2\n",
        "ui:\n  parameter_gui:\n    window_size: [1, 2, 3]\n",
        "sync: [1]\n",
    ],
)
def test_malformed_config_raises_runtime_error(
    text: str, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    _isolate_config_discovery(tmp_path, monkeypatch)
    set_config_path(_write(tmp_path / "bad.yaml", text))
    with pytest.raises(RuntimeError):
        runtime_config()


def test_sync_config_validation() -> None:
    assert SyncConfig(debounce_ms=1500).debounce_seconds == 1.5
    with pytest.raises(ValueError):
        SyncConfig(debounce_ms=-5)
    with pytest.raises(ValueError):
        SyncConfig(eval_mode="eager")


def test_configure_logging_targets_package_logger() -> None:
    logger = logging.getLogger("pitschpatsch")
    old_level, old_disabled = logger.level, logger.disabled
    try:
        configure_logging(LoggingConfig(enabled=False, level="debug"))
        assert logger.level == logging.DEBUG
        assert logger.disabled
    finally:
        logger.setLevel(old_level)
        logger.disabled = old_disabled
