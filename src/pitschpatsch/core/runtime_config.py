# どこで: `src/pitschpatsch/core/runtime_config.py`。
# 何を: config.yaml による実行時設定（探索・ロード・キャッシュ）と、解析/同期用の設定オブジェクトを提供する。
# なぜ: 関数シグネチャ表やログ設定をモジュール内の大域状態にせず、明示的な設定として各層へ渡すため。

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

from pitschpatsch.core.analysis.sites import DEFAULT_OUTPUTS, DEFAULT_SKIP_MARKERS, DEFAULT_SOURCES
from pitschpatsch.core.codegen.eval_code import EVAL_MODES as _EVAL_MODES


@dataclass(frozen=True, slots=True)
class AnalysisConfig:
    """Analyzer/Classifier の設定。"""

    classifier_window: int = 20
    skip_line_markers: tuple[str, ...] = DEFAULT_SKIP_MARKERS
    outputs: tuple[str, ...] = DEFAULT_OUTPUTS
    sources: tuple[str, ...] = DEFAULT_SOURCES


@dataclass(frozen=True, slots=True)
class SyncConfig:
    """Sync Coordinator の設定。"""

    debounce_ms: int = 1000
    eval_mode: str = "static"  # "static" | "arrow"

    def __post_init__(self) -> None:
        if int(self.debounce_ms) < 0:
            raise ValueError(f"debounce_ms は 0 以上である必要がある: got={self.debounce_ms}")
        if self.eval_mode not in _EVAL_MODES:
            raise ValueError(f"eval_mode は {_EVAL_MODES} のいずれか: got={self.eval_mode!r}")

    @property
    def debounce_seconds(self) -> float:
        return float(self.debounce_ms) / 1000.0


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    enabled: bool = True
    level: str = "INFO"


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """pitschpatsch の実行時設定。"""

    config_path: Path | None
    analysis: AnalysisConfig
    sync: SyncConfig
    logging: LoggingConfig
    parameter_gui_title: str
    parameter_gui_window_size: tuple[int, int]


_EXPLICIT_CONFIG_PATH: Path | None = None
_CONFIG_CACHE: RuntimeConfig | None = None


def set_config_path(path: str | Path | None) -> None:
    """以降の設定探索で使う明示 config パスを設定する。

    Notes
    -----
    `path` を None にすると明示指定を解除し、既定の探索に戻る。
    """

    global _EXPLICIT_CONFIG_PATH, _CONFIG_CACHE
    if path is None:
        _EXPLICIT_CONFIG_PATH = None
        _CONFIG_CACHE = None
        return
    _EXPLICIT_CONFIG_PATH = Path(os.path.expandvars(os.path.expanduser(str(path))))
    _CONFIG_CACHE = None


def _default_config_candidates() -> tuple[Path, ...]:
    cwd = Path.cwd()
    home = Path.home()
    return (
        cwd / ".pitschpatsch" / "config.yaml",
        home / ".config" / "pitschpatsch" / "config.yaml",
    )


def _as_mapping(value: Any, *, key: str) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, dict):
        return dict(value)
    raise RuntimeError(f"{key} は mapping である必要があります: got={value!r}")


def _as_int(value: Any, *, key: str) -> int:
    if value is None:
        raise RuntimeError(f"{key} が未設定です（同梱 default_config.yaml を確認してください）")
    if isinstance(value, bool):
        raise RuntimeError(f"{key} は整数である必要があります: got={value!r}")
    try:
        return int(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は整数である必要があります: got={value!r}") from exc


def _as_str_tuple(value: Any, *, key: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,) if value.strip() else ()
    try:
        seq = list(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は文字列の配列である必要があります: got={value!r}") from exc
    return tuple(str(v) for v in seq if str(v))


def _as_int_pair(value: Any, *, key: str) -> tuple[int, int] | None:
    if value is None:
        return None
    try:
        seq = list(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は [x, y] の配列である必要があります: got={value!r}") from exc
    if len(seq) != 2:
        raise RuntimeError(f"{key} は [x, y] の配列である必要があります: got={value!r}")
    try:
        x = int(seq[0])
        y = int(seq[1])
    except Exception as exc:
        raise RuntimeError(f"{key} は [x, y] の整数配列である必要があります: got={value!r}") from exc
    return (x, y)


def _load_yaml_text(text: str, *, source: str) -> dict[str, Any]:
    try:
        import yaml  # type: ignore[import-untyped]
    except Exception as exc:  # pragma: no cover
        raise RuntimeError(f"PyYAML を import できません: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except Exception as exc:
        raise RuntimeError(f"config.yaml の読み込みに失敗しました: source={source}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RuntimeError(f"config.yaml は mapping である必要があります: source={source}")

    return dict(data)


def _load_yaml_config(path: Path) -> dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    return _load_yaml_text(text, source=str(path))


def _load_packaged_default_config() -> dict[str, Any]:
    """同梱デフォルト config をロードして dict を返す。"""

    try:
        blob = (
            resources.files("pitschpatsch")
            .joinpath("resource", "default_config.yaml")
            .read_text(encoding="utf-8")
        )
    except Exception as exc:  # pragma: no cover
        raise RuntimeError(
            "同梱 default_config.yaml の読み込みに失敗しました"
            "（パッケージ配布物の package-data を確認してください）"
        ) from exc

    return _load_yaml_text(blob, source="pitschpatsch/resource/default_config.yaml")


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """mapping 同士は再帰的に、それ以外は後勝ちで重ねる。"""

    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def _analysis_config(payload: dict[str, Any]) -> AnalysisConfig:
    analysis = _as_mapping(payload.get("analysis"), key="analysis")
    window = _as_int(analysis.get("classifier_window"), key="analysis.classifier_window")
    if window <= 0:
        raise ValueError(f"analysis.classifier_window は正の値である必要があります: got={window}")
    outputs = _as_str_tuple(analysis.get("outputs"), key="analysis.outputs")
    sources = _as_str_tuple(analysis.get("sources"), key="analysis.sources")
    if not outputs:
        raise RuntimeError("analysis.outputs が未設定です（同梱 default_config.yaml を確認してください）")
    return AnalysisConfig(
        classifier_window=window,
        skip_line_markers=_as_str_tuple(
            analysis.get("skip_line_markers"), key="analysis.skip_line_markers"
        ),
        outputs=outputs,
        sources=sources,
    )


def _sync_config(payload: dict[str, Any]) -> SyncConfig:
    sync = _as_mapping(payload.get("sync"), key="sync")
    debounce_ms = _as_int(sync.get("debounce_ms"), key="sync.debounce_ms")
    eval_mode = str(sync.get("eval_mode", "static")).strip().lower()
    if eval_mode not in _EVAL_MODES:
        raise ValueError(f"sync.eval_mode は {_EVAL_MODES} のいずれか: got={eval_mode!r}")
    if debounce_ms < 0:
        raise ValueError(f"sync.debounce_ms は 0 以上である必要があります: got={debounce_ms}")
    return SyncConfig(debounce_ms=debounce_ms, eval_mode=eval_mode)


def _logging_config(payload: dict[str, Any]) -> LoggingConfig:
    section = _as_mapping(payload.get("logging"), key="logging")
    level = str(section.get("level", "INFO")).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"logging.level が不正です: got={level!r}")
    return LoggingConfig(enabled=bool(section.get("enabled", True)), level=level)


def runtime_config() -> RuntimeConfig:
    """実行時設定をロードして返す（キャッシュ）。

    上書き順（後勝ち）:
    1) 同梱 default_config.yaml
    2) `./.pitschpatsch/config.yaml` / `~/.config/pitschpatsch/config.yaml`
    3) `run(..., config_path=...)` の `config_path`
    """

    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None:
        return _CONFIG_CACHE

    explicit_path = _EXPLICIT_CONFIG_PATH
    if explicit_path is not None and not explicit_path.is_file():
        raise FileNotFoundError(f"config.yaml が見つかりません: {explicit_path}")

    discovered_path: Path | None = None
    for p in _default_config_candidates():
        if p.is_file():
            discovered_path = p
            break

    payload = _load_packaged_default_config()
    if discovered_path is not None:
        payload = _merge(payload, _load_yaml_config(discovered_path))
    if explicit_path is not None:
        payload = _merge(payload, _load_yaml_config(explicit_path))

    version = payload.get("version")
    if version is None:
        raise RuntimeError(
            "config.yaml の version が未設定です（同梱 default_config.yaml を確認してください）"
        )
    try:
        version_i = int(version)
    except Exception as exc:
        raise RuntimeError(f"config.yaml の version は整数である必要があります: got={version!r}") from exc
    if version_i != 1:
        raise RuntimeError(f"未対応の config.yaml version です: got={version_i}")

    ui = _as_mapping(payload.get("ui"), key="ui")
    parameter_gui = _as_mapping(ui.get("parameter_gui"), key="ui.parameter_gui")
    window_size = _as_int_pair(
        parameter_gui.get("window_size"),
        key="ui.parameter_gui.window_size",
    )
    if window_size is None:
        raise RuntimeError(
            "ui.parameter_gui.window_size が未設定です（同梱 default_config.yaml を確認してください）"
        )
    title = str(parameter_gui.get("title") or "Hydra Controls")

    cfg = RuntimeConfig(
        config_path=explicit_path or discovered_path,
        analysis=_analysis_config(payload),
        sync=_sync_config(payload),
        logging=_logging_config(payload),
        parameter_gui_title=title,
        parameter_gui_window_size=window_size,
    )
    _CONFIG_CACHE = cfg
    return cfg


def configure_logging(cfg: LoggingConfig) -> None:
    """`pitschpatsch` ロガーにだけレベルと有効/無効を適用する。"""

    logger = logging.getLogger("pitschpatsch")
    logger.setLevel(str(cfg.level).upper())
    logger.disabled = not bool(cfg.enabled)


__all__ = [
    "AnalysisConfig",
    "LoggingConfig",
    "RuntimeConfig",
    "SyncConfig",
    "configure_logging",
    "runtime_config",
    "set_config_path",
]
