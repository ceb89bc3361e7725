# どこで: `src/pitschpatsch/interactive/panel/manager.py`。
# 何を: 解析結果から呼び出しごとのフォルダとコントロールを組み立て、既定値ページ/エラー表示/マウントを管理する。
# なぜ: SyncCoordinator の通知（解析/エラー/プログラム側の値変更）を GUI の再構築と表示更新へ変換するため。

from __future__ import annotations

import logging
import math
from typing import Any

from pitschpatsch.core.codegen.eval_code import EVAL_MODES
from pitschpatsch.core.codegen.formatter import Replacement, format_number
from pitschpatsch.core.parameters.calls import ordered_call_groups
from pitschpatsch.core.pipeline import AnalysisResult
from pitschpatsch.core.ports import GuiToolkit
from pitschpatsch.core.sync.coordinator import SyncCoordinator
from pitschpatsch.core.sync.state import ErrorReport
from pitschpatsch.interactive.controls.bindings import ControlBinding, create_controls

_logger = logging.getLogger(__name__)

WAITING_TEXT = "Waiting for code..."
EMPTY_TEXT = "No controls available"
NO_ERRORS_TEXT = "No errors"
RESET_ALL_TITLE = "Reset All Values"

_MAX_ERRORS_SHOWN = 5
_DEFAULT_TOLERANCE = 1e-4


class PanelManager:
    """コントロールパネル全体（Parameters / Settings / Errors）の構築と更新を担う。

    Notes
    -----
    パネルは解析結果が変わるたびに作り直す。編集途中（書き戻し前）の値は
    coordinator が保持している値で再シードし、作り直しで表示が巻き戻らないようにする。
    """

    def __init__(self, toolkit: GuiToolkit, coordinator: SyncCoordinator) -> None:
        self._toolkit = toolkit
        self._coordinator = coordinator
        self._bindings: list[ControlBinding] = []
        self._by_index: dict[int, ControlBinding] = {}
        self._errors: list[ErrorReport] = []

        root = toolkit.root()
        self.parameters_folder = toolkit.create_folder(root, title="Parameters", expanded=True)
        self.settings_folder = toolkit.create_folder(root, title="Settings", expanded=False)
        self.controls_folder = toolkit.create_folder(
            self.settings_folder, title="Controls", expanded=True
        )
        self.defaults_folder = toolkit.create_folder(
            self.settings_folder, title="Defaults", expanded=False
        )
        self.code_folder = toolkit.create_folder(
            self.settings_folder, title="Current Code", expanded=False
        )
        self.errors_folder = toolkit.create_folder(root, title="Errors", expanded=False)

        self._eval_mode = {"mode": coordinator.eval_mode}
        self._setup_controls_folder()

        coordinator.add_analysis_listener(self.refresh)
        coordinator.add_error_listener(self.show_error)
        coordinator.add_value_listener(self._on_programmatic_value)

        self.refresh(coordinator.analysis)

    # --- 参照 ---
    @property
    def bindings(self) -> list[ControlBinding]:
        return list(self._bindings)

    def binding_for(self, index: int) -> ControlBinding | None:
        return self._by_index.get(int(index))

    def ensure_mounted(self) -> bool:
        """未マウントならマウントする。今回マウントした場合 True。"""

        if self._toolkit.is_mounted():
            return False
        self._toolkit.mount()
        return True

    # --- 構築 ---
    def _setup_controls_folder(self) -> None:
        toolkit = self._toolkit
        toolkit.add_button(self.controls_folder, RESET_ALL_TITLE, self._coordinator.reset_all)
        toolkit.add_binding(
            self.controls_folder,
            self._eval_mode,
            "mode",
            {"view": "select", "label": "Eval Mode", "options": EVAL_MODES},
        ).on("change", self._on_eval_mode)

    def _on_eval_mode(self, mode: Any) -> None:
        try:
            self._coordinator.set_eval_mode(str(mode))
        except ValueError as exc:
            _logger.warning("eval mode を変更できません: %s", exc)
            self._eval_mode["mode"] = self._coordinator.eval_mode

    def _dispose_bindings(self) -> None:
        for binding in self._bindings:
            binding.dispose()
        self._bindings = []
        self._by_index = {}

    def refresh(self, result: AnalysisResult | None) -> None:
        """解析結果からパラメータフォルダを作り直す。

        編集途中の値は coordinator の編集値から再シードする。解析の通知は編集値の
        リセット後に届くので、新しい解析での再構築ではコントロールはテキストの値から始まる。
        同じ解析で作り直す場合は編集途中の値が保たれる。
        """

        toolkit = self._toolkit
        self._dispose_bindings()
        toolkit.clear_folder(self.parameters_folder)

        if result is None:
            toolkit.add_text(self.parameters_folder, WAITING_TEXT)
        elif not result.descriptors:
            toolkit.add_text(self.parameters_folder, EMPTY_TEXT)
        else:
            valid = {d.site_index for d in result.descriptors}
            seed = {
                i: v for i, v in self._coordinator.edited_values().items() if i in valid
            }
            for call in result.calls:
                folder = toolkit.create_folder(
                    self.parameters_folder, title=call.display_name, expanded=True
                )
                self._bindings.extend(
                    create_controls(
                        call.groups,
                        toolkit,
                        folder,
                        self._coordinator.on_value_change,
                        seed=seed,
                    )
                )
            for binding in self._bindings:
                for index in binding.site_indices:
                    self._by_index[index] = binding

        self._update_defaults(result)
        self._update_code(result)
        if result is not None:
            self._errors = []
        self._update_errors()
        self.ensure_mounted()
        _logger.debug("panel refreshed: %d bindings", len(self._bindings))

    # --- 既定値ページ ---
    def _update_defaults(self, result: AnalysisResult | None) -> None:
        toolkit = self._toolkit
        toolkit.clear_folder(self.defaults_folder)
        if result is None:
            return

        candidates = [
            d
            for d in result.descriptors
            if d.param_type != "select" and isinstance(d.default, (int, float))
        ]
        for call in ordered_call_groups(candidates):
            folder = toolkit.create_folder(
                self.defaults_folder, title=call.display_name, expanded=False
            )
            for d in sorted(call.descriptors, key=lambda d: d.ordinal):
                current = self._coordinator.current_value(d.site_index)
                default = float(d.default)
                if _matches_default(current, default):
                    toolkit.add_text(folder, f"{d.name}: {format_number(default)}")
                    continue
                if isinstance(current, (int, float)):
                    shown = format_number(float(current))
                else:
                    shown = str(current)
                toolkit.add_button(
                    folder,
                    f"{d.name}: {shown} -> [ {format_number(default)} ]",
                    _default_setter(self, d.site_index, default),
                )

    def apply_default(self, index: int, value: Replacement) -> None:
        """index を既定値へ変更し、対応するコントロールと既定値ページを更新する。"""

        self._coordinator.on_value_change(index, value)
        if self._coordinator.current_value(index) != value:
            return
        binding = self.binding_for(index)
        if binding is not None:
            binding.set_value(index, value)
        self._update_defaults(self._coordinator.analysis)
        self.ensure_mounted()

    def _update_code(self, result: AnalysisResult | None) -> None:
        self._toolkit.clear_folder(self.code_folder)
        code = "" if result is None else result.block.text
        self._toolkit.add_text(self.code_folder, code or "No code yet")

    # --- エラー ---
    def show_error(self, report: ErrorReport) -> None:
        self._errors.append(report)
        del self._errors[:-_MAX_ERRORS_SHOWN]
        self._update_errors()
        self.ensure_mounted()

    def _update_errors(self) -> None:
        toolkit = self._toolkit
        toolkit.clear_folder(self.errors_folder)
        if not self._errors:
            self.errors_folder.expanded = False
            toolkit.add_text(self.errors_folder, NO_ERRORS_TEXT)
            return
        self.errors_folder.expanded = True
        for report in self._errors:
            toolkit.add_text(self.errors_folder, f"[{report.kind}] {report.message}")

    @property
    def error_messages(self) -> list[str]:
        return [f"[{r.kind}] {r.message}" for r in self._errors]

    # --- プログラム側の値変更 ---
    def _on_programmatic_value(self, index: int, value: Replacement) -> None:
        binding = self.binding_for(index)
        if binding is None:
            return
        binding.set_value(index, value)

    def dispose(self) -> None:
        self._dispose_bindings()
        self._toolkit.clear_folder(self.parameters_folder)


def _matches_default(current: Any, default: float) -> bool:
    if not isinstance(current, (int, float)) or isinstance(current, bool):
        return False
    if math.isnan(float(current)):
        return False
    return abs(float(current) - default) < _DEFAULT_TOLERANCE


def _default_setter(panel: PanelManager, index: int, value: float):
    def apply() -> None:
        panel.apply_default(index, value)

    return apply


__all__ = ["PanelManager", "WAITING_TEXT", "EMPTY_TEXT", "NO_ERRORS_TEXT", "RESET_ALL_TITLE"]
