# どこで: `src/pitschpatsch/core/sync/coordinator.py`。
# 何を: 解析 → GUI 値変更 → 即時評価 → debounce 後の書き戻し、のサイクルを状態機械として管理する。
# なぜ: ソーステキストを書き換える経路をここ 1 箇所に限り、書き戻し中のエディタ通知による再解析ループを防ぐため。

from __future__ import annotations

import logging
from collections.abc import Callable

from pitschpatsch.core.analysis.sites import EvalRange, SourceBlock
from pitschpatsch.core.codegen.eval_code import arrow_code, static_code
from pitschpatsch.core.codegen.formatter import Replacement
from pitschpatsch.core.errors import EvalError, ParseError, WriteBackConflict
from pitschpatsch.core.parameters.signatures import SignatureRegistry, default_registry
from pitschpatsch.core.pipeline import AnalysisResult, analyze_block
from pitschpatsch.core.ports import EditorChange, ExecutionSandbox, HostEditor
from pitschpatsch.core.runtime_config import AnalysisConfig, SyncConfig

from .state import TRANSITIONS, ErrorKind, ErrorReport, SyncState
from .timer import Scheduler, TimerHandle

_logger = logging.getLogger(__name__)

AnalysisListener = Callable[[AnalysisResult], None]
ErrorListener = Callable[[ErrorReport], None]
ValueListener = Callable[[int, Replacement], None]


class SyncCoordinator:
    """ソーステキストと GUI コントロールの同期を担う。

    Notes
    -----
    シングルスレッド前提。書き戻し中はガードを立て、その間のエディタ変更通知は無視する。
    最新の編集は保留中の書き戻しタイマーを作り直す（キューには積まない）。
    """

    def __init__(
        self,
        editor: HostEditor,
        sandbox: ExecutionSandbox,
        scheduler: Scheduler,
        *,
        registry: SignatureRegistry | None = None,
        analysis_config: AnalysisConfig | None = None,
        sync_config: SyncConfig | None = None,
    ) -> None:
        self._editor = editor
        self._sandbox = sandbox
        self._scheduler = scheduler
        self._registry = registry if registry is not None else default_registry()
        self._analysis_config = analysis_config if analysis_config is not None else AnalysisConfig()
        self._sync_config = sync_config if sync_config is not None else SyncConfig()

        self._state = SyncState.IDLE
        self.state_history: list[SyncState] = [SyncState.IDLE]
        self.errors: list[ErrorReport] = []

        self._analysis: AnalysisResult | None = None
        self._range: EvalRange | None = None
        self._baseline: str | None = None
        self._values: dict[int, Replacement] = {}
        self._originals: dict[int, Replacement] = {}
        self._timer: TimerHandle | None = None
        self._guard = False

        self._analysis_listeners: list[AnalysisListener] = []
        self._error_listeners: list[ErrorListener] = []
        self._value_listeners: list[ValueListener] = []

    # --- 参照 ---
    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def analysis(self) -> AnalysisResult | None:
        return self._analysis

    @property
    def eval_range(self) -> EvalRange | None:
        return self._range

    @property
    def baseline(self) -> str | None:
        return self._baseline

    @property
    def guarded(self) -> bool:
        return self._guard

    @property
    def commit_pending(self) -> bool:
        return self._timer is not None

    @property
    def eval_mode(self) -> str:
        return self._sync_config.eval_mode

    def set_eval_mode(self, mode: str) -> None:
        self._sync_config = SyncConfig(
            debounce_ms=self._sync_config.debounce_ms, eval_mode=str(mode)
        )

    def current_value(self, index: int) -> Replacement | None:
        """index の現在値（未編集なら元の値）を返す。"""

        if index in self._values:
            return self._values[index]
        return self._originals.get(index)

    def original_value(self, index: int) -> Replacement | None:
        return self._originals.get(index)

    def edited_values(self) -> dict[int, Replacement]:
        return dict(self._values)

    # --- リスナー ---
    def add_analysis_listener(self, listener: AnalysisListener) -> None:
        self._analysis_listeners.append(listener)

    def add_error_listener(self, listener: ErrorListener) -> None:
        self._error_listeners.append(listener)

    def add_value_listener(self, listener: ValueListener) -> None:
        """プログラム側からの値変更（reset など）を受け取るリスナーを登録する。"""

        self._value_listeners.append(listener)

    def attach(self) -> None:
        """エディタの変更/評価コマンドを購読する。"""

        self._editor.on_change(self.on_editor_change)
        self._editor.on_evaluate(self.evaluate_range)

    def clear_errors(self) -> None:
        self.errors.clear()

    # --- 状態遷移 ---
    def _transition(self, new: SyncState) -> None:
        old = self._state
        if new not in TRANSITIONS[old]:
            _logger.warning("想定外の状態遷移: %s -> %s", old.value, new.value)
        self._state = new
        self.state_history.append(new)
        _logger.debug("sync state: %s -> %s", old.value, new.value)

    def _report(self, kind: ErrorKind, error: Exception) -> ErrorReport:
        report = ErrorReport(kind=kind, message=str(error), error=error)
        self.errors.append(report)
        _logger.warning("%s error: %s", kind, error)
        for listener in list(self._error_listeners):
            try:
                listener(report)
            except Exception:
                _logger.exception("error listener が失敗しました")
        return report

    def _notify_analysis(self, result: AnalysisResult) -> None:
        for listener in list(self._analysis_listeners):
            try:
                listener(result)
            except Exception:
                _logger.exception("analysis listener が失敗しました")

    def _notify_value(self, index: int, value: Replacement) -> None:
        for listener in list(self._value_listeners):
            try:
                listener(index, value)
            except Exception:
                _logger.exception("value listener が失敗しました")

    # --- タイマー ---
    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _restart_timer(self) -> None:
        self._cancel_timer()
        self._timer = self._scheduler.call_later(self._sync_config.debounce_seconds, self._commit)

    # --- 解析 ---
    def _install(self, result: AnalysisResult) -> None:
        self._analysis = result
        self._range = result.block.eval_range
        self._baseline = result.block.text
        self._values = {}
        self._originals = {s.index: s.value for s in result.all_sites}

    def _analyze(self, text: str, eval_range: EvalRange) -> AnalysisResult:
        return analyze_block(
            SourceBlock(str(text), eval_range),
            registry=self._registry,
            config=self._analysis_config,
        )

    def evaluate(self, text: str, eval_range: EvalRange) -> AnalysisResult | None:
        """新しい評価範囲を解析してバインドする。

        保留中の書き戻しは取り消す。構文エラー時は ERROR へ遷移し、直前の解析結果は保持する。
        """

        self._cancel_timer()
        self._transition(SyncState.ANALYZING)
        try:
            result = self._analyze(text, eval_range)
        except ParseError as exc:
            # 範囲はエディタ側の現状に追従させる（古い解析からの書き戻しは競合として検出される）。
            self._range = eval_range
            self._transition(SyncState.ERROR)
            self._report("parse", exc)
            return None

        self._install(result)
        self._transition(SyncState.BOUND)
        _logger.debug(
            "analyzed: %d numeric sites, %d references, %d groups",
            len(result.sites),
            len(result.references),
            len(result.groups),
        )
        self._notify_analysis(result)
        return result

    def evaluate_range(self, eval_range: EvalRange) -> AnalysisResult | None:
        """エディタから範囲のテキストを取得して evaluate する。"""

        return self.evaluate(self._editor.get_text(eval_range), eval_range)

    # --- GUI からの値変更 ---
    def on_value_change(self, index: int, value: Replacement) -> None:
        """コントロールの値変更を受け取る。

        即座に評価用コードを再生成して実行し、書き戻しタイマーを再始動する。
        例外は送出しない（GUI のイベント経路を壊さないため）。
        """

        if self._analysis is None:
            _logger.debug("解析結果が無いため値変更を無視: index=%s", index)
            return
        if self._state not in {SyncState.BOUND, SyncState.EDITING, SyncState.ERROR}:
            _logger.debug("state=%s のため値変更を無視: index=%s", self._state.value, index)
            return
        if index not in self._originals:
            _logger.warning("未知のサイト index への値変更を無視: %s", index)
            return

        self._values[int(index)] = value
        self._transition(SyncState.EDITING)
        self._submit_eval()
        self._restart_timer()

    def reset_value(self, index: int) -> None:
        """index を解析時の値へ戻す。"""

        original = self._originals.get(index)
        if original is None:
            return
        self.on_value_change(index, original)
        self._notify_value(index, original)

    def reset_all(self) -> None:
        """編集済みの値をすべて解析時の値へ戻す。"""

        if self._analysis is None or not self._values:
            return
        if self._state not in {SyncState.BOUND, SyncState.EDITING, SyncState.ERROR}:
            return
        edited = sorted(self._values)
        for index in edited:
            self._values[index] = self._originals[index]
        self._transition(SyncState.EDITING)
        self._submit_eval()
        self._restart_timer()
        for index in edited:
            self._notify_value(index, self._originals[index])

    def _static_code(self) -> str:
        analysis = self._analysis
        assert analysis is not None
        return static_code(
            analysis.program, analysis.block.text, self._values, sites=analysis.all_sites
        )

    def _submit_eval(self) -> None:
        analysis = self._analysis
        if analysis is None:
            return
        static = self._static_code()
        if self._sync_config.eval_mode == "arrow":
            code = arrow_code(
                analysis.program,
                analysis.block.text,
                self._values,
                sites=analysis.all_sites,
                descriptors=analysis.descriptors,
            )
            try:
                self._sandbox.evaluate(code)
                return
            except Exception as exc:
                _logger.warning("arrow 形式の評価に失敗したため static 形式で再評価: %s", exc)
        try:
            self._sandbox.evaluate(static)
        except Exception as exc:
            error = exc if isinstance(exc, EvalError) else EvalError(str(exc))
            self._report("eval", error)

    # --- 書き戻し ---
    def flush(self) -> None:
        """保留中の書き戻しがあれば即座に実行する。"""

        if self._timer is not None:
            self._cancel_timer()
            self._commit()

    def _commit(self) -> None:
        self._timer = None
        analysis = self._analysis
        eval_range = self._range
        if analysis is None or eval_range is None or self._baseline is None:
            return

        self._transition(SyncState.COMMITTING)
        current = self._editor.get_text(eval_range)
        if current != self._baseline:
            self._values = {}
            self._transition(SyncState.ERROR)
            self._report(
                "write-back",
                WriteBackConflict("エディタの内容が変更されていたため、書き戻しを破棄しました"),
            )
            return

        new_text = self._static_code()
        if new_text == current:
            self._values = {}
            self._transition(SyncState.BOUND)
            return

        self._guard = True
        try:
            self._editor.replace_range(new_text, eval_range.start, eval_range.end)
        except Exception as exc:
            self._transition(SyncState.ERROR)
            self._report("write-back", exc)
            return
        finally:
            self._guard = False

        self._rebaseline(new_text, eval_range)

    def _rebaseline(self, new_text: str, old_range: EvalRange) -> None:
        """書き戻したテキストを新しい基準として静かに再解析する。

        サイト配置（数と関数/引数名の並び）が同じならバインディングはそのまま使う。
        変わった場合だけ解析リスナーへ通知し、GUI を作り直させる。
        """

        previous = self._analysis
        new_range = EvalRange.covering(new_text, origin=old_range.start)
        try:
            result = self._analyze(new_text, new_range)
        except ParseError as exc:
            self._range = new_range
            self._transition(SyncState.ERROR)
            self._report("parse", exc)
            return

        if previous is not None and result.layout == previous.layout:
            originals = self._originals
            self._install(result)
            self._originals = originals
            self._transition(SyncState.BOUND)
            return

        self._install(result)
        self._transition(SyncState.BOUND)
        self._notify_analysis(result)

    # --- エディタからの変更通知 ---
    def on_editor_change(self, change: EditorChange) -> None:
        """エディタの変更通知を処理する。

        書き戻し中（ガード中）は無視する。範囲より前の変更は範囲を平行移動し、
        範囲内の変更は保留中の書き戻しを取り消して再解析する。範囲より後ろは無視する。
        """

        if self._guard:
            return
        eval_range = self._range
        if eval_range is None:
            return

        if change.end <= eval_range.start:
            self._range = EvalRange(
                change.map_position(eval_range.start), change.map_position(eval_range.end)
            )
            if self._analysis is not None and self._range != eval_range:
                self._analysis = self._shifted_analysis(self._analysis, self._range)
            return
        if change.start >= eval_range.end:
            return

        self._cancel_timer()
        new_start = eval_range.start if change.start >= eval_range.start else change.start
        if change.end <= eval_range.end:
            new_end = change.map_position(eval_range.end)
        else:
            new_end = change.inserted_end
        new_range = EvalRange(new_start, new_end)
        self.evaluate(self._editor.get_text(new_range), new_range)

    def _shifted_analysis(self, analysis: AnalysisResult, new_range: EvalRange) -> AnalysisResult:
        """範囲の移動に合わせて解析結果を取り直す（テキストは同じなので失敗しない）。"""

        try:
            return self._analyze(analysis.block.text, new_range)
        except ParseError:  # pragma: no cover
            return analysis


__all__ = ["SyncCoordinator"]
