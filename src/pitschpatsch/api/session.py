# どこで: `src/pitschpatsch/api/session.py`。
# 何を: エディタ/サンドボックス/ツールキット/タイマーから SyncCoordinator と PanelManager を組み立てる。
# なぜ: GUI ランナーとヘッドレス利用（テスト含む）で同じ配線を使うため。

from __future__ import annotations

from dataclasses import dataclass

from pitschpatsch.core.analysis.sites import EvalRange
from pitschpatsch.core.parameters.signatures import SignatureRegistry
from pitschpatsch.core.pipeline import AnalysisResult
from pitschpatsch.core.ports import ExecutionSandbox, GuiToolkit, HostEditor
from pitschpatsch.core.runtime_config import AnalysisConfig, SyncConfig
from pitschpatsch.core.sync.coordinator import SyncCoordinator
from pitschpatsch.core.sync.timer import ManualScheduler, Scheduler
from pitschpatsch.interactive.panel.manager import PanelManager
from pitschpatsch.interactive.toolkit.headless import HeadlessToolkit


@dataclass(frozen=True, slots=True)
class Session:
    """配線済みの同期エンジン一式。"""

    editor: HostEditor
    coordinator: SyncCoordinator
    panel: PanelManager
    toolkit: GuiToolkit
    scheduler: Scheduler

    def evaluate(self, eval_range: EvalRange) -> AnalysisResult | None:
        return self.coordinator.evaluate_range(eval_range)


def create_session(
    editor: HostEditor,
    sandbox: ExecutionSandbox,
    *,
    toolkit: GuiToolkit | None = None,
    scheduler: Scheduler | None = None,
    registry: SignatureRegistry | None = None,
    analysis_config: AnalysisConfig | None = None,
    sync_config: SyncConfig | None = None,
) -> Session:
    """同期エンジンを組み立て、エディタの変更/評価コマンドを購読させて返す。

    toolkit/scheduler を省略するとヘッドレス（HeadlessToolkit/ManualScheduler）で組み立てる。
    """

    toolkit = HeadlessToolkit() if toolkit is None else toolkit
    scheduler = ManualScheduler() if scheduler is None else scheduler
    coordinator = SyncCoordinator(
        editor,
        sandbox,
        scheduler,
        registry=registry,
        analysis_config=analysis_config,
        sync_config=sync_config,
    )
    panel = PanelManager(toolkit, coordinator)
    coordinator.attach()
    return Session(
        editor=editor,
        coordinator=coordinator,
        panel=panel,
        toolkit=toolkit,
        scheduler=scheduler,
    )


__all__ = ["Session", "create_session"]
