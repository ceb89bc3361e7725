"""
どこで: `src/pitschpatsch/core/pipeline.py`。
何を: ソースブロックを parse → サイト抽出 → 分類 → グルーピングまで通し、1 つの AnalysisResult にまとめる。
なぜ: Sync Coordinator（本解析/再ベースライン）とテストで同じ解析経路を共有するため。
"""

from __future__ import annotations

from dataclasses import dataclass

from pitschpatsch.core.analysis.sites import (
    NumericLiteralSite,
    ReferenceSite,
    Site,
    SourceBlock,
    find_numeric_literals,
    find_reference_sites,
)
from pitschpatsch.core.analysis.syntax import Program, parse
from pitschpatsch.core.parameters.calls import CallFolder, ordered_call_groups
from pitschpatsch.core.parameters.classifier import classify_all
from pitschpatsch.core.parameters.descriptor import ParameterDescriptor
from pitschpatsch.core.parameters.grouping import ParameterGroup, detect_groups
from pitschpatsch.core.parameters.signatures import SignatureRegistry, default_registry
from pitschpatsch.core.runtime_config import AnalysisConfig


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """1 回の解析パスの結果。"""

    block: SourceBlock
    program: Program
    sites: tuple[NumericLiteralSite, ...]
    references: tuple[ReferenceSite, ...]
    descriptors: tuple[ParameterDescriptor, ...]
    calls: tuple[CallFolder, ...]
    groups: tuple[ParameterGroup, ...]

    @property
    def all_sites(self) -> tuple[Site, ...]:
        """数値サイトと参照サイトを index 順に返す。"""

        return (*self.sites, *self.references)

    @property
    def layout(self) -> tuple[tuple[str, str], ...]:
        """サイト配置の署名（関数名, 引数名）列。再ベースライン時の比較に使う。"""

        return tuple((d.function_name, d.name) for d in self.descriptors)

    def descriptor(self, index: int) -> ParameterDescriptor | None:
        if 0 <= int(index) < len(self.descriptors):
            return self.descriptors[int(index)]
        return None


def analyze_block(
    block: SourceBlock,
    *,
    registry: SignatureRegistry | None = None,
    config: AnalysisConfig | None = None,
) -> AnalysisResult:
    """ブロックを解析して AnalysisResult を返す。

    Raises
    ------
    ParseError
        ブロックが構文的に不正な場合。
    """

    cfg = config if config is not None else AnalysisConfig()
    reg = registry if registry is not None else default_registry()
    text = block.text
    eval_range = block.eval_range

    program = parse(text)
    sites = find_numeric_literals(
        text, eval_range, program=program, skip_markers=cfg.skip_line_markers
    )
    references = find_reference_sites(
        text,
        eval_range,
        first_index=len(sites),
        program=program,
        outputs=cfg.outputs,
        sources=cfg.sources,
        skip_markers=cfg.skip_line_markers,
    )
    descriptors = classify_all(
        text,
        [*sites, *references],
        reg,
        window=cfg.classifier_window,
        origin=eval_range.start,
    )
    return AnalysisResult(
        block=block,
        program=program,
        sites=tuple(sites),
        references=tuple(references),
        descriptors=tuple(descriptors),
        calls=tuple(ordered_call_groups(descriptors)),
        groups=tuple(detect_groups(descriptors)),
    )


__all__ = ["AnalysisResult", "analyze_block"]
