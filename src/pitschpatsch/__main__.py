"""
どこで: `src/pitschpatsch/__main__.py`。
何を: `python -m pitschpatsch sketch.js` でコントロールパネルを起動する CLI。
"""

from __future__ import annotations

import argparse
from pathlib import Path


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="pitschpatsch")
    p.add_argument("path", help="ライブ編集するスケッチファイル")
    p.add_argument("--config", default=None, help="config.yaml のパス（探索より優先）")
    p.add_argument(
        "--eval-out",
        default=None,
        help="評価用コードの書き出し先（省略時は <stem>.live<suffix>）",
    )
    p.add_argument("--fps", type=float, default=60.0, help="パネルの目標フレームレート")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    from pitschpatsch.api.runner import run
    from pitschpatsch.interactive.editor.sandbox import SidecarFileSandbox

    evaluate = None
    if args.eval_out:
        evaluate = SidecarFileSandbox(Path(args.eval_out).expanduser()).evaluate
    run(args.path, evaluate=evaluate, config_path=args.config, fps=float(args.fps))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
