"""
どこで: リポジトリ直下 `main.py`。
何を: 同梱のサンプルスケッチに対してコントロールパネルを起動する。
なぜ: 動作確認用の最小エントリポイントとして利用するため。
"""

import sys

sys.path.append("src")

from pitschpatsch import run

SKETCH_PATH = "sketch/hydra_example.js"


if __name__ == "__main__":
    run(SKETCH_PATH)
