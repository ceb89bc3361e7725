# どこで: `src/pitschpatsch/api/__init__.py`。
# 何を: 公開 API パッケージのエントリポイントとして run と create_session を再エクスポートする。
# なぜ: ユーザーコードからシンプルに API を import できるようにするため。

from __future__ import annotations

from .session import Session, create_session

__all__ = ["Session", "create_session", "run"]


def run(*args, **kwargs):
    """公開 run API へのラッパ（遅延インポートで GUI 依存を後回しにする）。"""

    from .runner import run as _run

    return _run(*args, **kwargs)
