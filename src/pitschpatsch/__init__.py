# どこで: `src/pitschpatsch/__init__.py`。
# 何を: ルート `pitschpatsch` パッケージを定義する。
# なぜ: import 起点を `pitschpatsch` に統一するため。

from __future__ import annotations

from pitschpatsch.api import create_session, run

__all__ = ["create_session", "run"]
