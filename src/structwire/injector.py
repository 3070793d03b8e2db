from __future__ import annotations

from structwire._internal.injector import Injector

__all__ = ["Injector"]
