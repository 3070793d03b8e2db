from __future__ import annotations

from structwire._internal.integrations.pydantic_settings import (
    SETTINGS_BASES,
    is_pydantic_settings_subclass,
    load_settings,
)

__all__ = [
    "SETTINGS_BASES",
    "is_pydantic_settings_subclass",
    "load_settings",
]
