from __future__ import annotations

import importlib
import logging
import warnings
from typing import Any

from structwire._internal.type_checks import is_runtime_class

_PYDANTIC_V1_WARNING_PATTERN = (
    r"Core Pydantic V1 functionality isn't compatible with Python 3\.14 or greater\."
)

logger = logging.getLogger(__name__)


def _load_base_settings(module_name: str) -> type[Any] | None:
    with warnings.catch_warnings():
        warnings.filterwarnings(
            "ignore",
            message=_PYDANTIC_V1_WARNING_PATTERN,
            category=UserWarning,
        )
        try:
            module = importlib.import_module(module_name)
            base_settings = getattr(module, "BaseSettings", None)
        except ImportError:
            return None
    return base_settings if isinstance(base_settings, type) else None


def _discover_settings_bases() -> tuple[type[Any], ...]:
    # pydantic 2 moved BaseSettings out; only fall back to ``pydantic`` without ``pydantic.v1``.
    legacy_base = _load_base_settings("pydantic.v1") or _load_base_settings("pydantic")
    bases: list[type[Any]] = []
    for base in (_load_base_settings("pydantic_settings"), legacy_base):
        if base is not None and base not in bases:
            bases.append(base)
    return tuple(bases)


SETTINGS_BASES: tuple[type[Any], ...] = _discover_settings_bases()


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return whether a class is a concrete Pydantic settings model.

    ``pydantic_settings.BaseSettings`` and the legacy ``pydantic.v1`` and
    ``pydantic`` ``BaseSettings`` are recognized when importable. The bases
    themselves are not settings models. Without Pydantic installed this
    returns ``False`` for every candidate.

    Args:
        candidate: Object to test.

    """
    if not is_runtime_class(candidate) or candidate in SETTINGS_BASES:
        return False
    try:
        return any(issubclass(candidate, base) for base in SETTINGS_BASES)
    except TypeError:
        return False


def load_settings(settings_class: type[Any]) -> Any:
    """Instantiate a settings model so it reads its values from the environment.

    Validation errors raised by Pydantic propagate unchanged.

    Args:
        settings_class: Settings model class accepted by ``is_pydantic_settings_subclass``.

    """
    logger.debug("Loading settings model '%s' from the environment", settings_class.__qualname__)
    return settings_class()


__all__ = [
    "SETTINGS_BASES",
    "is_pydantic_settings_subclass",
    "load_settings",
]
