from __future__ import annotations

import dataclasses
import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from inspect import Parameter
from typing import Any, get_type_hints

from structwire._internal.classification import TypeClassificationPolicy
from structwire._internal.schema_types import NO_DEFAULT, Ownership, TypeKind
from structwire._internal.type_checks import unwrap_optional
from structwire.exceptions import StructWireInvalidConfigurationError


class FactoryArity(Enum):
    """Tags how a factory is invoked."""

    NULLARY = auto()
    """The factory takes no parameters and is called directly."""

    FIXED = auto()
    """The factory takes a fixed list of typed parameters resolved before the call."""


@dataclass(frozen=True, slots=True)
class FactoryParameter:
    """A declared parameter of a factory, resolved by its type only."""

    name: str
    annotation: Any
    kind: TypeKind
    ownership: Ownership
    keyword_only: bool = False
    default: Any = NO_DEFAULT


@dataclass(frozen=True, slots=True)
class FactoryEntry:
    """A registered factory or delegate together with its call signature."""

    func: Callable[..., Any]
    """The callable producing the instance."""
    returns: Any
    """The produced class, or ``None`` when the return type is not annotated."""
    parameters: tuple[FactoryParameter, ...] = ()
    """Parameters in declaration order."""
    arity: FactoryArity = FactoryArity.NULLARY
    """Whether parameters must be resolved before the call."""

    @property
    def display_name(self) -> str:
        return getattr(self.func, "__qualname__", repr(self.func))

    def call(self, args: list[Any], kwargs: dict[str, Any]) -> Any:
        if self.arity is FactoryArity.NULLARY:
            return self.func()
        return self.func(*args, **kwargs)


@dataclass(slots=True)
class FactoryEntryExtractor:
    """Builds ``FactoryEntry`` values from user callables."""

    policy: TypeClassificationPolicy = field(default_factory=TypeClassificationPolicy)

    def extract(self, func: Callable[..., Any]) -> FactoryEntry:
        """Describe a factory function, a class, or a callable object.

        Args:
            func: Callable to describe.

        """
        if not callable(func):
            msg = f"Factory must be callable, got {func!r}."
            raise StructWireInvalidConfigurationError(msg)

        hints = self._resolved_type_hints(func)
        parameters = tuple(
            self._describe_parameter(parameter, hints)
            for parameter in self._call_parameters(func)
            if parameter.kind not in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)
        )
        return FactoryEntry(
            func=func,
            returns=self._return_type(func, hints),
            parameters=parameters,
            arity=FactoryArity.FIXED if parameters else FactoryArity.NULLARY,
        )

    def _describe_parameter(self, parameter: Parameter, hints: dict[str, Any]) -> FactoryParameter:
        annotation = hints.get(parameter.name, parameter.annotation)
        if annotation is Parameter.empty or isinstance(annotation, str):
            annotation = Any
        inner, is_optional = unwrap_optional(annotation)
        return FactoryParameter(
            name=parameter.name,
            annotation=inner,
            kind=self.policy.classify(inner),
            ownership=Ownership.POINTER if is_optional else Ownership.VALUE,
            keyword_only=parameter.kind is Parameter.KEYWORD_ONLY,
            default=NO_DEFAULT if parameter.default is Parameter.empty else parameter.default,
        )

    def _call_parameters(self, func: Callable[..., Any]) -> tuple[Parameter, ...]:
        try:
            return tuple(inspect.signature(func).parameters.values())
        except (TypeError, ValueError):
            return ()

    def _return_type(self, func: Callable[..., Any], hints: dict[str, Any]) -> Any:
        if inspect.isclass(func):
            return func
        returns = hints.get("return")
        if returns is None:
            return None
        inner, _ = unwrap_optional(returns)
        return inner

    def _resolved_type_hints(self, func: Callable[..., Any]) -> dict[str, Any]:
        target: Any = func
        if inspect.isclass(func) and not dataclasses.is_dataclass(func):
            target = func.__init__
        elif not inspect.isclass(func) and not inspect.isroutine(func):
            target = type(func).__call__
        try:
            return get_type_hints(target, include_extras=True)
        except (AttributeError, NameError, TypeError):
            return {}


__all__ = [
    "FactoryArity",
    "FactoryEntry",
    "FactoryEntryExtractor",
    "FactoryParameter",
]
