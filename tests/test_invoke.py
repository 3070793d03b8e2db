from __future__ import annotations

from dataclasses import dataclass

import pytest

from structwire import Injector, StructWireMethodNotFoundError


@dataclass
class Calculator:
    offset: int = 0

    def add(self, left: int, right: int) -> int:
        return left + right + self.offset

    def divmod(self, left: int, right: int) -> tuple[int, int]:
        return divmod(left, right)

    def reset(self) -> None:
        self.offset = 0


def test_invoke_wraps_single_result(injector: Injector) -> None:
    assert injector.invoke(Calculator(offset=1), "add", 2, 3) == [6]


def test_invoke_unpacks_tuple_results(injector: Injector) -> None:
    assert injector.invoke(Calculator(), "divmod", 7, 2) == [3, 1]


def test_invoke_returns_empty_list_for_none(injector: Injector) -> None:
    calculator = Calculator(offset=5)

    assert injector.invoke(calculator, "reset") == []
    assert calculator.offset == 0


@pytest.mark.parametrize("method_name", ["missing", "offset"])
def test_invoke_rejects_missing_methods(injector: Injector, method_name: str) -> None:
    with pytest.raises(StructWireMethodNotFoundError, match=f"Method '{method_name}' not found"):
        injector.invoke(Calculator(), method_name)
