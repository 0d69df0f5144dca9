"""Shared test helpers."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine, Mapping
from typing import Any

import pytest
from kungfu import Result, Ok, Error

from settle._errors import CheckoutError, CheckoutErrorKind
from settle.persistence import MemoryStore, StoreError


def run[T](coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


def ok[T, E](result: Result[T, E]) -> T:
    match result:
        case Ok(value):
            return value
        case Error(e):
            pytest.fail(f"expected Ok, got Error({e})")


def err[T](result: Result[T, CheckoutError], kind: CheckoutErrorKind | None = None) -> CheckoutError:
    match result:
        case Ok(value):
            pytest.fail(f"expected Error, got Ok({value!r})")
        case Error(e):
            if kind is not None:
                assert e.kind is kind, f"expected {kind.name}, got {e}"
            return e


class FailingStore(MemoryStore):
    """MemoryStore whose writes to fail_keys return StoreError."""

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        super().__init__(initial)
        self.fail_keys: set[str] = set()

    def set_many(self, values: Mapping[str, Any]) -> Result[None, StoreError]:
        if self.fail_keys & set(values):
            return Error(StoreError(f"disk full writing {sorted(values)}"))
        return super().set_many(values)

    def remove(self, key: str) -> Result[bool, StoreError]:
        if key in self.fail_keys:
            return Error(StoreError(f"disk full removing {key}"))
        return super().remove(key)
