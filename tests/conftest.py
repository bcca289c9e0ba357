from __future__ import annotations

import sys
from concurrent.futures import Executor, Future
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))


class InlineExecutor(Executor):
    """Executor running each task immediately in the calling thread."""

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


class ManualExecutor(Executor):
    """Executor that holds tasks until the test resolves them."""

    def __init__(self):
        self.tasks: list[tuple[object, tuple, Future]] = []

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        self.tasks.append((fn, args, future))
        return future

    def run(self, index: int) -> None:
        fn, args, future = self.tasks[index]
        try:
            future.set_result(fn(*args))
        except Exception as exc:
            future.set_exception(exc)


@pytest.fixture
def inline_executor() -> InlineExecutor:
    return InlineExecutor()


@pytest.fixture
def manual_executor() -> ManualExecutor:
    return ManualExecutor()
