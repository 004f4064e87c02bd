from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class Task(Protocol):
    """Unit of work run by ``RetryEntry``.

    ``execute`` signals failure by raising. It may be called several times per
    run, so it must tolerate repetition.
    """

    def execute(self) -> object:
        """Run the work once."""


@dataclass(frozen=True)
class TaskFunc:
    """Adapt a zero-argument callable into a ``Task``."""

    func: Callable[[], object]

    def execute(self) -> object:
        return self.func()


def as_task(task: Task | Callable[[], object]) -> Task:
    """Return ``task`` as a ``Task``, wrapping plain callables."""
    if isinstance(task, Task):
        return task
    if callable(task):
        return TaskFunc(task)
    raise TypeError(
        f"task must be callable or define execute(), got {type(task).__name__}"
    )
