"""A small sequential task runner with named dependencies."""

from __future__ import annotations

import asyncio
import inspect
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from . import output
from .errors import DuplicateTaskError, TaskCycleError, TaskFailedError, UnknownTaskError

TaskBody = Callable[[], Any]


@dataclass(frozen=True)
class Task:
    """
    A named unit of work.

    The body signals completion by returning and failure by raising. If it
    returns an awaitable, that awaitable is driven to completion before the
    next task starts. A task without a body only groups its dependencies.
    """

    name: str
    dependencies: Tuple[str, ...] = ()
    body: Optional[TaskBody] = None
    description: Optional[str] = None


async def _wait(awaitable: Awaitable) -> Any:
    return await awaitable


def _format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    return f"{seconds:.2f} s"


class TaskGraph:
    """Registry of tasks for one orchestration session."""

    def __init__(self):
        self._tasks: Dict[str, Task] = {}

    def register(
        self,
        name: str,
        dependencies: Iterable[str] = (),
        body: Optional[TaskBody] = None,
        description: Optional[str] = None,
    ) -> Task:
        if name in self._tasks:
            raise DuplicateTaskError(name)
        task = Task(name, tuple(dependencies), body, description)
        self._tasks[name] = task
        return task

    def __contains__(self, name: str) -> bool:
        return name in self._tasks

    def names(self) -> List[str]:
        return list(self._tasks)

    def get(self, name: str) -> Task:
        try:
            return self._tasks[name]
        except KeyError:
            raise UnknownTaskError(name) from None

    def plan(self, name: str) -> List[str]:
        """
        Returns the task names run(name) executes, in order.

        Dependencies are expanded depth-first in declared order, each before
        the task that lists it. Shared dependencies are not collapsed: a task
        reached twice runs twice.
        """
        order: List[str] = []
        self._expand(name, [], order)
        return order

    def _expand(self, name: str, stack: List[str], order: List[str]) -> None:
        if name in stack:
            raise TaskCycleError(stack[stack.index(name):] + [name])
        if name not in self._tasks:
            raise UnknownTaskError(name, stack[-1] if stack else None)

        stack.append(name)
        for dependency in self._tasks[name].dependencies:
            self._expand(dependency, stack, order)
        stack.pop()
        order.append(name)

    def run(self, name: str) -> List[str]:
        """
        Runs a task after its dependency chain, one task at a time.

        The whole chain is validated before anything executes. The first body
        that raises stops the chain and surfaces as TaskFailedError.
        """
        steps = self.plan(name)
        for step in steps:
            self._execute(self._tasks[step])
        return steps

    def _execute(self, task: Task) -> None:
        output.log(f"Starting '{task.name}'...")
        started = time.monotonic()
        if task.body is not None:
            try:
                result = task.body()
                if inspect.isawaitable(result):
                    asyncio.run(_wait(result))
            except Exception as e:
                elapsed = _format_duration(time.monotonic() - started)
                output.log(f"'{task.name}' errored after {elapsed}")
                raise TaskFailedError(task.name, e) from e
        elapsed = _format_duration(time.monotonic() - started)
        output.log(f"Finished '{task.name}' after {elapsed}")
