"""Progress steps — counters for handlers and the iterator the engine pulls.

Progress-emitting tool handlers are generators::

    def analyze(args):
        step = create_progress(3)
        yield step()  # 1/3
        yield step()  # 2/3
        yield step()  # 3/3
        return "done"

The engine never iterates the generator directly; it wraps it in a
:class:`StepIterator` and pulls one step at a time.
"""

from __future__ import annotations

import inspect
from collections.abc import AsyncGenerator, Callable, Generator
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from mcpkit.core.errors import ProgressOrderError


class Progress(BaseModel):
    """An interim ``current``/``total`` signal."""

    model_config = ConfigDict(frozen=True)

    current: int
    total: int

    @model_validator(mode="after")
    def _check_bounds(self) -> Progress:
        if self.current < 0 or self.total < 0:
            msg = "progress values must be non-negative"
            raise ValueError(msg)
        if self.current > self.total:
            msg = f"progress current ({self.current}) exceeds total ({self.total})"
            raise ValueError(msg)
        return self


def create_progress(total: int) -> Callable[[], Progress]:
    """Return a counter producing ``Progress(1, total)``, ``Progress(2, total)``, ...

    The count is capped at *total*; further calls keep returning
    ``Progress(total, total)``.
    """
    if total < 0:
        msg = "total must be non-negative"
        raise ValueError(msg)
    count = 0

    def step() -> Progress:
        nonlocal count
        count = min(count + 1, total)
        return Progress(current=count, total=total)

    return step


@dataclass(frozen=True)
class Finished:
    """Terminal marker returned by :meth:`StepIterator.next_step`."""

    value: Any


class StepIterator:
    """Pull-one-step-at-a-time view over a progress generator.

    Accepts a sync or async generator.  Each :meth:`next_step` call resumes
    the generator once and returns either the yielded :class:`Progress` or
    :class:`Finished` with the final value.  A sync generator's ``return``
    value is the final value; yielding anything other than a
    :class:`Progress` also finishes the run with that value, which is how
    async generators return.  The iterator is finite and not restartable.
    """

    def __init__(self, steps: Generator[Any, None, Any] | AsyncGenerator[Any, None]) -> None:
        self._steps = steps
        self._is_async = inspect.isasyncgen(steps)
        self._finished = False
        self._last: int | None = None

    @property
    def finished(self) -> bool:
        return self._finished

    async def next_step(self) -> Progress | Finished:
        if self._finished:
            msg = "step iterator already finished"
            raise RuntimeError(msg)

        try:
            if self._is_async:
                item = await self._steps.__anext__()  # type: ignore[union-attr]
            else:
                item = next(self._steps)  # type: ignore[arg-type]
        except StopIteration as stop:
            self._finished = True
            return Finished(stop.value)
        except StopAsyncIteration:
            self._finished = True
            return Finished(None)
        except BaseException:
            self._finished = True
            raise

        if not isinstance(item, Progress):
            await self.close()
            return Finished(item)

        if self._last is not None and item.current < self._last:
            await self.close()
            raise ProgressOrderError(self._last, item.current)
        self._last = item.current
        return item

    async def close(self) -> None:
        """Finalize the underlying generator."""
        self._finished = True
        if self._is_async:
            await self._steps.aclose()  # type: ignore[union-attr]
        else:
            self._steps.close()  # type: ignore[union-attr]
