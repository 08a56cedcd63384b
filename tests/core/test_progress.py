"""Tests for progress counters and the step iterator."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from mcpkit.core.errors import ProgressOrderError
from mcpkit.core.progress import Finished, Progress, StepIterator, create_progress


class TestProgress:
    def test_current_cannot_exceed_total(self) -> None:
        with pytest.raises(ValidationError):
            Progress(current=4, total=3)

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Progress(current=-1, total=3)


class TestCreateProgress:
    def test_counts_up(self) -> None:
        step = create_progress(3)
        assert [step().current for _ in range(3)] == [1, 2, 3]

    def test_capped_at_total(self) -> None:
        step = create_progress(2)
        steps = [step() for _ in range(4)]
        assert [s.current for s in steps] == [1, 2, 2, 2]
        assert all(s.total == 2 for s in steps)

    def test_independent_counters(self) -> None:
        a, b = create_progress(3), create_progress(3)
        a()
        a()
        assert b().current == 1

    def test_negative_total(self) -> None:
        with pytest.raises(ValueError):
            create_progress(-1)


class TestStepIterator:
    async def test_sync_generator(self) -> None:
        def gen():
            step = create_progress(2)
            yield step()
            yield step()
            return "done"

        it = StepIterator(gen())
        assert await it.next_step() == Progress(current=1, total=2)
        assert await it.next_step() == Progress(current=2, total=2)
        assert await it.next_step() == Finished("done")
        assert it.finished

    async def test_async_generator_final_yield(self) -> None:
        async def gen():
            yield Progress(current=1, total=1)
            yield {"result": 1}

        it = StepIterator(gen())
        assert isinstance(await it.next_step(), Progress)
        assert await it.next_step() == Finished({"result": 1})

    async def test_async_generator_exhausted(self) -> None:
        async def gen():
            yield Progress(current=1, total=1)

        it = StepIterator(gen())
        await it.next_step()
        assert await it.next_step() == Finished(None)

    async def test_backwards_step_rejected(self) -> None:
        def gen():
            yield Progress(current=2, total=3)
            yield Progress(current=1, total=3)

        it = StepIterator(gen())
        await it.next_step()
        with pytest.raises(ProgressOrderError):
            await it.next_step()
        assert it.finished

    async def test_no_pull_after_finish(self) -> None:
        def gen():
            return "x"
            yield  # pragma: no cover

        it = StepIterator(gen())
        assert await it.next_step() == Finished("x")
        with pytest.raises(RuntimeError):
            await it.next_step()

    async def test_error_propagates(self) -> None:
        def gen():
            yield Progress(current=1, total=2)
            raise ValueError("boom")

        it = StepIterator(gen())
        await it.next_step()
        with pytest.raises(ValueError, match="boom"):
            await it.next_step()

    async def test_close_runs_finally(self) -> None:
        cleaned: list[Any] = []

        def gen():
            try:
                yield Progress(current=1, total=2)
                yield Progress(current=2, total=2)
            finally:
                cleaned.append(True)

        it = StepIterator(gen())
        await it.next_step()
        await it.close()
        assert cleaned == [True]
