"""RunExecutor: evaluates a whole dataset and records the run.

Obtains actual outputs from a producer for every data point, scores
each with the evaluation runner, and drives the run through
pending -> running -> completed (or failed). Data points are evaluated
concurrently via asyncio.Semaphore + TaskGroup when max_parallel > 1;
results always keep dataset order.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Callable

import structlog

from evalstudio.evaluation.aggregation import calculate_summary
from evalstudio.evaluation.evaluators.base import elapsed_ms
from evalstudio.evaluation.runner import run_evaluation_async
from evalstudio.execution.producer import Producer
from evalstudio.ids import IdGenerator, default_id_generator
from evalstudio.judge.backend import JudgeBackend
from evalstudio.models.dataset import DataPoint, Dataset
from evalstudio.models.evaluator import EvaluatorConfig
from evalstudio.models.result import TestCaseResult
from evalstudio.models.run import (
    EvaluationRun,
    EvaluationStatus,
    EvaluationTarget,
    OfflineRunConfig,
)
from evalstudio.storage.run_store import RunStore

log = structlog.get_logger(__name__)


class RunExecutor:
    """Orchestrates one offline evaluation run over a dataset."""

    def __init__(
        self,
        producer: Producer,
        run_store: RunStore | None = None,
        max_parallel: int = 1,
        judge_backend: JudgeBackend | None = None,
        judge_timeout: float | None = None,
        id_generator: IdGenerator | None = None,
        concurrent_evaluators: bool = False,
    ) -> None:
        self._producer = producer
        self._store = run_store
        self._max_parallel = max(1, max_parallel)
        self._judge_backend = judge_backend
        self._judge_timeout = judge_timeout
        self._id_generator = id_generator or default_id_generator
        self._concurrent_evaluators = concurrent_evaluators

    async def execute(
        self,
        dataset: Dataset,
        evaluators: list[EvaluatorConfig],
        name: str | None = None,
        target: EvaluationTarget | None = None,
        progress_callback: Callable[[int, int], None] | None = None,
    ) -> EvaluationRun:
        """Evaluate every data point of *dataset* and return the finished run.

        The run is persisted after it starts and again once it completes.
        If anything escapes, the run is marked failed, persisted, and the
        exception re-raised.
        """
        run = EvaluationRun(
            id=self._id_generator(),
            name=name or f"{dataset.name} evaluation",
            config=OfflineRunConfig(
                dataset_id=dataset.id,
                evaluators=evaluators,
                target=target or EvaluationTarget(),
            ),
        )
        self._transition(run, EvaluationStatus.running)
        self._persist(run)

        try:
            if self._max_parallel <= 1:
                results = await self._run_sequential(
                    dataset.data_points, evaluators, progress_callback
                )
            else:
                results = await self._run_concurrent(
                    dataset.data_points, evaluators, progress_callback
                )
            run.results = results
            run.summary = calculate_summary(results)
            self._transition(run, EvaluationStatus.completed)
        except Exception:
            self._transition(run, EvaluationStatus.failed)
            self._persist(run)
            raise

        self._persist(run)
        return run

    def execute_sync(
        self,
        dataset: Dataset,
        evaluators: list[EvaluatorConfig],
        name: str | None = None,
        target: EvaluationTarget | None = None,
    ) -> EvaluationRun:
        """Blocking wrapper around execute() for callers without an event loop."""
        return asyncio.run(self.execute(dataset, evaluators, name=name, target=target))

    async def _run_sequential(
        self,
        data_points: list[DataPoint],
        evaluators: list[EvaluatorConfig],
        progress_callback: Callable[[int, int], None] | None,
    ) -> list[TestCaseResult]:
        results: list[TestCaseResult] = []
        for i, dp in enumerate(data_points, 1):
            results.append(await self._evaluate_data_point(dp, evaluators))
            if progress_callback is not None:
                progress_callback(i, len(data_points))
        return results

    async def _run_concurrent(
        self,
        data_points: list[DataPoint],
        evaluators: list[EvaluatorConfig],
        progress_callback: Callable[[int, int], None] | None,
    ) -> list[TestCaseResult]:
        semaphore = asyncio.Semaphore(self._max_parallel)
        results: list[TestCaseResult | None] = [None] * len(data_points)
        done = 0

        async def run_one(index: int, dp: DataPoint) -> None:
            nonlocal done
            async with semaphore:
                results[index] = await self._evaluate_data_point(dp, evaluators)
            done += 1
            if progress_callback is not None:
                progress_callback(done, len(data_points))

        async with asyncio.TaskGroup() as tg:
            for index, dp in enumerate(data_points):
                tg.create_task(run_one(index, dp))

        return [r for r in results if r is not None]

    async def _evaluate_data_point(
        self, data_point: DataPoint, evaluators: list[EvaluatorConfig]
    ) -> TestCaseResult:
        start = time.perf_counter()
        try:
            produced = self._producer(data_point)
            if inspect.isawaitable(produced):
                produced = await produced
        except Exception as exc:
            log.warning(
                "run.producer_failed",
                data_point_id=data_point.id,
                error=f"{type(exc).__name__}: {exc}",
            )
            return TestCaseResult(
                data_point_id=data_point.id,
                input=data_point.input,
                aggregate_score=0.0,
                passed=False,
                execution_time_ms=elapsed_ms(start),
                error=f"{type(exc).__name__}: {exc}",
            )

        return await run_evaluation_async(
            data_point,
            produced.actual_output,
            produced.actual_trajectory,
            evaluators,
            execution_trace=produced.execution_trace,
            judge_backend=self._judge_backend,
            judge_timeout=self._judge_timeout,
            concurrent=self._concurrent_evaluators,
        )

    def _transition(self, run: EvaluationRun, status: EvaluationStatus) -> None:
        previous = run.status
        run.transition(status)
        log.info(
            "run.status_changed",
            run_id=run.id,
            previous=previous.value,
            status=status.value,
        )

    def _persist(self, run: EvaluationRun) -> None:
        if self._store is not None:
            self._store.save_run(run)
