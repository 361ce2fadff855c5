"""Exception hierarchy shared across evalstudio."""

from __future__ import annotations


class EvalStudioError(Exception):
    """Base class for all evalstudio errors."""


class DatasetNotFoundError(EvalStudioError):
    """Raised when a dataset id is not present in the store."""

    def __init__(self, dataset_id: str) -> None:
        self.dataset_id = dataset_id
        super().__init__(f"Dataset '{dataset_id}' not found")


class RunNotFoundError(EvalStudioError):
    """Raised when an evaluation run id is not present in the store."""

    def __init__(self, run_id: str) -> None:
        self.run_id = run_id
        super().__init__(f"Evaluation run '{run_id}' not found")


class StatusTransitionError(EvalStudioError, ValueError):
    """Raised when an evaluation run is moved backwards or sideways."""


class UnknownEvaluatorError(EvalStudioError, ValueError):
    """Raised when no evaluator is registered for a type tag."""


class JudgeBackendError(EvalStudioError):
    """Raised when a judge backend cannot produce scores."""


class EvaluatorTimeoutError(EvalStudioError, TimeoutError):
    """Raised when an evaluator exceeds its time budget."""
