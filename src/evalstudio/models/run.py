"""Evaluation run models and their status lifecycle.

These models encode the persisted run contract read by presentation
layers: status, a snapshot of the configuration, ordered results and
the summary.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from evalstudio.errors import StatusTransitionError
from evalstudio.models.dataset import utc_now
from evalstudio.models.evaluator import EvaluatorConfig
from evalstudio.models.result import EvaluationSummary, TestCaseResult


class EvaluationMode(str, Enum):
    offline = "offline"
    online = "online"


class EvaluationStatus(str, Enum):
    """Lifecycle of a run. Transitions only move forward."""

    pending = "pending"
    running = "running"
    completed = "completed"
    failed = "failed"


class EvaluationScope(str, Enum):
    node = "node"
    subgraph = "subgraph"
    flow = "flow"


class TriggerType(str, Enum):
    manual = "manual"
    on_run_complete = "on_run_complete"
    on_node_execute = "on_node_execute"
    scheduled = "scheduled"
    on_error = "on_error"
    on_threshold_breach = "on_threshold_breach"


# Allowed next states for each status.
_TRANSITIONS: dict[EvaluationStatus, frozenset[EvaluationStatus]] = {
    EvaluationStatus.pending: frozenset({EvaluationStatus.running}),
    EvaluationStatus.running: frozenset(
        {EvaluationStatus.completed, EvaluationStatus.failed}
    ),
    EvaluationStatus.completed: frozenset(),
    EvaluationStatus.failed: frozenset(),
}


class EvaluationTarget(BaseModel):
    """Which part of the flow a run evaluates."""

    scope: EvaluationScope = EvaluationScope.flow
    node_ids: list[str] | None = None
    start_node_id: str | None = None
    end_node_id: str | None = None


class OfflineRunConfig(BaseModel):
    """Configuration snapshot for an offline (dataset-driven) run."""

    mode: EvaluationMode = EvaluationMode.offline
    dataset_id: str
    evaluators: list[EvaluatorConfig]
    target: EvaluationTarget = Field(default_factory=EvaluationTarget)
    run_count: int = Field(default=1, ge=1)


class EvaluationRun(BaseModel):
    """One invocation of the evaluator suite over a dataset."""

    id: str
    name: str
    mode: EvaluationMode = EvaluationMode.offline
    status: EvaluationStatus = EvaluationStatus.pending
    config: OfflineRunConfig
    started_at: str = Field(default_factory=utc_now)
    completed_at: str | None = None
    results: list[TestCaseResult] = Field(default_factory=list)
    summary: EvaluationSummary = Field(default_factory=EvaluationSummary)

    def transition(self, status: EvaluationStatus) -> None:
        """Move the run to *status*.

        Terminal states stamp ``completed_at``.

        Raises:
            StatusTransitionError: If the move is not forward along
                pending -> running -> completed | failed.
        """
        if status not in _TRANSITIONS[self.status]:
            raise StatusTransitionError(
                f"Cannot move run {self.id} from {self.status.value!r} "
                f"to {status.value!r}"
            )
        self.status = status
        if status in (EvaluationStatus.completed, EvaluationStatus.failed):
            self.completed_at = utc_now()


class OnlineTrigger(BaseModel):
    """When an online evaluation fires."""

    type: TriggerType = TriggerType.on_run_complete
    sample_rate: float = Field(default=1.0, ge=0.0, le=1.0)
    node_ids: list[str] = Field(default_factory=list)


class OnlineEvaluationConfig(BaseModel):
    """Stored configuration for runtime (online) evaluations."""

    id: str
    name: str = ""
    enabled: bool = False
    trigger: OnlineTrigger = Field(default_factory=OnlineTrigger)
    evaluators: list[EvaluatorConfig] = Field(default_factory=list)
    target: EvaluationTarget = Field(default_factory=EvaluationTarget)
    baseline_dataset_id: str | None = None
