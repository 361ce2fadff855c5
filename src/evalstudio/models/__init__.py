"""evalstudio data models - re-exports all public model classes."""

from evalstudio.models.config import JudgeConfig, ProjectConfig
from evalstudio.models.dataset import DataPoint, DataPointMetadata, Dataset, DatasetSource
from evalstudio.models.evaluator import (
    DEFAULT_EVALUATORS,
    EvaluatorConfig,
    EvaluatorDetails,
    EvaluatorResult,
    EvaluatorType,
)
from evalstudio.models.execution import ExecutionStep
from evalstudio.models.result import (
    EvaluationSummary,
    RunComparison,
    TestCaseImprovement,
    TestCaseRegression,
    TestCaseResult,
)
from evalstudio.models.run import (
    EvaluationMode,
    EvaluationRun,
    EvaluationScope,
    EvaluationStatus,
    EvaluationTarget,
    OfflineRunConfig,
    OnlineEvaluationConfig,
    OnlineTrigger,
    TriggerType,
)

__all__ = [
    "DEFAULT_EVALUATORS",
    "DataPoint",
    "DataPointMetadata",
    "Dataset",
    "DatasetSource",
    "EvaluationMode",
    "EvaluationRun",
    "EvaluationScope",
    "EvaluationStatus",
    "EvaluationSummary",
    "EvaluationTarget",
    "EvaluatorConfig",
    "EvaluatorDetails",
    "EvaluatorResult",
    "EvaluatorType",
    "ExecutionStep",
    "JudgeConfig",
    "OfflineRunConfig",
    "OnlineEvaluationConfig",
    "OnlineTrigger",
    "ProjectConfig",
    "RunComparison",
    "TestCaseImprovement",
    "TestCaseRegression",
    "TestCaseResult",
    "TriggerType",
]
