"""Data point construction, import/export, generation and validation."""

from evalstudio.datasets.codec import (
    ImportResult,
    export_to_csv,
    export_to_json,
    import_file,
    parse_csv,
    parse_json,
    parse_jsonl,
)
from evalstudio.datasets.factory import new_data_point
from evalstudio.datasets.generator import GenerationConfig, generate_test_cases
from evalstudio.datasets.validation import (
    DatasetValidation,
    TestRunCapture,
    capture_from_test_run,
    validate_dataset,
)

__all__ = [
    "DatasetValidation",
    "GenerationConfig",
    "ImportResult",
    "TestRunCapture",
    "capture_from_test_run",
    "export_to_csv",
    "export_to_json",
    "generate_test_cases",
    "import_file",
    "new_data_point",
    "parse_csv",
    "parse_json",
    "parse_jsonl",
    "validate_dataset",
]
