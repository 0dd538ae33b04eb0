"""Benchmark execution against the external benchmark service."""

from benchforge.benchmark.client import (
    BenchmarkError,
    BenchmarkServiceClient,
    ConnectivityError,
    SubmissionError,
)
from benchforge.benchmark.normalize import normalize_results
from benchforge.benchmark.pipeline import (
    BenchmarkOutcome,
    BenchmarkPipeline,
    BenchmarkValidationError,
    RunStage,
)

__all__ = [
    "BenchmarkError",
    "BenchmarkServiceClient",
    "ConnectivityError",
    "SubmissionError",
    "BenchmarkValidationError",
    "BenchmarkOutcome",
    "BenchmarkPipeline",
    "RunStage",
    "normalize_results",
]
