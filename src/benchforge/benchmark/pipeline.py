"""Benchmark execution pipeline: probe, submit, normalize, commit."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import structlog

from benchforge.benchmark.client import (
    BenchmarkError,
    BenchmarkServiceClient,
    SubmissionError,
)
from benchforge.benchmark.normalize import normalize_results
from benchforge.models.registry import (
    RECOGNIZED_FORMATS,
    Attachment,
    BenchmarkResults,
    normalize_format,
)
from benchforge.registry import ModelRegistry

logger = structlog.get_logger(__name__)


class BenchmarkValidationError(BenchmarkError):
    """Run rejected before any network activity."""

    pass


class RunStage(str, Enum):
    """Stage of a single benchmark run."""

    IDLE = "idle"
    PROBING = "probing"
    SUBMITTING = "submitting"
    NORMALIZING = "normalizing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class BenchmarkOutcome:
    """Reported result of ``BenchmarkPipeline.run_benchmark``."""

    model_id: str
    stage: RunStage
    results: Optional[BenchmarkResults] = None
    error: Optional[BenchmarkError] = None
    committed: bool = False

    @property
    def succeeded(self) -> bool:
        return self.stage == RunStage.COMPLETED

    @property
    def message(self) -> str:
        if self.error is not None:
            return str(self.error)
        return "Benchmark completed"


class BenchmarkPipeline:
    """Runs benchmarks against the service and records results in the registry.

    Runs are tracked per model, so overlapping runs for different models are
    each visible through ``run_stage`` until they finish.
    """

    def __init__(self, registry: ModelRegistry, client: BenchmarkServiceClient) -> None:
        self._registry = registry
        self._client = client
        self._runs: dict[str, RunStage] = {}

    @property
    def in_flight(self) -> dict[str, RunStage]:
        """Model IDs with a run in progress, mapped to their current stage."""
        return dict(self._runs)

    def run_stage(self, model_id: str) -> RunStage:
        return self._runs.get(model_id, RunStage.IDLE)

    def is_running(self, model_id: str) -> bool:
        return model_id in self._runs

    async def benchmark_model(self, model_id: str) -> BenchmarkOutcome:
        """Benchmark a registered model using its session attachment."""
        model = self._registry.get_model(model_id)
        if model is None:
            return self._fail(
                model_id, BenchmarkValidationError(f"Model not found: {model_id}")
            )
        return await self.run_benchmark(model.id, model.attachment, model.format)

    async def run_benchmark(
        self,
        model_id: str,
        attachment: Optional[Attachment],
        declared_format: Optional[str],
    ) -> BenchmarkOutcome:
        """Benchmark a model file and commit the metrics on success.

        Failures are reported through the returned outcome; the registry is
        only touched once normalized metrics are available. Nothing is
        retried.
        """
        try:
            model_format = self._check_preconditions(model_id, attachment, declared_format)
        except BenchmarkValidationError as e:
            return self._fail(model_id, e)

        log = logger.bind(model_id=model_id, model_format=model_format)
        self._runs[model_id] = RunStage.PROBING
        try:
            log.info("Checking benchmark service", url=self._client.base_url)
            await self._client.probe()

            self._runs[model_id] = RunStage.SUBMITTING
            log.info("Submitting benchmark", filename=attachment.filename, size=attachment.size)
            payload = await self._client.submit(attachment, model_format)

            self._runs[model_id] = RunStage.NORMALIZING
            try:
                results = normalize_results(payload)
            except (ValueError, TypeError, OverflowError) as e:
                raise SubmissionError("Malformed benchmark response") from e

            committed = self._registry.update_benchmark_results(model_id, results)
        except BenchmarkError as e:
            log.warning("Benchmark failed", stage=self._runs[model_id].value, error=str(e))
            return self._fail(model_id, e)
        finally:
            self._runs.pop(model_id, None)

        if not committed:
            log.warning("Model removed before results could be recorded")
        log.info("Benchmark completed", committed=committed)
        return BenchmarkOutcome(
            model_id=model_id,
            stage=RunStage.COMPLETED,
            results=results,
            committed=committed,
        )

    def _check_preconditions(
        self,
        model_id: str,
        attachment: Optional[Attachment],
        declared_format: Optional[str],
    ) -> str:
        if attachment is None:
            raise BenchmarkValidationError(
                "Model file unavailable. Add the model again to benchmark it."
            )
        model_format = normalize_format(declared_format)
        if model_format is None:
            expected = ", ".join(f".{f}" for f in sorted(RECOGNIZED_FORMATS))
            raise BenchmarkValidationError(
                f"Invalid file type {declared_format!r}. Expected one of: {expected}"
            )
        if model_id in self._runs:
            raise BenchmarkValidationError(f"Benchmark already running for model {model_id}")
        return model_format

    @staticmethod
    def _fail(model_id: str, error: BenchmarkError) -> BenchmarkOutcome:
        if isinstance(error, BenchmarkValidationError):
            logger.warning("Benchmark rejected", model_id=model_id, error=str(error))
        return BenchmarkOutcome(model_id=model_id, stage=RunStage.FAILED, error=error)
