"""Mapping of raw benchmark service payloads to canonical metrics."""

from typing import Any, Optional

from benchforge.models.registry import BenchmarkResults

BYTES_PER_MEGABYTE = 1024 * 1024


def _number(payload: dict[str, Any], key: str) -> Optional[float]:
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise TypeError(f"{key} is not a number")
    return float(value)


def _number_or_zero(payload: dict[str, Any], key: str) -> float:
    value = _number(payload, key)
    return 0.0 if value is None else value


def normalize_results(payload: dict[str, Any]) -> BenchmarkResults:
    """Build canonical metrics from a service response.

    Missing or null metrics default to zero, except ``gpu_utilization`` which
    stays absent. ``memory_usage`` arrives in megabytes and is stored in bytes.

    Raises:
        ValueError, TypeError, OverflowError: if a metric is not a usable number.
    """
    return BenchmarkResults(
        accuracy=_number_or_zero(payload, "accuracy"),
        inference_time=_number_or_zero(payload, "inference_time"),
        memory_usage=_number_or_zero(payload, "memory_usage") * BYTES_PER_MEGABYTE,
        fps=_number_or_zero(payload, "fps"),
        latency=_number_or_zero(payload, "latency"),
        throughput=_number_or_zero(payload, "throughput"),
        gpu_utilization=_number(payload, "gpu_utilization"),
    )
