"""Display formatting for benchmark metrics."""

import math
from typing import Optional, Union

from benchforge.models.registry import BenchmarkResults

Number = Union[int, float]

NOT_AVAILABLE = "N/A"
VERY_HIGH = "Very High"

BYTES_PER_MEGABYTE = 1024 * 1024


def format_metric(value: Optional[Number], suffix: str = "", precision: int = 2) -> str:
    """Render a metric value for display.

    None and NaN render as "N/A"; infinite values (an FPS derived from a
    zero inference time, for example) render as "Very High".
    """
    if value is None or math.isnan(value):
        return NOT_AVAILABLE
    if math.isinf(value):
        return VERY_HIGH
    return f"{value:.{precision}f}{suffix}"


def format_size(size_bytes: Number) -> str:
    """Render a byte count in megabytes."""
    return format_metric(size_bytes / BYTES_PER_MEGABYTE, " MB")


def metric_rows(results: BenchmarkResults) -> list[tuple[str, str]]:
    """Label/value pairs in the order the results card shows them."""
    rows = [
        ("Accuracy", format_metric(results.accuracy, " %")),
        ("Inference Time", format_metric(results.inference_time, " ms")),
        ("Memory Usage", format_size(results.memory_usage)),
        ("FPS", format_metric(results.fps)),
        ("Latency", format_metric(results.latency, " ms")),
        ("Throughput", format_metric(results.throughput, " FPS")),
    ]
    if results.gpu_utilization is not None:
        rows.append(("GPU Utilization", format_metric(results.gpu_utilization, " %")))
    return rows
