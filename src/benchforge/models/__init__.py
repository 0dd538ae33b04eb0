"""Data models for BenchForge."""

from benchforge.models.registry import (
    RECOGNIZED_FORMATS,
    Attachment,
    BenchmarkResults,
    Model,
    ModelDraft,
    RegistryState,
    User,
    format_from_filename,
    normalize_format,
)

__all__ = [
    "RECOGNIZED_FORMATS",
    "Attachment",
    "BenchmarkResults",
    "Model",
    "ModelDraft",
    "RegistryState",
    "User",
    "format_from_filename",
    "normalize_format",
]
