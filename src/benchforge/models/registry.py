"""Registry entities: models, benchmark results and session state."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Lowercase extensions, without the leading dot
RECOGNIZED_FORMATS = frozenset({"onnx", "pt", "pth"})


def normalize_format(value: Optional[str]) -> Optional[str]:
    """Return the canonical format name, or None if it is not recognized."""
    if not value:
        return None
    candidate = value.strip().lstrip(".").lower()
    if candidate in RECOGNIZED_FORMATS:
        return candidate
    return None


def format_from_filename(filename: str) -> Optional[str]:
    """Derive the model format from a file name's extension."""
    if "." not in filename:
        return None
    return normalize_format(filename.rsplit(".", 1)[1])


class _SnapshotModel(BaseModel):
    """Frozen model serialized with camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        ser_json_inf_nan="constants",
    )


class Attachment(BaseModel):
    """Original model file held in memory for the current session only."""

    model_config = ConfigDict(frozen=True)

    filename: str = Field(description="Original file name")
    content: bytes = Field(repr=False, description="Raw file bytes")
    content_type: str = Field(default="application/octet-stream")

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: Path) -> "Attachment":
        """Read a model file from disk."""
        path = Path(path)
        return cls(filename=path.name, content=path.read_bytes())


class BenchmarkResults(_SnapshotModel):
    """Canonical metrics produced by a successful benchmark run."""

    accuracy: float = Field(ge=0, le=100, description="Accuracy percentage (0-100)")
    inference_time: float = Field(ge=0, description="Inference time in milliseconds")
    memory_usage: float = Field(ge=0, description="Memory usage in bytes")
    fps: float = Field(ge=0, description="Frames per second, may be infinite")
    latency: float = Field(ge=0, description="Latency in milliseconds")
    throughput: float = Field(ge=0, description="Throughput in FPS")
    gpu_utilization: Optional[float] = Field(
        default=None, ge=0, le=100, description="GPU utilization percentage, when reported"
    )


class ModelDraft(BaseModel):
    """Fields supplied by the caller when adding a model."""

    name: str
    format: str
    size: int = Field(ge=0)
    attachment: Optional[Attachment] = None

    @classmethod
    def from_attachment(cls, attachment: Attachment) -> "ModelDraft":
        return cls(
            name=attachment.filename,
            format=format_from_filename(attachment.filename) or "unknown",
            size=attachment.size,
            attachment=attachment,
        )


class Model(_SnapshotModel):
    """A registered model artifact."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    format: str
    size: int = Field(ge=0)
    attachment: Optional[Attachment] = Field(default=None, exclude=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    benchmark_results: Optional[BenchmarkResults] = None

    @property
    def has_attachment(self) -> bool:
        """Whether the original file is available in this session."""
        return self.attachment is not None


class User(_SnapshotModel):
    """Authenticated user."""

    id: str
    email: str


class RegistryState(_SnapshotModel):
    """Immutable snapshot of the registry."""

    models: tuple[Model, ...] = ()
    is_authenticated: bool = False
    user: Optional[User] = None
