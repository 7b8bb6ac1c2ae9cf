"""Data models for card creation requests, jobs and progress."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class JobStatus(str, Enum):
    """Backend generation status of a job."""

    QUEUED = "queued"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class StageStatus(str, Enum):
    """Display status of a single progress stage."""

    PENDING = "pending"
    ACTIVE = "active"
    DONE = "done"
    FAILED = "failed"


class ProgressNode(BaseModel):
    """A named stage of the backend's task decomposition.

    ``status`` is kept as a free-form string here; unknown values are
    mapped to ``pending`` when the progress is translated for display.
    Loosely typed payloads are accepted: numeric ids and names become
    strings, non-string statuses are dropped and a missing or ``null``
    child list is empty.
    """

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    name: str | None = None
    status: str | None = None
    children: list[ProgressNode] = Field(default_factory=list)

    @field_validator("id", "name", mode="before")
    @classmethod
    def coerce_label(cls, v: object) -> str | None:
        if isinstance(v, str):
            return v
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return None

    @field_validator("status", mode="before")
    @classmethod
    def coerce_status(cls, v: object) -> str | None:
        return v if isinstance(v, str) else None

    @field_validator("children", mode="before")
    @classmethod
    def coerce_children(cls, v: object) -> list:
        return _node_list(v)


def _node_list(v: object) -> list:
    # Entries that are not objects carry no stage information
    if not isinstance(v, list):
        return []
    return [item for item in v if isinstance(item, (dict, ProgressNode))]


class TaskProgress(BaseModel):
    """Hierarchical task progress as reported by the status endpoint."""

    model_config = ConfigDict(extra="ignore")

    stages: list[ProgressNode] = Field(default_factory=list)

    @field_validator("stages", mode="before")
    @classmethod
    def coerce_stages(cls, v: object) -> list:
        return _node_list(v)


@dataclass(frozen=True)
class DisplayStage:
    """One flattened, display-ready progress stage.

    Attributes:
        key: Dotted 1-based position in the stage tree (e.g. ``"2.1"``)
        name: Stage label
        status: Normalized stage status
        depth: Nesting level, 0 for top-level stages
    """

    key: str
    name: str
    status: StageStatus
    depth: int = 0


@dataclass(frozen=True)
class CreationRequest:
    """User input for a new card.

    Attributes
    ----------
    theme_text : str
        Free-text theme of the card message (3-500 characters after trimming)
    target_resource_id : str
        Opaque id of the knowledge resource the card is generated from
    visibility : Visibility
        Whether the finished card is publicly listed
    quoted_price_usd : Decimal | None
        Price shown to the user, if known. ``None`` or a non-positive value
        means the price is looked up from the resource metadata.
    """

    theme_text: str
    target_resource_id: str
    visibility: Visibility = Visibility.PUBLIC
    quoted_price_usd: Decimal | None = None

    @property
    def is_public(self) -> bool:
        return self.visibility is Visibility.PUBLIC


@dataclass(frozen=True)
class PaymentAuthorization:
    """Signed, single-use payment artifact.

    ``amount`` is the exact decimal string (two fractional digits) the
    signature commits to.
    """

    header: str
    amount: str
    payer: str | None = None

    def __repr__(self) -> str:
        # Keep the signature itself out of logs.
        return f"PaymentAuthorization(amount={self.amount!r}, payer={self.payer!r})"


@dataclass(frozen=True)
class JobResult:
    preview_text: str | None = None
    word_count: int | None = None
    banner_url: str | None = None


@dataclass(frozen=True)
class JobSnapshot:
    """Point-in-time view of a job as reported by the backend."""

    status: JobStatus
    progress: TaskProgress | None = None
    result: JobResult | None = None

    def __post_init__(self) -> None:
        if self.result is not None and self.status is not JobStatus.COMPLETED:
            raise ValueError(f"Job result is only valid for completed jobs, got {self.status.value}")


@dataclass(frozen=True)
class JobHandle:
    """Handle for a submitted job.

    Attributes
    ----------
    id : str
        Backend job id, immutable once assigned
    status : JobStatus
        Status reported by the submission response
    snapshot : JobSnapshot
        Full snapshot from the submission response (may already carry a
        result on the synchronous fast path, or initial progress)
    ancillary_access : Any
        Optional secondary access grant returned with the submission.
        Passed through untouched.
    """

    id: str
    status: JobStatus
    snapshot: JobSnapshot | None = None
    ancillary_access: Any = None

    def __post_init__(self) -> None:
        if self.snapshot is None:
            object.__setattr__(self, "snapshot", JobSnapshot(status=self.status))


@dataclass(frozen=True)
class AssetResult:
    asset_url: str
    cached: bool = False
    enhanced: bool | None = None


@dataclass
class TrackerUpdate:
    """Notification delivered to tracker listeners.

    Attributes:
        job_id: Job the update belongs to
        state: Tracker state after the change (a ``TrackerState``)
        status: Latest backend status, if any
        stages: Translated progress stages (empty when none is known)
        result: Final result, only for completed jobs
        error: ``TerminalFailure`` for failed jobs
    """

    job_id: str
    state: Any
    status: JobStatus | None = None
    stages: tuple[DisplayStage, ...] = field(default_factory=tuple)
    result: JobResult | None = None
    error: Exception | None = None


# Theme text limits (trimmed length)
MIN_THEME_LENGTH = 3
MAX_THEME_LENGTH = 500
