"""Translate hierarchical task progress into display stages.

The backend reports progress as a tree of named stages.  Display code only
needs a flat, ordered list, so :func:`translate` walks the tree depth-first
(parents before their children) and emits one :class:`DisplayStage` per
node, in exactly the order the backend sent them.
"""

from __future__ import annotations

from .models import DisplayStage, ProgressNode, StageStatus, TaskProgress

_STATUS_BY_VALUE = {status.value: status for status in StageStatus}


def normalize_stage_status(value: str | None) -> StageStatus:
    """Map a raw stage status to :class:`StageStatus`.

    Missing or unrecognized values become ``pending``.
    """
    if not value:
        return StageStatus.PENDING
    return _STATUS_BY_VALUE.get(str(value).strip().lower(), StageStatus.PENDING)


def translate(raw: TaskProgress | None) -> tuple[DisplayStage, ...]:
    """Flatten task progress into an ordered sequence of display stages.

    Args:
        raw: Progress payload from the status endpoint, or None

    Returns:
        Tuple of stages in backend order, parents before children.
        Empty when there is no progress.
    """
    if raw is None:
        return ()

    stages: list[DisplayStage] = []
    _flatten(raw.stages, prefix="", depth=0, out=stages)
    return tuple(stages)


def _flatten(
    nodes: list[ProgressNode], prefix: str, depth: int, out: list[DisplayStage]
) -> None:
    for position, node in enumerate(nodes, start=1):
        key = f"{prefix}{position}"
        out.append(
            DisplayStage(
                key=key,
                name=node.name or node.id or f"Step {key}",
                status=normalize_stage_status(node.status),
                depth=depth,
            )
        )
        if node.children:
            _flatten(node.children, prefix=f"{key}.", depth=depth + 1, out=out)
