"""Write-once record of ancillary access grants.

A successful submission may come with an ancillary access grant (for
example, access to a related session).  The grant is opaque to this package;
it is stored exactly as received so that other parts of the host
application can read it later.

The record is intentionally simple:

- all grants live in a single JSON object file
- each grant is stored under ``ancillary_access_{job_id}``
- a key is written at most once and never overwritten

A missing, unreadable or non-object file reads as an empty record.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

KEY_PREFIX = "ancillary_access_"


def access_key(job_id: str) -> str:
    """Return the record key for ``job_id``."""
    return f"{KEY_PREFIX}{job_id}"


class AncillaryAccessStore:
    """JSON-file backed, write-once store of ancillary access grants."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable access record {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            return {}
        return data

    def _save(self, data: dict[str, Any]) -> None:
        payload = json.dumps(data, indent=2)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        tmp_path.replace(self.path)

    def record(self, job_id: str, grant: Any) -> bool:
        """Store ``grant`` for ``job_id`` unless one is already stored.

        Returns:
            True if the grant was written, False if the key already existed

        Raises:
            OSError: If the record file cannot be written
            TypeError: If the grant is not JSON-serialisable
        """
        key = access_key(job_id)
        data = self._load()

        if key in data:
            logger.warning(f"Access grant for job {job_id} already recorded, keeping existing")
            return False

        data[key] = grant
        self._save(data)
        logger.info(f"Recorded ancillary access grant for job {job_id}")
        return True

    def get(self, job_id: str) -> Any:
        """Return the stored grant for ``job_id``, or None."""
        return self._load().get(access_key(job_id))

    def has(self, job_id: str) -> bool:
        return access_key(job_id) in self._load()
