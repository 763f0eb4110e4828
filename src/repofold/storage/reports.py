"""
Operator-facing dump of the last local scan.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from ..logger import get_logger
from ..scanning import LocalRepoRecord

log = get_logger(__name__)


def write_local_scan(records: Sequence[LocalRepoRecord], path: Path) -> bool:
    """Write ``records`` as a JSON array. Failures are warnings, never errors."""
    payload = [record.to_dict() for record in records]
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    except OSError as exc:
        log.warning("local_scan_save_failed", path=str(path), error=str(exc))
        return False
    log.info("local_scan_saved", path=str(path), count=len(payload))
    return True
