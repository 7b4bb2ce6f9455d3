"""Serialize a batch summary to the ``{"patients": [...]}`` JSON envelope."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .data_models import BatchSummary

LOG = logging.getLogger(__name__)


def build_envelope(summary: BatchSummary) -> Dict[str, Any]:
    return summary.to_dict()


def dumps_summary(summary: BatchSummary, indent: Optional[int] = None) -> str:
    return json.dumps(build_envelope(summary), indent=indent)


def write_summary(
    summary: BatchSummary, output_path: Path, indent: Optional[int] = 2
) -> Path:
    """Write the summary envelope to ``output_path``.

    Parent directories are created as needed. Returns the written path.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(dumps_summary(summary, indent=indent), encoding="utf-8")
    LOG.info(
        "Wrote summary for %d patients to %s", summary.total_patients, output_path
    )
    return output_path
