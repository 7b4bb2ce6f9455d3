"""Load raw patient records from an HTTP endpoint or a local JSON file.

The payload must be a JSON array; each element is one raw patient record.
There is no retry or backoff: a failed request is an infrastructure error and
propagates to the orchestrator.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List

import requests

from .config_loader import DEFAULT_TIMEOUT_SECONDS
from .enums import SourceKind

LOG = logging.getLogger(__name__)


def fetch_json_from_endpoint(
    url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS
) -> Any:
    """GET ``url`` and decode the JSON body.

    Raises
    ------
    requests.exceptions.RequestException
        If the request fails or the server returns an HTTP error status.
    ValueError
        If the body is not valid JSON.
    """
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    LOG.info("Fetched %d bytes from %s", len(response.content), url)
    return response.json()


def read_json_file(file_path: Path) -> Any:
    """Read and decode a local JSON file.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file is not valid JSON.
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Input file not found: {file_path}")
    with file_path.open("r", encoding="utf-8-sig") as f:
        payload = json.load(f)
    LOG.info("Loaded %s", file_path)
    return payload


def ensure_record_list(payload: Any) -> List[Any]:
    """Check that the decoded payload is a JSON array of records."""
    if not isinstance(payload, list):
        raise ValueError(
            f"Expected a JSON array of patient records, got {type(payload).__name__}"
        )
    return payload


def load_records(
    source: str, timeout: float = DEFAULT_TIMEOUT_SECONDS
) -> List[Any]:
    """Load raw records from a URL or file path.

    Parameters
    ----------
    source : str
        ``http(s)://`` URL or path to a JSON file.
    timeout : float
        HTTP timeout in seconds (ignored for files).

    Returns
    -------
    List[Any]
        Decoded records, unvalidated.
    """
    kind = SourceKind.detect(source)
    if kind == SourceKind.URL:
        payload = fetch_json_from_endpoint(source, timeout=timeout)
    else:
        payload = read_json_file(Path(source))

    records = ensure_record_list(payload)
    LOG.info("Loaded %d raw records from %s source", len(records), kind.value)
    return records
