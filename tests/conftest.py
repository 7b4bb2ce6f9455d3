"""Shared pytest fixtures for unit and integration tests.

This module provides:
- Temporary directory fixtures for file I/O testing
- Configuration fixtures for parameter testing
- Runtime settings and a fixed "now" for deterministic age derivation
"""

from __future__ import annotations

import json
import tempfile
from datetime import date
from pathlib import Path
from typing import Any, Dict, Generator, List

import pytest
import yaml

from patient_intake.data_models import RuntimeSettings
from tests.fixtures import sample_input


@pytest.fixture
def tmp_test_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that's cleaned up after each test.

    Yields
    ------
    Path
        Absolute path to temporary directory (automatically deleted after test)
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def default_config() -> Dict[str, Any]:
    """Provide a minimal pipeline configuration for testing.

    Real-world significance:
    - Matches the schema of config/parameters.yaml
    - Timezone matches the production deployment
    """
    return {
        "runtime": {
            "timezone": "America/Detroit",
            "locale": "en",
        },
        "source": {
            "url": None,
            "timeout_seconds": 30,
        },
        "output": {
            "indent": 2,
        },
    }


@pytest.fixture
def config_file(tmp_test_dir: Path, default_config: Dict[str, Any]) -> Path:
    """Create a temporary config file with default configuration.

    Returns
    -------
    Path
        Path to created YAML config file
    """
    config_path = tmp_test_dir / "parameters.yaml"
    with open(config_path, "w") as f:
        yaml.dump(default_config, f)
    return config_path


@pytest.fixture
def settings() -> RuntimeSettings:
    """Runtime settings pinned to the production timezone and English weekdays."""
    return RuntimeSettings(timezone="America/Detroit", locale="en")


@pytest.fixture
def fixed_today() -> date:
    """Fixed "now" so age assertions do not depend on the test date."""
    return date(2024, 6, 15)


@pytest.fixture
def mixed_batch() -> List[Dict[str, Any]]:
    """Raw batch with valid and invalid rows (indices 1 and 3 invalid)."""
    return sample_input.create_mixed_batch()


@pytest.fixture
def input_file(tmp_test_dir: Path, mixed_batch: List[Dict[str, Any]]) -> Path:
    """Write the mixed batch to a JSON input file."""
    path = tmp_test_dir / "patients.json"
    path.write_text(json.dumps(mixed_batch), encoding="utf-8")
    return path
