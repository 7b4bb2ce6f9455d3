"""Integration tests for the orchestrator - config, load, validate, write.

Tests cover:
- End-to-end run from a JSON file to a summary file
- Printing the summary to stdout
- Fail-fast exit codes for infrastructure errors

Real-world significance:
- Invalid rows must not change the exit code
- Config and source problems must stop the run before anything is written
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from patient_intake import orchestrator


@pytest.mark.integration
class TestParseArgs:
    """CLI argument parsing."""

    def test_defaults(self) -> None:
        args = orchestrator.parse_args(["patients.json"])

        assert args.source == "patients.json"
        assert args.output_dir == orchestrator.DEFAULT_OUTPUT_DIR
        assert args.config_path == orchestrator.DEFAULT_CONFIG_PATH
        assert args.timezone is None
        assert args.stdout is False

    def test_source_is_optional(self) -> None:
        assert orchestrator.parse_args([]).source is None

    def test_resolve_source_falls_back_to_config(self) -> None:
        args = orchestrator.parse_args([])
        config = {"source": {"url": "https://example.org/patients"}}

        assert orchestrator.resolve_source(args, config) == "https://example.org/patients"

    def test_resolve_source_requires_something(self) -> None:
        with pytest.raises(ValueError, match="No patient source"):
            orchestrator.resolve_source(orchestrator.parse_args([]), {})


@pytest.mark.integration
class TestMain:
    """End-to-end orchestrator runs."""

    def test_writes_summary_file(
        self, input_file: Path, config_file: Path, tmp_test_dir: Path
    ) -> None:
        output_dir = tmp_test_dir / "output"

        exit_code = orchestrator.main(
            [str(input_file), "--output", str(output_dir), "--config", str(config_file)]
        )

        assert exit_code == 0
        written = list(output_dir.glob("patients_*.json"))
        assert len(written) == 1
        patients = json.loads(written[0].read_text(encoding="utf-8"))["patients"]
        assert [p["isComplete"] for p in patients] == [True, False, True]
        assert [p["serviceDayOfWeek"] for p in patients] == ["Monday", "Monday", "Saturday"]
        assert all(p["isOver21"] in (0, 1) for p in patients)
        assert list((output_dir / "logs").glob("intake_*.log"))

    def test_stdout_mode(
        self,
        input_file: Path,
        config_file: Path,
        tmp_test_dir: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        exit_code = orchestrator.main(
            [
                str(input_file),
                "--stdout",
                "--output",
                str(tmp_test_dir / "output"),
                "--config",
                str(config_file),
            ]
        )

        assert exit_code == 0
        envelope = json.loads(capsys.readouterr().out)
        assert len(envelope["patients"]) == 3
        assert not list((tmp_test_dir / "output").glob("patients_*.json"))

    def test_url_source_from_config(
        self, config_file: Path, tmp_test_dir: Path, mixed_batch, capsys
    ) -> None:
        config = yaml.safe_load(config_file.read_text())
        config["source"]["url"] = "https://example.org/patients"
        config_file.write_text(yaml.dump(config))

        with patch(
            "patient_intake.fetch_records.fetch_json_from_endpoint",
            return_value=mixed_batch,
        ) as mock_fetch:
            exit_code = orchestrator.main(
                ["--stdout", "--output", str(tmp_test_dir), "--config", str(config_file)]
            )

        assert exit_code == 0
        mock_fetch.assert_called_once_with("https://example.org/patients", timeout=30)
        assert len(json.loads(capsys.readouterr().out)["patients"]) == 3

    def test_timezone_override_is_used(
        self, input_file: Path, config_file: Path, tmp_test_dir: Path, capsys
    ) -> None:
        exit_code = orchestrator.main(
            [
                str(input_file),
                "--stdout",
                "--timezone",
                "Asia/Tokyo",
                "--output",
                str(tmp_test_dir),
                "--config",
                str(config_file),
            ]
        )

        assert exit_code == 0
        assert "Asia/Tokyo" in capsys.readouterr().err

    def test_missing_config_exits_1(self, input_file: Path, tmp_test_dir: Path) -> None:
        exit_code = orchestrator.main(
            [str(input_file), "--config", str(tmp_test_dir / "missing.yaml")]
        )
        assert exit_code == 1

    def test_invalid_timezone_exits_1(
        self, input_file: Path, config_file: Path, tmp_test_dir: Path
    ) -> None:
        exit_code = orchestrator.main(
            [
                str(input_file),
                "--timezone",
                "Nowhere/Special",
                "--output",
                str(tmp_test_dir),
                "--config",
                str(config_file),
            ]
        )
        assert exit_code == 1

    def test_non_array_payload_exits_1(
        self, config_file: Path, tmp_test_dir: Path
    ) -> None:
        payload = tmp_test_dir / "object.json"
        payload.write_text(json.dumps({"patients": []}), encoding="utf-8")

        exit_code = orchestrator.main(
            [str(payload), "--output", str(tmp_test_dir / "output"), "--config", str(config_file)]
        )

        assert exit_code == 1
        assert not list((tmp_test_dir / "output").glob("patients_*.json"))
