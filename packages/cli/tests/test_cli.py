"""CLI command tests using Typer's CliRunner."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pricewright_cli.main import app
from typer.testing import CliRunner

runner = CliRunner()

_SPEC_YAML = """\
name: Booking API
intent: Backend for a booking app
scale: small
services:
  - computeserverless
  - id: relational_database
    engine: postgres
  - objectstorage
  - payment_gateway
"""

_STATIC_YAML = """\
name: Landing Page
pattern: static-web-hosting
services: [objectstorage, cdn, dns]
"""

_USAGE_YAML = """\
usage:
  expected:
    storage_gb: 2
    data_transfer_gb: 10
"""


@pytest.fixture(autouse=True)
def work_dir(tmp_path: Path, monkeypatch) -> Path:
    runs = tmp_path / "runs"
    monkeypatch.setenv("PRICEWRIGHT_WORK_DIR", str(runs))
    return runs


@pytest.fixture
def spec_file(tmp_path: Path) -> Path:
    p = tmp_path / "spec.yaml"
    p.write_text(_SPEC_YAML)
    return p


@pytest.fixture
def static_file(tmp_path: Path) -> Path:
    p = tmp_path / "static.yaml"
    p.write_text(_STATIC_YAML)
    return p


class TestAppHelp:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "estimate" in result.output

    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "estimate" in result.output
        assert "classify" in result.output
        assert "catalog" in result.output


class TestVersionFlag:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        parts = result.output.strip().split()
        assert parts[0] == "pricewright"
        assert "." in parts[1]


class TestEstimateCommand:
    def test_estimate_without_oracle(self, spec_file: Path):
        result = runner.invoke(app, ["estimate", str(spec_file), "--no-oracle"])
        assert result.exit_code == 0, result.output
        assert "Recommended" in result.output
        assert "Warning:" in result.output

    def test_estimate_json(self, spec_file: Path):
        result = runner.invoke(app, ["--json", "estimate", str(spec_file), "--no-oracle"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert set(data["scenarios"]) == {"low", "expected", "high"}
        assert "paymentgateway" not in data["deployable_services"]
        assert data["recommended"]["provider"] in ("aws", "gcp", "azure")
        assert data["scale_tier"] == "SMALL"

    def test_estimate_provider_filter(self, spec_file: Path):
        result = runner.invoke(app, ["--json", "estimate", str(spec_file), "--no-oracle", "--provider", "azure"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert list(data["scenarios"]["expected"]) == ["azure"]

    def test_static_site_with_usage(self, static_file: Path, tmp_path: Path):
        usage = tmp_path / "usage.yaml"
        usage.write_text(_USAGE_YAML)
        result = runner.invoke(app, ["--json", "estimate", str(static_file), "--usage", str(usage), "--no-oracle"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["pricing_mode"] == "STATIC_BYPASS"
        assert data["scenarios"]["expected"]["aws"]["total_monthly_cost"] == 2.0

    def test_estimate_nonexistent_file(self, tmp_path: Path):
        result = runner.invoke(app, ["estimate", str(tmp_path / "nope.yaml")])
        assert result.exit_code != 0

    def test_invalid_spec(self, tmp_path: Path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("services:\n  - id: web\n    state: maybe\n")
        result = runner.invoke(app, ["--json", "estimate", str(bad), "--no-oracle"])
        assert result.exit_code == 1
        assert "Invalid input" in json.loads(result.output)["error"]


class TestClassifyCommand:
    def test_classify(self, spec_file: Path):
        result = runner.invoke(app, ["classify", str(spec_file)])
        assert result.exit_code == 0, result.output
        assert "INFRASTRUCTURE" in result.output
        assert "paymentgateway" in result.output

    def test_classify_json(self, static_file: Path):
        result = runner.invoke(app, ["--json", "classify", str(static_file)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["mode"] == "STATIC_BYPASS"
        assert data["deployable"] == ["objectstorage", "cdn", "dns"]


class TestCatalogCommand:
    def test_list_by_category(self):
        result = runner.invoke(app, ["--json", "catalog", "list", "--category", "database"])
        assert result.exit_code == 0, result.output
        services = json.loads(result.output)["services"]
        assert "relationaldatabase" in {s["service_id"] for s in services}
        assert {s["category"] for s in services} == {"database"}

    def test_list_table(self):
        result = runner.invoke(app, ["catalog", "list"])
        assert result.exit_code == 0, result.output
        assert "Service Catalog" in result.output

    def test_list_json(self):
        result = runner.invoke(app, ["--json", "catalog", "list"])
        assert result.exit_code == 0, result.output
        ids = {s["service_id"] for s in json.loads(result.output)["services"]}
        assert {"computevm", "objectstorage", "paymentgateway"} <= ids

    def test_show_alias(self):
        result = runner.invoke(app, ["catalog", "show", "rdbms"])
        assert result.exit_code == 0, result.output
        assert "relationaldatabase" in result.output

    def test_show_unknown(self):
        result = runner.invoke(app, ["catalog", "show", "quantumledger"])
        assert result.exit_code == 1
