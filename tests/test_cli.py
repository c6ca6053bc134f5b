"""Tests for the architecture-evaluator CLI."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner
from fakes import FakeProvider

from architecture_evaluator.cli import main
from architecture_evaluator.decomposer import ArchitectureDecomposer
from architecture_evaluator.explainer import NarrativeExplainer
from architecture_evaluator.providers import ProviderChain
from architecture_evaluator.service import AnalysisService


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def record_file(tmp_path: Path, single_vm_payload) -> Path:
    path = tmp_path / "record.json"
    path.write_text(json.dumps(single_vm_payload), encoding="utf-8")
    return path


class TestHelp:
    """Every command is registered."""

    @pytest.mark.parametrize("command", ["evaluate", "simulate", "validate", "init-config", "serve"])
    def test_help(self, runner, command):
        result = runner.invoke(main, [command, "--help"])
        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output


class TestEvaluateCommand:
    """evaluate with records and descriptions."""

    def test_json_output(self, runner, record_file):
        result = runner.invoke(main, ["evaluate", "-r", str(record_file), "-j"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["scores"]["overall"] == 44
        assert data["maturity_level"] == "Early Stage"

    def test_formatted_output(self, runner, record_file):
        result = runner.invoke(main, ["evaluate", "-r", str(record_file), "-v"])
        assert result.exit_code == 0, result.output
        assert "44/100" in result.output
        assert "Single Point of Failure" in result.output
        assert "Auto Scaling detected (+25)" in result.output
        assert "Scalability Foundation" in result.output

    def test_simulation_options(self, runner, record_file):
        result = runner.invoke(main, [
            "evaluate", "-r", str(record_file), "-j",
            "--traffic-multiplier", "2.5", "--add-regions", "1",
        ])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["architecture_summary"]["estimated_users"] == 1250
        assert data["simulation"]["add_regions"] == 1

    def test_out_file(self, runner, record_file, tmp_path):
        out = tmp_path / "result.json"
        result = runner.invoke(main, ["evaluate", "-r", str(record_file), "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text(encoding="utf-8"))["scores"]["overall"] == 44

    def test_invalid_simulation(self, runner, record_file):
        result = runner.invoke(main, ["evaluate", "-r", str(record_file), "--traffic-multiplier", "0"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_no_input(self, runner):
        result = runner.invoke(main, ["evaluate"])
        assert result.exit_code == 1
        assert "Either description or architecture_summary is required" in result.output

    def test_invalid_json_file(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        Path("bad.json").write_text("{oops", encoding="utf-8")
        result = runner.invoke(main, ["evaluate", "-r", "bad.json"])
        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_non_utf8_file(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        Path("latin1.json").write_bytes(b'{"waf": "caf\xe9"}')
        Path("latin1.txt").write_bytes(b"caf\xe9 on EC2")

        for args in (["evaluate", "-r", "latin1.json"], ["evaluate", "--description-file", "latin1.txt"],
                     ["simulate", "-r", "latin1.json", "--add-regions", "1"]):
            result = runner.invoke(main, args)
            assert result.exit_code == 1
            assert "not valid UTF-8" in result.output
            assert not isinstance(result.exception, UnicodeDecodeError)

    def test_description(self, runner, single_vm_payload):
        chain = ProviderChain([FakeProvider("model", reply=json.dumps(single_vm_payload))])
        service = AnalysisService(
            decomposer=ArchitectureDecomposer(chain),
            explainer=NarrativeExplainer(chain),
        )
        with patch("architecture_evaluator.cli.build_service", return_value=service):
            result = runner.invoke(main, ["evaluate", "-d", "single EC2 box", "-j", "--no-explain"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["ai_provider"] == "model"
        assert data["ai_explanation"] == ""

    def test_description_file(self, runner, tmp_path, single_vm_payload):
        description = tmp_path / "arch.txt"
        description.write_text("single EC2 box", encoding="utf-8")
        provider = FakeProvider("model", reply=json.dumps(single_vm_payload))
        service = AnalysisService(decomposer=ArchitectureDecomposer(ProviderChain([provider])))
        with patch("architecture_evaluator.cli.build_service", return_value=service):
            result = runner.invoke(main, ["evaluate", "--description-file", str(description), "-j"])
        assert result.exit_code == 0, result.output
        assert provider.calls[0][1] == "single EC2 box"


class TestSimulateCommand:
    """Baseline versus what-if comparison."""

    def test_json_deltas(self, runner, record_file):
        result = runner.invoke(main, ["simulate", "-r", str(record_file), "--add-regions", "1", "-j"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["deltas"]["scalability"] == 5
        assert data["deltas"]["reliability"] == 10
        assert data["deltas"]["current cost"] == 1020 - 425
        assert data["baseline"]["architecture_summary"]["multi_region"] is False
        assert data["simulated"]["architecture_summary"]["multi_region"] is True

    def test_table(self, runner, record_file):
        result = runner.invoke(main, ["simulate", "-r", str(record_file), "--traffic-multiplier", "3"])
        assert result.exit_code == 0, result.output
        assert "What-if Simulation" in result.output
        assert "estimated_users" in result.output

    def test_requires_parameters(self, runner, record_file):
        result = runner.invoke(main, ["simulate", "-r", str(record_file)])
        assert result.exit_code == 1
        assert "Specify at least one" in result.output


class TestValidateCommand:
    """Record validation report."""

    def test_clean_record(self, runner, record_file):
        result = runner.invoke(main, ["validate", "-r", str(record_file), "--strict"])
        assert result.exit_code == 0
        assert "Record valid" in result.output

    def test_coerced_fields(self, runner, tmp_path):
        path = tmp_path / "odd.json"
        path.write_text(json.dumps({"database_type": "cassandra", "kafka": True}), encoding="utf-8")

        result = runner.invoke(main, ["validate", "-r", str(path)])
        assert result.exit_code == 0
        assert "database_type" in result.output
        assert "cassandra" in result.output
        assert "kafka" in result.output

        strict = runner.invoke(main, ["validate", "-r", str(path), "--strict"])
        assert strict.exit_code == 1

    def test_not_an_object(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        Path("list.json").write_text("[]", encoding="utf-8")
        result = runner.invoke(main, ["validate", "-r", "list.json"])
        assert result.exit_code == 1
        assert "Record invalid" in result.output

    def test_non_utf8_record(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        Path("latin1.json").write_bytes(b'{"waf": "caf\xe9"}')
        result = runner.invoke(main, ["validate", "-r", "latin1.json"])
        assert result.exit_code == 1
        assert "not valid UTF-8" in result.output

    def test_oversized_count_reported(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        Path("big.json").write_text('{"estimated_users": 1' + "0" * 400 + "}", encoding="utf-8")
        result = runner.invoke(main, ["validate", "-r", "big.json", "--strict"])
        assert result.exit_code == 1
        assert "estimated_users" in result.output


class TestInitConfigCommand:
    """Default configuration file generation."""

    def test_writes_config(self, runner, tmp_path):
        out = tmp_path / "evaluator-config.yaml"
        result = runner.invoke(main, ["init-config", "-o", str(out)])
        assert result.exit_code == 0
        data = yaml.safe_load(out.read_text(encoding="utf-8"))
        assert data["category_weights"]["scalability"] == 0.30
        assert data["bedrock"]["model_id"] == "anthropic.claude-3-sonnet-20240229-v1:0"

    def test_refuses_overwrite(self, runner, tmp_path):
        out = tmp_path / "evaluator-config.yaml"
        out.write_text("existing", encoding="utf-8")
        result = runner.invoke(main, ["init-config", "-o", str(out)])
        assert result.exit_code == 1
        assert out.read_text(encoding="utf-8") == "existing"

        forced = runner.invoke(main, ["init-config", "-o", str(out), "--force"])
        assert forced.exit_code == 0


class TestServeCommand:
    def test_uses_config(self, runner, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text(yaml.safe_dump({"server": {"host": "0.0.0.0", "port": 9001}}), encoding="utf-8")
        with patch("architecture_evaluator.server.run_server") as run_server:
            result = runner.invoke(main, ["serve", "--config", str(config)])
        assert result.exit_code == 0, result.output
        kwargs = run_server.call_args.kwargs
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9001
