import json

import pytest
import yaml

from metamodel.cli import CLIError, OutputFormat, format_output, main
from metamodel.identity import verify_inclusion_proof
from metamodel.token_model import build_token_model


@pytest.fixture(autouse=True)
def _workdir(tmp_path, monkeypatch):
    # keep any metamodel.yaml in the checkout out of reach of load_defaults
    monkeypatch.chdir(tmp_path)


def _run_json(capsys, argv):
    code = main(argv)
    out = capsys.readouterr().out
    return code, json.loads(out)


class TestIdentify:
    def test_builtin_token_model(self, capsys):
        code, data = _run_json(capsys, ["identify"])
        model = build_token_model()
        assert code == 0
        assert data == {
            "name": "token",
            "hash": model.identity_hash().hex(),
            "identifier": model.identifier(),
        }

    def test_model_file(self, capsys, scenario_yaml, scenario_model):
        code, data = _run_json(capsys, ["identify", "--model", str(scenario_yaml)])
        assert code == 0
        assert data["identifier"] == scenario_model.identifier()

    def test_text_format(self, capsys):
        assert main(["--format", "text", "identify"]) == 0
        out = capsys.readouterr().out
        assert f"identifier: {build_token_model().identifier()}" in out

    def test_model_path_from_config(self, capsys, tmp_path, scenario_yaml, scenario_model):
        cfg = tmp_path / "cli.yaml"
        cfg.write_text(
            f"output:\n  format: yaml\n  model_path: {scenario_yaml}\n", encoding="utf-8"
        )
        assert main(["--config", str(cfg), "identify"]) == 0
        data = yaml.safe_load(capsys.readouterr().out)
        assert data["identifier"] == scenario_model.identifier()

    def test_missing_model_is_invalid_input(self, capsys, tmp_path):
        assert main(["identify", "--model", str(tmp_path / "nope.yaml")]) == 2
        assert "Error:" in capsys.readouterr().err

    def test_quiet_suppresses_message(self, capsys, tmp_path):
        assert main(["--quiet", "identify", "--model", str(tmp_path / "nope.yaml")]) == 2
        assert "Error:" not in capsys.readouterr().err


class TestVerify:
    def test_match(self, capsys):
        ident = build_token_model().identifier()
        code, data = _run_json(capsys, ["verify", ident])
        assert code == 0
        assert data == {"match": True, "identifier": ident}

    def test_mismatch(self, capsys, scenario_model):
        assert main(["verify", scenario_model.identifier()]) == 1
        assert "identifier mismatch" in capsys.readouterr().err

    def test_malformed_counts_as_mismatch(self, capsys):
        assert main(["verify", "bogus"]) == 1


class TestDecode:
    def test_fields(self, capsys):
        model = build_token_model()
        code, data = _run_json(capsys, ["decode", model.identifier()])
        assert code == 0
        assert data == {
            "version": 1,
            "codec": "0x55",
            "hash_code": "0x12",
            "length": 32,
            "digest": model.identity_hash().hex(),
        }

    def test_malformed_is_invalid_input(self, capsys):
        assert main(["decode", "zzz"]) == 2


class TestProve:
    def test_by_leaf(self, capsys):
        code, proof = _run_json(capsys, ["prove", "--leaf", "$paused-|>mint"])
        assert code == 0
        assert proof["leaf"] == "$paused-|>mint"
        assert proof["root"] == build_token_model().identity_hash().hex()
        assert verify_inclusion_proof(proof)

    def test_by_index(self, capsys):
        code, proof = _run_json(capsys, ["prove", "0"])
        assert code == 0
        assert proof["leaf"] == "$allow"

    def test_out_of_range(self, capsys):
        assert main(["prove", "999"]) == 2

    def test_unknown_leaf(self, capsys):
        assert main(["prove", "--leaf", "nowhere-->nothing"]) == 2

    def test_requires_target(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["prove"])
        assert excinfo.value.code == 2


class TestInspect:
    def test_snapshot(self, capsys):
        code, data = _run_json(capsys, ["inspect"])
        assert code == 0
        assert len(data["places"]) == 8
        assert data["identity"]["identifier"] == build_token_model().identifier()

    def test_canonical_bytes(self, capsys):
        assert main(["inspect", "--canonical"]) == 0
        out = capsys.readouterr().out.rstrip("\n")
        assert json.loads(out) == build_token_model().to_dict()
        assert out == json.dumps(json.loads(out), sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage:" in capsys.readouterr().out


def test_log_level_flag_emits_debug_lines(capsys):
    assert main(["--log-level", "debug", "identify"]) == 0
    err = capsys.readouterr().err
    events = [json.loads(line) for line in err.splitlines() if line.startswith("{")]
    assert any(e.get("operation") == "identity_hash" for e in events)


def test_format_output_and_cli_error():
    assert format_output({"a": 1}, OutputFormat.TEXT) == "a: 1"
    assert yaml.safe_load(format_output({"a": 1}, OutputFormat.YAML)) == {"a": 1}
    assert CLIError("x").exit_code == 1
