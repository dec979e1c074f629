import json
from pathlib import Path

import pytest

from cardano_hw import cli
from cardano_hw import config as config_module


@pytest.fixture(autouse=True)
def reset_config_override(monkeypatch):
    monkeypatch.setattr(config_module, "_CONFIG_PATH_OVERRIDE", None)
    yield


def _write_output(tmp_path: Path, payload: dict) -> Path:
    path = tmp_path / "output.json"
    path.write_text(json.dumps(payload))
    return path


def test_transform_prints_device_records(tmp_path: Path, capsys) -> None:
    path = _write_output(
        tmp_path,
        {"amount": 1000000, "address": "addr1xyz", "referenceScript": "00112233"},
    )

    cli.main(["transform", str(path)])

    printed = json.loads(capsys.readouterr().out)
    assert printed == {
        "output": {
            "amount": 1000000,
            "asset_groups_count": 0,
            "reference_script_size": 4,
            "address": "addr1xyz",
        },
        "reference_script": "00112233",
    }


def test_send_dry_run_prints_message_plan(tmp_path: Path, capsys) -> None:
    path = _write_output(
        tmp_path,
        {
            "amount": 5,
            "address": "addr1xyz",
            "tokenBundle": [{"policyId": "p1", "tokens": [{"asset_name_bytes": "01", "amount": 1}]}],
        },
    )

    cli.main(["send", str(path), "--dry-run"])

    plan = json.loads(capsys.readouterr().out)
    assert [entry["type"] for entry in plan] == [
        "CardanoTxOutput",
        "CardanoAssetGroup",
        "CardanoToken",
    ]
    assert all(entry["expect"] == "CardanoTxItemAck" for entry in plan)


def test_send_uses_bridge_transport(tmp_path: Path, monkeypatch) -> None:
    path = _write_output(tmp_path, {"amount": 5, "address": "addr1xyz"})
    sent = []

    class StubTransport:
        def __init__(self, config) -> None:
            self.config = config

        def __call__(self, message_type, expected_type, payload):
            sent.append((self.config.session, message_type))
            return {}

    monkeypatch.setattr(cli, "BridgeTransport", StubTransport)
    config_path = tmp_path / "config.yaml"
    config_path.write_text("bridge:\n  session: from-file\n")

    cli.main(["--config", str(config_path), "send", str(path), "--session", "cli-session"])

    assert sent == [("cli-session", "CardanoTxOutput")]


def test_validation_errors_exit_with_status_one(tmp_path: Path, capsys) -> None:
    path = _write_output(tmp_path, {"address": "addr1xyz"})

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["transform", str(path)])

    assert excinfo.value.code == 1
    assert 'Parameter "amount" is missing.' in capsys.readouterr().err


def test_invalid_json_is_reported(tmp_path: Path, capsys) -> None:
    path = tmp_path / "output.json"
    path.write_text("{not json")

    with pytest.raises(SystemExit):
        cli.main(["transform", str(path)])

    assert "Invalid output JSON" in capsys.readouterr().err
