"""Tests for the `nemoprefs` command line."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from nemoprefs.cli import cli as cli_module

KEY = "nemo.providers"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("NEMO_DEV_MODE", "MOCK_PROVIDER_TYPE", "NEMO_PRODUCT", "NEMO_LOG_DIR", "OPENAI_API_KEY"):
        monkeypatch.delenv(name, raising=False)


def _run_cli(tmp_path, args: list[str], env=None):
    runner = CliRunner()
    base = [
        "--preferences-file",
        str(tmp_path / "Preferences"),
        "--storage-file",
        str(tmp_path / "storage.json"),
    ]
    return runner.invoke(cli_module.cli, base + args, env={"HOME": str(tmp_path), **(env or {})})


def _write_storage(tmp_path, config) -> None:
    (tmp_path / "storage.json").write_text(json.dumps({KEY: json.dumps(config)}), encoding="utf-8")


def test_default_json_with_empty_store(tmp_path):
    result = _run_cli(tmp_path, ["default", "--json"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["id"] == "nemo"
    assert payload["isBuiltIn"] is True
    assert "apiKey" not in payload


def test_default_masks_api_key(tmp_path, provider_payload):
    _write_storage(tmp_path, {"defaultProviderId": "a", "providers": [provider_payload("a")]})
    masked = json.loads(_run_cli(tmp_path, ["default", "--json"]).stdout)
    assert masked["apiKey"] == "***"
    shown = json.loads(_run_cli(tmp_path, ["default", "--json", "--show-secrets"]).stdout)
    assert shown["apiKey"] == "sk-test"


def test_default_human_output(tmp_path):
    result = _run_cli(tmp_path, ["default"])
    assert result.exit_code == 0
    assert "Default Provider" in result.stdout
    assert "Built-in: True" in result.stdout


def test_dev_flag_uses_mock_catalog(tmp_path):
    result = _run_cli(tmp_path, ["--dev", "default", "--json"], env={"MOCK_PROVIDER_TYPE": "ollama"})
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["type"] == "ollama"
    assert payload["modelId"] == "qwen3:4b"


def test_mock_type_ignored_without_dev_flag(tmp_path):
    result = _run_cli(tmp_path, ["default", "--json"], env={"MOCK_PROVIDER_TYPE": "ollama"})
    assert json.loads(result.stdout)["type"] == "builtin"


def test_providers_json_normalizes_defaults(tmp_path, provider_payload):
    _write_storage(
        tmp_path,
        {
            "defaultProviderId": "b",
            "providers": [provider_payload("a", isDefault=True), provider_payload("b")],
        },
    )
    result = _run_cli(tmp_path, ["providers", "--json"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["defaultProviderId"] == "b"
    flags = {p["id"]: p["isDefault"] for p in payload["providers"]}
    assert flags == {"nemo": False, "a": False, "b": True}
    assert all(p.get("apiKey") in (None, "***") for p in payload["providers"])


def test_providers_table(tmp_path):
    result = _run_cli(tmp_path, ["providers"])
    assert result.exit_code == 0
    assert "Providers" in result.stdout
    assert "nemo" in result.stdout


def test_preferences_file_wins_over_storage(tmp_path, provider_payload):
    prefs = {"defaultProviderId": "p", "providers": [provider_payload("p")]}
    (tmp_path / "Preferences").write_text(
        json.dumps({"nemo": {"providers": json.dumps(prefs)}}), encoding="utf-8"
    )
    _write_storage(tmp_path, {"defaultProviderId": "s", "providers": [provider_payload("s")]})
    payload = json.loads(_run_cli(tmp_path, ["default", "--json"]).stdout)
    assert payload["id"] == "p"


def test_validate_accepts_good_file(tmp_path, provider_payload):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({"defaultProviderId": "a", "providers": [provider_payload("a")]}), encoding="utf-8"
    )
    result = _run_cli(tmp_path, ["validate", str(path)])
    assert result.exit_code == 0
    assert "Valid" in result.stdout


def test_validate_warns_on_dangling_default(tmp_path, provider_payload):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({"defaultProviderId": "zzz", "providers": [provider_payload("a")]}), encoding="utf-8"
    )
    result = _run_cli(tmp_path, ["validate", str(path)])
    assert result.exit_code == 0
    assert "does not match any provider" in result.stdout


def test_validate_rejects_bad_file(tmp_path, provider_payload):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "defaultProviderId": "a",
                "providers": [provider_payload("a", modelConfig={"temperature": "3"})],
            }
        ),
        encoding="utf-8",
    )
    result = _run_cli(tmp_path, ["validate", str(path)])
    assert result.exit_code == 1
    assert "temperature" in result.output


def test_validate_rejects_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{nope", encoding="utf-8")
    result = _run_cli(tmp_path, ["validate", str(path)])
    assert result.exit_code == 1
    assert "valid JSON" in result.output


def test_mock_catalog_lists_entries(tmp_path):
    result = _run_cli(tmp_path, ["mock-catalog"])
    assert result.exit_code == 0
    assert "openrouter" in result.stdout


def test_version_command(tmp_path):
    result = _run_cli(tmp_path, ["version"])
    assert result.exit_code == 0
    assert "Nemoprefs version" in result.stdout


def test_validate_rejects_non_utf8_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_bytes(b'{"defaultProviderId": "\xff\xfe"}')
    result = _run_cli(tmp_path, ["validate", str(path)])
    assert result.exit_code == 1
    assert "not UTF-8 text" in result.output
    assert not isinstance(result.exception, UnicodeDecodeError)


def test_validate_distinguishes_json_that_is_not_an_object(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("null", encoding="utf-8")
    result = _run_cli(tmp_path, ["validate", str(path)])
    assert result.exit_code == 1
    assert "expected an object" in result.output
    assert "does not contain valid JSON" not in result.output
