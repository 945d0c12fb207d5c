"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from assetpipe.config import load_config


def _write_yaml(path: Path, payload: dict) -> None:
    path.write_text(yaml.safe_dump(payload), encoding="utf-8")


def test_load_config_merges_default_and_local(tmp_path, monkeypatch):
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_payload = {
        "version": 1,
        "logging": {"level": "info"},
        "pipeline": {
            "capabilities": ["scss", "css"],
            "on_compression_failure": "abort",
            "max_workers": 2,
        },
        "outputs": {"base_path": "dist"},
    }
    local_payload = {
        "logging": {"level": "warn"},
        "pipeline": {
            "capabilities": [" SCSS ", "sass", "css"],
            "on_compression_failure": "Fallback",
        },
    }

    _write_yaml(config_dir / "default.yaml", default_payload)
    _write_yaml(config_dir / "local.yaml", local_payload)

    monkeypatch.chdir(tmp_path)

    config = load_config()

    assert config.logging.level == "warn"
    assert config.pipeline.capabilities == ["scss", "sass", "css"]
    assert config.pipeline.on_compression_failure == "fallback"
    assert config.pipeline.max_workers == 2
    assert config.outputs.base_path == Path("dist")
    assert len(config.loaded_from) == 2


def test_load_config_with_explicit_override(tmp_path, monkeypatch):
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    _write_yaml(config_dir / "default.yaml", {"logging": {"level": "warn"}})
    _write_yaml(config_dir / "local.yaml", {"logging": {"level": "error"}})
    override_path = tmp_path / "extra.yaml"
    _write_yaml(override_path, {"pipeline": {"capabilities": ["css"]}})

    monkeypatch.chdir(tmp_path)

    config = load_config(override_path)

    assert config.logging.level == "info"
    assert config.pipeline.capabilities == ["css"]
    assert config.loaded_from == (str(override_path),)


def test_load_config_falls_back_to_packaged_default(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    config = load_config()

    assert config.pipeline.capabilities == ["scss", "sass", "css"]
    assert config.pipeline.on_compression_failure == "abort"
    assert config.pipeline.load_entrypoints is False
    assert config.outputs.base_path == Path("build")


def test_load_config_missing_explicit_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


@pytest.mark.parametrize(
    "payload",
    [
        {"pipeline": {"capabilities": ["scss", "scss"]}},
        {"pipeline": {"on_compression_failure": "ignore"}},
        {"pipeline": {"max_workers": 0}},
        {"pipeline": {"retries": 3}},
        {"logging": {"level": "loud"}},
    ],
)
def test_load_config_rejects_invalid_documents(tmp_path, payload):
    path = tmp_path / "bad.yaml"
    _write_yaml(path, payload)

    with pytest.raises(ValueError, match="Invalid configuration"):
        load_config(path)


def test_load_config_requires_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- scss\n- css\n", encoding="utf-8")

    with pytest.raises(ValueError, match="mapping"):
        load_config(path)
