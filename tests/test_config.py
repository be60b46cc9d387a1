import json

import pytest
import yaml

from bnltool.archive.errors import E_CONFIG, ConfigError
from bnltool.config import BnlConfig, load_config


def test_defaults():
    config = load_config(environ={})
    assert config == BnlConfig()
    assert config.to_dict() == {
        "name_size": 128,
        "compression_level": 1,
        "overlap_policy": "warn",
        "verify_resource_size": True,
    }
    assert config.layout.record_size == 160


def test_yaml_file(tmp_path):
    path = tmp_path / "bnltool.yaml"
    path.write_text(
        yaml.safe_dump({"name_size": 64, "overlap_policy": "error"}), encoding="utf-8"
    )
    config = load_config(path, environ={})
    assert config.name_size == 64
    assert config.overlap_policy == "error"
    assert config.layout.record_size == 96


def test_json_file(tmp_path):
    path = tmp_path / "bnltool.json"
    path.write_text(json.dumps({"verify_resource_size": False}), encoding="utf-8")
    assert load_config(path, environ={}).verify_resource_size is False


def test_empty_yaml_file(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path, environ={}) == BnlConfig()


def test_environment_overrides_file(tmp_path):
    path = tmp_path / "bnltool.yaml"
    path.write_text(yaml.safe_dump({"compression_level": 3}), encoding="utf-8")
    config = load_config(
        path,
        environ={
            "BNLTOOL_COMPRESSION_LEVEL": "9",
            "BNLTOOL_NAME_SIZE": "0x40",
            "BNLTOOL_OVERLAP_POLICY": " Ignore ",
        },
    )
    assert config.compression_level == 9
    assert config.name_size == 64
    assert config.overlap_policy == "ignore"


@pytest.mark.parametrize(
    "data",
    [
        {"name_size": 0},
        {"compression_level": 10},
        {"overlap_policy": "sometimes"},
        {"unknown_key": 1},
    ],
)
def test_invalid_values(tmp_path, data):
    path = tmp_path / "bad.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    with pytest.raises(ConfigError) as exc:
        load_config(path, environ={})
    assert exc.value.code == E_CONFIG


def test_invalid_environment():
    with pytest.raises(ConfigError):
        load_config(environ={"BNLTOOL_NAME_SIZE": "big"})


def test_file_errors(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml", environ={})
    listing = tmp_path / "list.yaml"
    listing.write_text(yaml.safe_dump([1, 2]), encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(listing, environ={})
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(broken, environ={})
