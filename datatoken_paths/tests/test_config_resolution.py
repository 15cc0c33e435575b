from __future__ import annotations

import copy
import json
from pathlib import Path

import pytest

import datatoken_paths.core.config as config
from datatoken_paths.core.constants.networks import BALANCER_VAULT

FACTORY = "0x1111111111111111111111111111111111111111"
ROUTER = "0x2222222222222222222222222222222222222222"


@pytest.fixture
def restore_global_config() -> None:
    original = copy.deepcopy(config.CONFIG)
    yield
    config.set_config(original)


@pytest.fixture(autouse=True)
def clear_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "DATATOKEN_PATHS_CONFIG_PATH",
        "DATATOKEN_PATHS_CONFIG",
        "DATATOKEN_PATHS_ADDRESS_FILE",
    ):
        monkeypatch.delenv(key, raising=False)


def test_resolve_config_path_defaults_to_repo_root(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.chdir(tmp_path)

    repo_root = Path(__file__).resolve().parents[2]
    assert config.resolve_config_path() == repo_root / "config.json"


def test_resolve_config_path_env_relative_is_repo_relative(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("DATATOKEN_PATHS_CONFIG_PATH", "config.example.json")
    monkeypatch.chdir(tmp_path)

    repo_root = Path(__file__).resolve().parents[2]
    assert config.resolve_config_path() == repo_root / "config.example.json"


def test_load_config_json_supports_env_override(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("DATATOKEN_PATHS_CONFIG_PATH", "config.example.json")
    monkeypatch.chdir(tmp_path)

    cfg = config.load_config_json()
    assert isinstance(cfg.get("rpc_urls"), dict)
    assert cfg["gas"]["headroom"] == 1


def test_load_config_json_missing_file(tmp_path: Path) -> None:
    missing = tmp_path / "nope.json"

    assert config.load_config_json(missing) == {}
    with pytest.raises(FileNotFoundError):
        config.load_config_json(missing, require_exists=True)


def test_load_config_replaces_in_place(
    restore_global_config: None, tmp_path: Path
) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"rpc": {"requests_per_second": 4}}))
    same_dict = config.CONFIG

    config.load_config(path)

    assert same_dict is config.CONFIG
    assert config.get_requests_per_second() == 4.0
    config.set_config({"rpc": {"requests_per_second": 0}})
    assert config.get_requests_per_second() is None


def test_network_config_by_name_and_chain_id(restore_global_config: None) -> None:
    config.set_config({})

    by_name = config.get_network_config("development")
    by_id = config.get_network_config(8996)

    assert by_name == by_id
    assert by_name.metadata_cache_uri == "http://127.0.0.1:5000"
    assert by_name.address("Vault") == BALANCER_VAULT
    assert config.get_network_config("ethereum").name == "mainnet"


def test_network_config_unknown_network() -> None:
    with pytest.raises(ValueError, match="Unknown network"):
        config.get_network_config("atlantis")
    with pytest.raises(ValueError, match="Unknown chain id"):
        config.get_network_config(424242)


def test_network_config_missing_address_names_key(restore_global_config: None) -> None:
    config.set_config({})

    with pytest.raises(KeyError, match="Router"):
        config.get_network_config("development").address("Router")


def test_network_config_layers_address_file_then_config(
    restore_global_config: None, tmp_path: Path
) -> None:
    address_file = tmp_path / "address.json"
    address_file.write_text(
        json.dumps(
            {"development": {"ERC721Factory": FACTORY, "Router": FACTORY, "chainId": 1}}
        )
    )
    config.set_config(
        {
            "address_file": str(address_file),
            "addresses": {"development": {"Router": ROUTER}},
            "networks": {"development": {"start_block": 120}},
            "metadata_cache_uri": "https://cache.invalid",
        }
    )

    network = config.get_network_config("development")

    assert network.address("ERC721Factory") == FACTORY
    assert network.address("Router") == ROUTER
    assert "chainId" not in network.addresses
    assert network.start_block == 120
    assert network.metadata_cache_uri == "https://cache.invalid"


def test_address_file_missing_is_empty(tmp_path: Path) -> None:
    assert config.load_address_file(tmp_path / "absent.json") == {}


def test_address_file_must_be_an_object(tmp_path: Path) -> None:
    path = tmp_path / "address.json"
    path.write_text("[]")

    with pytest.raises(ValueError, match="JSON object"):
        config.load_address_file(path)
