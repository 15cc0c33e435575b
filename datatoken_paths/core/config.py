import json
import os
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field

from datatoken_paths.core.constants.chains import CHAIN_ID_TO_CODE
from datatoken_paths.core.constants.networks import (
    DEFAULT_METADATA_CACHE_URI,
    NETWORKS,
)

_CONFIG_ENV_KEYS = ("DATATOKEN_PATHS_CONFIG_PATH", "DATATOKEN_PATHS_CONFIG")
_ADDRESS_FILE_ENV_KEY = "DATATOKEN_PATHS_ADDRESS_FILE"
_DEFAULT_CONFIG_FILENAME = "config.json"


def _find_project_root(start: Path) -> Path | None:
    cur = start.resolve()
    for parent in [cur, *cur.parents]:
        if (parent / "pyproject.toml").exists():
            return parent
    return None


def _project_root() -> Path | None:
    return _find_project_root(Path.cwd()) or _find_project_root(Path(__file__).parent)


def _resolve_relative(p: Path) -> Path:
    if p.is_absolute():
        return p
    root = _project_root()
    return (root / p) if root else p


def resolve_config_path(path: str | Path | None = None) -> Path:
    if path is not None:
        return Path(path).expanduser()

    env_path = next(
        (os.getenv(k, "").strip() for k in _CONFIG_ENV_KEYS if os.getenv(k)), ""
    )
    if env_path:
        return _resolve_relative(Path(env_path).expanduser())

    root = _project_root()
    return (root / _DEFAULT_CONFIG_FILENAME) if root else Path(_DEFAULT_CONFIG_FILENAME)


def load_config_json(
    path: str | Path | None = None, *, require_exists: bool = False
) -> dict[str, Any]:
    cfg_path = resolve_config_path(path)
    if not cfg_path.exists():
        if require_exists:
            raise FileNotFoundError(f"Config file not found: {cfg_path}")
        return {}
    try:
        return json.loads(cfg_path.read_text())
    except Exception as exc:
        logger.warning(f"Ignoring unreadable config file {cfg_path}: {exc}")
        return {}


CONFIG: dict[str, Any] = load_config_json()


def set_config(config: dict[str, Any]) -> None:
    """Replace the global CONFIG dict in-place.

    This allows code that imported CONFIG at module import time to see updates.
    """
    CONFIG.clear()
    CONFIG.update(config)


def load_config(
    path: str | Path | None = None, *, require_exists: bool = False
) -> None:
    """Load config from disk into the global CONFIG dict."""
    set_config(load_config_json(path, require_exists=require_exists))


def get_rpc_urls() -> dict[str, Any]:
    return CONFIG.get("rpc_urls", {})


def get_gas_config() -> dict[str, Any]:
    return CONFIG.get("gas", {}) or {}


def get_requests_per_second() -> float | None:
    value = (CONFIG.get("rpc", {}) or {}).get("requests_per_second")
    if value is None:
        return None
    rate = float(value)
    return rate if rate > 0 else None


def load_address_file(path: str | Path | None = None) -> dict[str, dict[str, str]]:
    """Read a per-network contract address table (``{network: {key: address}}``).

    Falls back to ``CONFIG["address_file"]`` then the
    ``DATATOKEN_PATHS_ADDRESS_FILE`` env var. Missing file -> empty table.
    """
    raw = path or CONFIG.get("address_file") or os.getenv(_ADDRESS_FILE_ENV_KEY)
    if not raw:
        return {}
    file_path = _resolve_relative(Path(str(raw)).expanduser())
    if not file_path.exists():
        logger.warning(f"Address file not found: {file_path}")
        return {}
    data = json.loads(file_path.read_text())
    if not isinstance(data, dict):
        raise ValueError(f"Address file {file_path} must hold a JSON object")
    return {
        str(network): {str(k): str(v) for k, v in table.items() if isinstance(v, str)}
        for network, table in data.items()
        if isinstance(table, dict)
    }


class NetworkConfig(BaseModel):
    name: str
    chain_id: int
    node_uri: str | None = None
    metadata_cache_uri: str = DEFAULT_METADATA_CACHE_URI
    explorer_uri: str | None = None
    token_symbol: str = "OCEAN"
    # first block worth scanning for event history
    start_block: int = 0
    addresses: dict[str, str] = Field(default_factory=dict)

    def address(self, key: str) -> str:
        try:
            return self.addresses[key]
        except KeyError:
            raise KeyError(
                f"No {key} address configured for network {self.name}"
            ) from None


def _network_name(network: str | int) -> str:
    if isinstance(network, int) or str(network).isdigit():
        chain_id = int(network)
        name = CHAIN_ID_TO_CODE.get(chain_id)
        if name is None:
            raise ValueError(f"Unknown chain id {chain_id}")
        return name
    name = str(network).strip().lower()
    if name == "ethereum":
        return "mainnet"
    return name


def get_network_config(network: str | int) -> NetworkConfig:
    """Static network table, then the address file, then ``CONFIG`` overrides."""
    name = _network_name(network)
    static = NETWORKS.get(name)
    if static is None:
        raise ValueError(f"Unknown network {network!r}")

    addresses = dict(static.get("addresses", {}))
    addresses.update(load_address_file().get(name, {}))
    addresses.update((CONFIG.get("addresses", {}) or {}).get(name, {}))

    overrides = (CONFIG.get("networks", {}) or {}).get(name, {})
    fields = {k: v for k, v in static.items() if k != "addresses"}
    fields.update({k: v for k, v in overrides.items() if k != "addresses"})
    if CONFIG.get("metadata_cache_uri") and "metadata_cache_uri" not in overrides:
        fields["metadata_cache_uri"] = CONFIG["metadata_cache_uri"]

    return NetworkConfig(name=name, addresses=addresses, **fields)
