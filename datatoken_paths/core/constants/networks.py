from __future__ import annotations

from typing import Any

from datatoken_paths.core.constants.chains import (
    CHAIN_ID_BSC,
    CHAIN_ID_DEVELOPMENT,
    CHAIN_ID_ETHEREUM,
    CHAIN_ID_MOONBEAM_ALPHA,
    CHAIN_ID_MUMBAI,
    CHAIN_ID_POLYGON,
    CHAIN_ID_RINKEBY,
    CHAIN_ID_ROPSTEN,
)

# Balancer V2 vault; same address on every network it is deployed to.
BALANCER_VAULT = "0xBA12222222228d8Ba445958a75a0704d566BF2C8"

DEFAULT_METADATA_CACHE_URI = "https://aquarius.oceanprotocol.com"

NETWORKS: dict[str, dict[str, Any]] = {
    "development": {
        "chain_id": CHAIN_ID_DEVELOPMENT,
        "node_uri": "http://127.0.0.1:8545",
        "metadata_cache_uri": "http://127.0.0.1:5000",
        "explorer_uri": "http://127.0.0.1:8545",
        "token_symbol": "OCEAN",
        "addresses": {"Vault": BALANCER_VAULT},
    },
    "mainnet": {
        "chain_id": CHAIN_ID_ETHEREUM,
        "node_uri": "https://mainnet.infura.io/v3",
        "metadata_cache_uri": DEFAULT_METADATA_CACHE_URI,
        "explorer_uri": "https://etherscan.io",
        "token_symbol": "OCEAN",
        "addresses": {
            "Ocean": "0x967da4048cD07aB37855c090aAF366e4ce1b9F48",
            "Vault": BALANCER_VAULT,
        },
    },
    "ropsten": {
        "chain_id": CHAIN_ID_ROPSTEN,
        "node_uri": "https://ropsten.infura.io/v3",
        "metadata_cache_uri": DEFAULT_METADATA_CACHE_URI,
        "explorer_uri": "https://ropsten.etherscan.io",
        "token_symbol": "OCEAN",
        "addresses": {"Vault": BALANCER_VAULT},
    },
    "rinkeby": {
        "chain_id": CHAIN_ID_RINKEBY,
        "node_uri": "https://rinkeby.infura.io/v3",
        "metadata_cache_uri": DEFAULT_METADATA_CACHE_URI,
        "explorer_uri": "https://rinkeby.etherscan.io",
        "token_symbol": "OCEAN",
        "addresses": {
            "Ocean": "0x8967BCF84170c91B0d24D4302C2376283b0B3a07",
            "Vault": BALANCER_VAULT,
        },
    },
    "bsc": {
        "chain_id": CHAIN_ID_BSC,
        "node_uri": "https://bsc-dataseed.binance.org",
        "metadata_cache_uri": DEFAULT_METADATA_CACHE_URI,
        "explorer_uri": "https://bscscan.com",
        "token_symbol": "OCEAN",
        "addresses": {},
    },
    "polygon": {
        "chain_id": CHAIN_ID_POLYGON,
        "node_uri": "https://polygon-mainnet.infura.io/v3",
        "metadata_cache_uri": DEFAULT_METADATA_CACHE_URI,
        "explorer_uri": "https://polygonscan.com",
        "token_symbol": "mOCEAN",
        "addresses": {"Vault": BALANCER_VAULT},
    },
    "moonbeamalpha": {
        "chain_id": CHAIN_ID_MOONBEAM_ALPHA,
        "node_uri": "https://rpc.testnet.moonbeam.network",
        "metadata_cache_uri": DEFAULT_METADATA_CACHE_URI,
        "explorer_uri": "https://moonbase-blockscout.testnet.moonbeam.network",
        "token_symbol": "mbOCEAN",
        "addresses": {},
    },
    "mumbai": {
        "chain_id": CHAIN_ID_MUMBAI,
        "node_uri": "https://polygon-mumbai.infura.io/v3",
        "metadata_cache_uri": DEFAULT_METADATA_CACHE_URI,
        "explorer_uri": "https://mumbai.polygonscan.com",
        "token_symbol": "OCEAN",
        "addresses": {"Vault": BALANCER_VAULT},
    },
}
