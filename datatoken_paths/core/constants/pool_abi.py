from __future__ import annotations

from typing import Any

from datatoken_paths.core.constants.erc20_abi import ERC20_ABI

FACTORY_ROUTER_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "deployPool",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "name", "type": "string"},
            {"name": "symbol", "type": "string"},
            {"name": "tokens", "type": "address[]"},
            {"name": "weights", "type": "uint256[]"},
            {"name": "swapFeePercentage", "type": "uint256"},
            {"name": "swapMarketFee", "type": "uint256"},
            {"name": "owner", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "type": "function",
        "name": "createPoolWithFork",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "controller", "type": "address"}],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "type": "event",
        "name": "NewPool",
        "anonymous": False,
        "inputs": [
            {"name": "poolAddress", "type": "address", "indexed": False},
            {"name": "isOcean", "type": "bool", "indexed": False},
        ],
    },
    {
        "type": "event",
        "name": "NewPoolFork",
        "anonymous": False,
        "inputs": [
            {"name": "poolAddress", "type": "address", "indexed": False},
        ],
    },
]

_JOIN_POOL_REQUEST = {
    "name": "request",
    "type": "tuple",
    "components": [
        {"name": "assets", "type": "address[]"},
        {"name": "maxAmountsIn", "type": "uint256[]"},
        {"name": "userData", "type": "bytes"},
        {"name": "fromInternalBalance", "type": "bool"},
    ],
}

_EXIT_POOL_REQUEST = {
    "name": "request",
    "type": "tuple",
    "components": [
        {"name": "assets", "type": "address[]"},
        {"name": "minAmountsOut", "type": "uint256[]"},
        {"name": "userData", "type": "bytes"},
        {"name": "toInternalBalance", "type": "bool"},
    ],
}

VAULT_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "getPoolTokens",
        "stateMutability": "view",
        "inputs": [{"name": "poolId", "type": "bytes32"}],
        "outputs": [
            {"name": "tokens", "type": "address[]"},
            {"name": "balances", "type": "uint256[]"},
            {"name": "lastChangeBlock", "type": "uint256"},
        ],
    },
    {
        "type": "function",
        "name": "joinPool",
        "stateMutability": "payable",
        "inputs": [
            {"name": "poolId", "type": "bytes32"},
            {"name": "sender", "type": "address"},
            {"name": "recipient", "type": "address"},
            _JOIN_POOL_REQUEST,
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "exitPool",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "poolId", "type": "bytes32"},
            {"name": "sender", "type": "address"},
            {"name": "recipient", "type": "address"},
            _EXIT_POOL_REQUEST,
        ],
        "outputs": [],
    },
    {
        "type": "event",
        "name": "PoolBalanceChanged",
        "anonymous": False,
        "inputs": [
            {"name": "poolId", "type": "bytes32", "indexed": True},
            {"name": "liquidityProvider", "type": "address", "indexed": True},
            {"name": "tokens", "type": "address[]", "indexed": False},
            {"name": "deltas", "type": "int256[]", "indexed": False},
            {"name": "protocolFeeAmounts", "type": "uint256[]", "indexed": False},
        ],
    },
]

# Weighted pool deployed by the router. The pool is itself the LP token.
WEIGHTED_POOL_ABI: list[dict[str, Any]] = [
    *ERC20_ABI,
    {
        "type": "function",
        "name": "getPoolId",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "bytes32"}],
    },
    {
        "type": "function",
        "name": "updateMarketCollector",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_newCollector", "type": "address"}],
        "outputs": [],
    },
]
