from __future__ import annotations

from typing import Any

from datatoken_paths.core.constants.erc20_abi import ERC20_ABI

# ERC20 datatoken template: the standard token surface plus the role,
# order and fee-collector entry points.

ERC20_TEMPLATE_ABI: list[dict[str, Any]] = [
    *ERC20_ABI,
    {
        "type": "function",
        "name": "cap",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "mint",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "account", "type": "address"},
            {"name": "value", "type": "uint256"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "addMinter",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_minter", "type": "address"}],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "removeMinter",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_minter", "type": "address"}],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "addPaymentManager",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_paymentManager", "type": "address"}],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "removePaymentManager",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_paymentManager", "type": "address"}],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "proposeMinter",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "newMinter", "type": "address"}],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "approveMinter",
        "stateMutability": "nonpayable",
        "inputs": [],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "setData",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_value", "type": "bytes"}],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "cleanPermissions",
        "stateMutability": "nonpayable",
        "inputs": [],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "setFeeCollector",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_newFeeCollector", "type": "address"}],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "getFeeCollector",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "type": "function",
        "name": "getPermissions",
        "stateMutability": "view",
        "inputs": [{"name": "user", "type": "address"}],
        "outputs": [
            {
                "name": "",
                "type": "tuple",
                "components": [
                    {"name": "minter", "type": "bool"},
                    {"name": "paymentManager", "type": "bool"},
                ],
            }
        ],
    },
    {
        "type": "function",
        "name": "startOrder",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "consumer", "type": "address"},
            {"name": "amount", "type": "uint256"},
            {"name": "serviceId", "type": "uint256"},
            {"name": "mpFeeAddress", "type": "address"},
        ],
        "outputs": [],
    },
    {
        "type": "event",
        "name": "OrderStarted",
        "anonymous": False,
        "inputs": [
            {"name": "consumer", "type": "address", "indexed": True},
            {"name": "payer", "type": "address", "indexed": True},
            {"name": "amount", "type": "uint256", "indexed": False},
            {"name": "serviceId", "type": "uint256", "indexed": False},
            {"name": "timestamp", "type": "uint256", "indexed": False},
            {"name": "mpFeeAddress", "type": "address", "indexed": True},
        ],
    },
    {
        "type": "event",
        "name": "MinterProposed",
        "anonymous": False,
        "inputs": [
            {"name": "currentMinter", "type": "address", "indexed": True},
            {"name": "newMinter", "type": "address", "indexed": True},
        ],
    },
    {
        "type": "event",
        "name": "MinterApproved",
        "anonymous": False,
        "inputs": [
            {"name": "currentMinter", "type": "address", "indexed": False},
            {"name": "newMinter", "type": "address", "indexed": False},
        ],
    },
]
