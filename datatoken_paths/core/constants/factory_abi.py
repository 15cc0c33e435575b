from __future__ import annotations

from typing import Any

# Shared by the ERC721 (NFT) factory and the ERC20 (datatoken) factory.
_TEMPLATE_REGISTRY: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "getCurrentTokenCount",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "owner",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "type": "function",
        "name": "getCurrentTemplateCount",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "getTokenTemplate",
        "stateMutability": "view",
        "inputs": [{"name": "_index", "type": "uint256"}],
        "outputs": [
            {
                "name": "",
                "type": "tuple",
                "components": [
                    {"name": "templateAddress", "type": "address"},
                    {"name": "isActive", "type": "bool"},
                ],
            }
        ],
    },
    {
        "type": "function",
        "name": "addTokenTemplate",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_templateAddress", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "disableTokenTemplate",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_index", "type": "uint256"}],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "reactivateTokenTemplate",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_index", "type": "uint256"}],
        "outputs": [],
    },
]

ERC721_FACTORY_ABI: list[dict[str, Any]] = [
    *_TEMPLATE_REGISTRY,
    {
        "type": "function",
        "name": "deployERC721Contract",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "name", "type": "string"},
            {"name": "symbol", "type": "string"},
            {"name": "metadataCacheUri", "type": "string"},
            {"name": "flags", "type": "bytes"},
            {"name": "_templateIndex", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "type": "event",
        "name": "TokenCreated",
        "anonymous": False,
        "inputs": [
            {"name": "newTokenAddress", "type": "address", "indexed": True},
            {"name": "templateAddress", "type": "address", "indexed": True},
            {"name": "tokenName", "type": "string", "indexed": False},
            {"name": "admin", "type": "address", "indexed": False},
        ],
    },
]

ERC20_FACTORY_ABI: list[dict[str, Any]] = [
    *_TEMPLATE_REGISTRY,
    {
        "type": "function",
        "name": "erc721Factory",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "type": "function",
        "name": "setERC721Factory",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_erc721FactoryAddress", "type": "address"}],
        "outputs": [],
    },
    {
        "type": "event",
        "name": "TokenCreated",
        "anonymous": False,
        "inputs": [
            {"name": "newTokenAddress", "type": "address", "indexed": True},
            {"name": "templateAddress", "type": "address", "indexed": True},
            {"name": "name", "type": "string", "indexed": False},
        ],
    },
]
