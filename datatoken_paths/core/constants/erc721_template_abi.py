from __future__ import annotations

from typing import Any

_METADATA_PROOF = {
    "name": "_metadataProofs",
    "type": "tuple[]",
    "components": [
        {"name": "validatorAddress", "type": "address"},
        {"name": "v", "type": "uint8"},
        {"name": "r", "type": "bytes32"},
        {"name": "s", "type": "bytes32"},
    ],
}


def _address_setter(name: str, arg: str = "_allowedAddress") -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "stateMutability": "nonpayable",
        "inputs": [{"name": arg, "type": "address"}],
        "outputs": [],
    }


ERC721_TEMPLATE_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "name",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "type": "function",
        "name": "symbol",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "type": "function",
        "name": "ownerOf",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "type": "function",
        "name": "tokenURI",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [{"name": "", "type": "string"}],
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
                    {"name": "manager", "type": "bool"},
                    {"name": "deployERC20", "type": "bool"},
                    {"name": "updateMetadata", "type": "bool"},
                    {"name": "store", "type": "bool"},
                    {"name": "v3Minter", "type": "bool"},
                ],
            }
        ],
    },
    {
        "type": "function",
        "name": "isERC20Deployer",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "getMetaData",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "", "type": "string"},
            {"name": "", "type": "string"},
            {"name": "", "type": "uint8"},
            {"name": "", "type": "bool"},
        ],
    },
    {
        "type": "function",
        "name": "getData",
        "stateMutability": "view",
        "inputs": [{"name": "key", "type": "bytes32"}],
        "outputs": [{"name": "", "type": "bytes"}],
    },
    {
        "type": "function",
        "name": "createERC20",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "_templateIndex", "type": "uint256"},
            {"name": "strings", "type": "string[]"},
            {"name": "addresses", "type": "address[]"},
            {"name": "uints", "type": "uint256[]"},
            {"name": "bytess", "type": "bytes32[]"},
        ],
        "outputs": [{"name": "", "type": "address"}],
    },
    _address_setter("addManager", "_managerAddress"),
    _address_setter("removeManager", "_managerAddress"),
    _address_setter("addToCreateERC20List"),
    _address_setter("removeFromCreateERC20List"),
    _address_setter("addToMetadataList"),
    _address_setter("removeFromMetadataList"),
    _address_setter("addTo725StoreList"),
    _address_setter("removeFrom725StoreList"),
    _address_setter("addV3Minter"),
    _address_setter("removeV3Minter"),
    {
        "type": "function",
        "name": "wrapV3DT",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "datatoken", "type": "address"},
            {"name": "newMinter", "type": "address"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "mintV3DT",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "datatoken", "type": "address"},
            {"name": "to", "type": "address"},
            {"name": "value", "type": "uint256"},
        ],
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
        "name": "transferFrom",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "from", "type": "address"},
            {"name": "to", "type": "address"},
            {"name": "tokenId", "type": "uint256"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "safeTransferFrom",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "from", "type": "address"},
            {"name": "to", "type": "address"},
            {"name": "tokenId", "type": "uint256"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "setMetaData",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "_metaDataState", "type": "uint8"},
            {"name": "_metaDataDecryptorUrl", "type": "string"},
            {"name": "_metaDataDecryptorAddress", "type": "string"},
            {"name": "flags", "type": "bytes"},
            {"name": "data", "type": "bytes"},
            {"name": "_metaDataHash", "type": "bytes32"},
            _METADATA_PROOF,
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "setMetaDataState",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_metaDataState", "type": "uint8"}],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "setMetaDataAndTokenURI",
        "stateMutability": "nonpayable",
        "inputs": [
            {
                "name": "_metaDataAndTokenURI",
                "type": "tuple",
                "components": [
                    {"name": "metaDataState", "type": "uint8"},
                    {"name": "metaDataDecryptorUrl", "type": "string"},
                    {"name": "metaDataDecryptorAddress", "type": "string"},
                    {"name": "flags", "type": "bytes"},
                    {"name": "data", "type": "bytes"},
                    {"name": "metaDataHash", "type": "bytes32"},
                    {"name": "tokenId", "type": "uint256"},
                    {"name": "tokenURI", "type": "string"},
                    {**_METADATA_PROOF, "name": "metadataProofs"},
                ],
            }
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "setTokenURI",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "tokenId", "type": "uint256"},
            {"name": "tokenURI", "type": "string"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "setNewData",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "_key", "type": "bytes32"},
            {"name": "_value", "type": "bytes"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "executeCall",
        "stateMutability": "payable",
        "inputs": [
            {"name": "_operation", "type": "uint256"},
            {"name": "_to", "type": "address"},
            {"name": "_value", "type": "uint256"},
            {"name": "_data", "type": "bytes"},
        ],
        "outputs": [],
    },
    # Emitted by the ERC20 factory during createERC20; decoded from the
    # NFT's transaction receipt.
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
    {
        "type": "event",
        "name": "MetadataUpdated",
        "anonymous": False,
        "inputs": [
            {"name": "updatedBy", "type": "address", "indexed": True},
            {"name": "state", "type": "uint8", "indexed": False},
            {"name": "decryptorUrl", "type": "string", "indexed": False},
            {"name": "flags", "type": "bytes", "indexed": False},
            {"name": "data", "type": "bytes", "indexed": False},
            {"name": "metaDataHash", "type": "bytes", "indexed": False},
            {"name": "timestamp", "type": "uint256", "indexed": False},
            {"name": "blockNumber", "type": "uint256", "indexed": False},
        ],
    },
]
