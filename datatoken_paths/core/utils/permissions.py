"""Role reads for data NFTs and datatokens.

Every call is a fresh on-chain read; nothing is cached. The answer is only
as current as the block it was read at, so a role revoked between the read
and a later transaction still makes that transaction revert on chain.
"""

from __future__ import annotations

from typing import Literal

from eth_utils import to_checksum_address
from pydantic import BaseModel, ConfigDict
from web3 import AsyncWeb3

from datatoken_paths.core.constants.base import DEFAULT_NFT_TOKEN_ID
from datatoken_paths.core.constants.erc20_template_abi import ERC20_TEMPLATE_ABI
from datatoken_paths.core.constants.erc721_template_abi import ERC721_TEMPLATE_ABI
from datatoken_paths.core.utils.web3 import web3_from_chain_id

NftRoleName = Literal[
    "manager",
    "datatoken_deployer",
    "metadata_updater",
    "store_updater",
    "v3_minter",
]
DatatokenRoleName = Literal["minter", "payment_manager"]


class PermissionSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    contract: str
    holder: str
    manager: bool = False
    datatoken_deployer: bool = False
    metadata_updater: bool = False
    store_updater: bool = False
    v3_minter: bool = False
    minter: bool = False
    payment_manager: bool = False

    def has(self, role: str) -> bool:
        if role not in type(self).model_fields or role in ("contract", "holder"):
            raise ValueError(f"Unknown role: {role}")
        return bool(getattr(self, role))


async def _read_nft_permissions(
    web3: AsyncWeb3, nft_address: str, holder: str
) -> PermissionSet:
    contract = web3.eth.contract(
        address=to_checksum_address(nft_address), abi=ERC721_TEMPLATE_ABI
    )
    manager, deploy_erc20, update_metadata, store, v3_minter = (
        await contract.functions.getPermissions(to_checksum_address(holder)).call()
    )
    return PermissionSet(
        contract=to_checksum_address(nft_address),
        holder=to_checksum_address(holder),
        manager=manager,
        datatoken_deployer=deploy_erc20,
        metadata_updater=update_metadata,
        store_updater=store,
        v3_minter=v3_minter,
    )


async def _read_datatoken_permissions(
    web3: AsyncWeb3, datatoken_address: str, holder: str
) -> PermissionSet:
    contract = web3.eth.contract(
        address=to_checksum_address(datatoken_address), abi=ERC20_TEMPLATE_ABI
    )
    minter, payment_manager = await contract.functions.getPermissions(
        to_checksum_address(holder)
    ).call()
    return PermissionSet(
        contract=to_checksum_address(datatoken_address),
        holder=to_checksum_address(holder),
        minter=minter,
        payment_manager=payment_manager,
    )


async def get_nft_permissions(
    chain_id: int,
    nft_address: str,
    holder: str,
    *,
    web3: AsyncWeb3 | None = None,
) -> PermissionSet:
    """Read the five NFT roles of ``holder`` from the data NFT contract."""
    if web3 is not None:
        return await _read_nft_permissions(web3, nft_address, holder)
    async with web3_from_chain_id(chain_id) as w3:
        return await _read_nft_permissions(w3, nft_address, holder)


async def get_datatoken_permissions(
    chain_id: int,
    datatoken_address: str,
    holder: str,
    *,
    web3: AsyncWeb3 | None = None,
) -> PermissionSet:
    """Read ``minter`` and ``payment_manager`` for ``holder`` on a datatoken."""
    if web3 is not None:
        return await _read_datatoken_permissions(web3, datatoken_address, holder)
    async with web3_from_chain_id(chain_id) as w3:
        return await _read_datatoken_permissions(w3, datatoken_address, holder)


async def get_nft_owner(
    chain_id: int, nft_address: str, token_id: int = DEFAULT_NFT_TOKEN_ID
) -> str:
    async with web3_from_chain_id(chain_id) as web3:
        contract = web3.eth.contract(
            address=to_checksum_address(nft_address), abi=ERC721_TEMPLATE_ABI
        )
        owner = await contract.functions.ownerOf(int(token_id)).call()
        return to_checksum_address(owner)


async def get_contract_owner(chain_id: int, address: str, abi: list[dict]) -> str:
    """``owner()`` of an Ownable contract such as a token factory."""
    async with web3_from_chain_id(chain_id) as web3:
        contract = web3.eth.contract(address=to_checksum_address(address), abi=abi)
        owner = await contract.functions.owner().call()
        return to_checksum_address(owner)


async def get_remaining_cap(chain_id: int, datatoken_address: str) -> int:
    """``cap - totalSupply`` in fixed point."""
    async with web3_from_chain_id(chain_id) as web3:
        contract = web3.eth.contract(
            address=to_checksum_address(datatoken_address), abi=ERC20_TEMPLATE_ABI
        )
        cap = await contract.functions.cap().call()
        supply = await contract.functions.totalSupply().call()
        return max(int(cap) - int(supply), 0)
