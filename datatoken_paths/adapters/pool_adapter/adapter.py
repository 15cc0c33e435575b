from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Sequence
from decimal import Decimal
from typing import Any

from eth_utils import to_checksum_address
from hexbytes import HexBytes

from datatoken_paths.core.adapters.BaseAdapter import BaseAdapter
from datatoken_paths.core.adapters.models import (
    PoolBalanceDelta,
    PoolCreateProgressStep,
    PoolDeployment,
    TxResult,
)
from datatoken_paths.core.config import get_network_config
from datatoken_paths.core.constants.base import ADAPTER_POOL
from datatoken_paths.core.constants.erc20_abi import ERC20_ABI
from datatoken_paths.core.constants.pool_abi import (
    FACTORY_ROUTER_ABI,
    VAULT_ABI,
    WEIGHTED_POOL_ABI,
)
from datatoken_paths.core.utils.transaction import SignCallback, decode_event_args
from datatoken_paths.core.utils.units import (
    from_fixed_point,
    to_fixed_point,
    to_fixed_point_list,
)
from datatoken_paths.core.utils.userdata import (
    CommunityFeeExit,
    ExactSharesInExit,
    ExactTokensInJoin,
    ExactTokensOutExit,
    ExitPoolRequest,
    ExitUserData,
    InitJoin,
    JoinPoolRequest,
    JoinUserData,
    MarketFeeExit,
    SingleTokenJoin,
    ensure_sorted_tokens,
)

ProgressCallback = Callable[[PoolCreateProgressStep], Awaitable[None] | None]


def _pool_id_hex(pool_id: bytes | str) -> str:
    text = HexBytes(pool_id).hex()
    return text if text.startswith("0x") else f"0x{text}"


class PoolAdapter(BaseAdapter):
    """Weighted pools: creation through the factory router, liquidity through the vault.

    Pool tokens must be sorted ascending by address; unsorted input is
    rejected before anything is sent. Amounts are display strings, converted
    to 18-decimal integers before they reach the vault's userData encoder.
    """

    adapter_type = ADAPTER_POOL

    def __init__(
        self,
        chain_id: int,
        config: dict[str, Any] | None = None,
        *,
        router_address: str | None = None,
        vault_address: str | None = None,
        sign_callback: SignCallback | None = None,
        wallet_address: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            "pool_adapter",
            chain_id,
            config,
            sign_callback=sign_callback,
            wallet_address=wallet_address,
            **kwargs,
        )
        self._router_address = (
            to_checksum_address(router_address) if router_address else None
        )
        self._vault_address = to_checksum_address(vault_address) if vault_address else None

    @property
    def router_address(self) -> str:
        if self._router_address is None:
            network = get_network_config(self.chain_id)
            self._router_address = to_checksum_address(network.address("Router"))
        return self._router_address

    @property
    def vault_address(self) -> str:
        if self._vault_address is None:
            network = get_network_config(self.chain_id)
            self._vault_address = to_checksum_address(network.address("Vault"))
        return self._vault_address

    # ---------------------------
    # Factory router
    # ---------------------------

    async def deploy_pool(
        self,
        *,
        name: str,
        symbol: str,
        tokens: Sequence[str],
        weights: Sequence[str],
        swap_fee_percentage: str,
        swap_market_fee: str,
        owner: str | None = None,
    ) -> TxResult:
        """Deploy a weighted pool; ``value`` is the pool address.

        ``weights`` are display fractions in token order (``"0.5"``); the
        fees are display fractions too (``"0.001"`` is 0.1%).
        """
        if len(tokens) != len(weights):
            raise ValueError(
                f"weights has {len(weights)} entries for {len(tokens)} tokens"
            )
        ensure_sorted_tokens(tokens)
        return await self._transact(
            self.router_address,
            FACTORY_ROUTER_ABI,
            "deployPool",
            [
                name,
                symbol,
                [to_checksum_address(t) for t in tokens],
                to_fixed_point_list(weights),
                to_fixed_point(swap_fee_percentage),
                to_fixed_point(swap_market_fee),
                to_checksum_address(owner or self._require_wallet()),
            ],
            event="NewPool",
        )

    async def create_pool_with_fork(self, controller: str) -> TxResult:
        return await self._transact(
            self.router_address,
            FACTORY_ROUTER_ABI,
            "createPoolWithFork",
            [to_checksum_address(controller)],
            event="NewPoolFork",
        )

    async def deploy_and_join(
        self,
        *,
        name: str,
        symbol: str,
        tokens: Sequence[str],
        weights: Sequence[str],
        amounts_in: Sequence[str],
        swap_fee_percentage: str,
        swap_market_fee: str,
        owner: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> PoolDeployment:
        """Deploy a pool, approve the vault where needed, then add initial liquidity.

        ``on_progress`` (sync or async) receives each :class:`PoolCreateProgressStep`
        as it starts. ``ApprovingTokens`` is reported once per token whose
        vault allowance is below its amount.
        """
        if not (len(tokens) == len(weights) == len(amounts_in)):
            raise ValueError(
                f"{len(tokens)} tokens need as many weights and amounts, got "
                f"{len(weights)} weights and {len(amounts_in)} amounts"
            )
        ensure_sorted_tokens(tokens)

        async def _report(step: PoolCreateProgressStep) -> None:
            self.logger.info(f"deploy_and_join: {step.name}")
            if on_progress is None:
                return
            result = on_progress(step)
            if inspect.isawaitable(result):
                await result

        await _report(PoolCreateProgressStep.CREATING_POOL)
        deploy = await self.deploy_pool(
            name=name,
            symbol=symbol,
            tokens=tokens,
            weights=weights,
            swap_fee_percentage=swap_fee_percentage,
            swap_market_fee=swap_market_fee,
            owner=owner,
        )
        pool_address = deploy.require_value()

        approvals: list[TxResult] = []
        for token, amount in zip(tokens, amounts_in, strict=True):
            allowance = await self.allowance_vault(token)
            if Decimal(allowance) < Decimal(str(amount)):
                await _report(PoolCreateProgressStep.APPROVING_TOKENS)
                approvals.append(await self.approve_vault(token, amount, force=True))

        await _report(PoolCreateProgressStep.ADD_INITIAL_LIQUIDITY)
        join = await self.initial_join(pool_address, amounts_in)
        return PoolDeployment(
            pool_address=pool_address, deploy=deploy, approvals=approvals, join=join
        )

    # ---------------------------
    # Reads
    # ---------------------------

    async def _raw_pool_id(self, pool_address: str) -> bytes:
        return bytes(await self._call(pool_address, WEIGHTED_POOL_ABI, "getPoolId"))

    async def get_pool_id(self, pool_address: str) -> str:
        return _pool_id_hex(await self._raw_pool_id(pool_address))

    async def get_pool_tokens(self, pool_address: str) -> list[str]:
        pool_id = await self._raw_pool_id(pool_address)
        tokens, _balances, _last_change_block = await self._call(
            self.vault_address, VAULT_ABI, "getPoolTokens", pool_id
        )
        return [to_checksum_address(t) for t in tokens]

    async def get_lp_balance(self, pool_address: str, account: str | None = None) -> str:
        account = account or self._require_wallet()
        raw = await self._call(
            pool_address, WEIGHTED_POOL_ABI, "balanceOf", to_checksum_address(account)
        )
        return from_fixed_point(raw)

    async def allowance_vault(self, token_address: str, account: str | None = None) -> str:
        account = account or self._require_wallet()
        raw = await self._call(
            token_address,
            ERC20_ABI,
            "allowance",
            to_checksum_address(account),
            self.vault_address,
        )
        return from_fixed_point(raw)

    # ---------------------------
    # Writes
    # ---------------------------

    async def approve_vault(
        self, token_address: str, amount: str, *, force: bool = False
    ) -> TxResult | None:
        """Approve the vault for ``amount``; ``None`` when the allowance already covers it.

        ``force`` sends the approval regardless of the current allowance.
        """
        if not force:
            current = await self.allowance_vault(token_address)
            if Decimal(current) >= Decimal(str(amount)):
                self.logger.debug(
                    f"Vault allowance {current} on {token_address} covers {amount}"
                )
                return None
        return await self._transact(
            token_address,
            ERC20_ABI,
            "approve",
            [self.vault_address, to_fixed_point(amount)],
        )

    async def _join(
        self,
        pool_address: str,
        max_amounts_in: list[int],
        payload: JoinUserData,
    ) -> TxResult:
        sender = self._require_wallet()
        tokens = await self.get_pool_tokens(pool_address)
        request = JoinPoolRequest.build(tokens, max_amounts_in, payload)
        pool_id = await self._raw_pool_id(pool_address)
        return await self._transact(
            self.vault_address,
            VAULT_ABI,
            "joinPool",
            [pool_id, sender, sender, request.as_tuple()],
        )

    async def _exit(
        self,
        pool_address: str,
        min_amounts_out: list[int] | None,
        payload: ExitUserData,
        recipient: str | None = None,
    ) -> TxResult:
        sender = self._require_wallet()
        tokens = await self.get_pool_tokens(pool_address)
        if min_amounts_out is None:
            min_amounts_out = [0] * len(tokens)
        request = ExitPoolRequest.build(tokens, min_amounts_out, payload)
        pool_id = await self._raw_pool_id(pool_address)
        return await self._transact(
            self.vault_address,
            VAULT_ABI,
            "exitPool",
            [
                pool_id,
                sender,
                to_checksum_address(recipient) if recipient else sender,
                request.as_tuple(),
            ],
        )

    async def initial_join(self, pool_address: str, amounts_in: Sequence[str]) -> TxResult:
        amounts = to_fixed_point_list(amounts_in)
        return await self._join(pool_address, amounts, InitJoin(amounts_in=amounts))

    async def join_pool(
        self, pool_address: str, amounts_in: Sequence[str], min_shares_out: str
    ) -> TxResult:
        amounts = to_fixed_point_list(amounts_in)
        return await self._join(
            pool_address,
            amounts,
            ExactTokensInJoin(
                amounts_in=amounts, min_shares_out=to_fixed_point(min_shares_out)
            ),
        )

    async def single_join(
        self,
        pool_address: str,
        amounts_in: Sequence[str],
        min_shares_out: str,
        token_index: int,
    ) -> TxResult:
        """Join for exact pool shares paid in the token at ``token_index``.

        ``amounts_in`` caps what may be pulled per token.
        """
        amounts = to_fixed_point_list(amounts_in)
        if not 0 <= int(token_index) < len(amounts):
            raise ValueError(
                f"token_index {token_index} out of range for {len(amounts)} tokens"
            )
        return await self._join(
            pool_address,
            amounts,
            SingleTokenJoin(
                min_shares_out=to_fixed_point(min_shares_out),
                token_index=int(token_index),
            ),
        )

    async def exit_pool_exact_in(
        self, pool_address: str, min_amounts_out: Sequence[str], shares_in: str
    ) -> TxResult:
        return await self._exit(
            pool_address,
            to_fixed_point_list(min_amounts_out),
            ExactSharesInExit(shares_in=to_fixed_point(shares_in)),
        )

    async def exit_pool_exact_out(
        self, pool_address: str, amounts_out: Sequence[str], max_shares_in: str
    ) -> TxResult:
        amounts = to_fixed_point_list(amounts_out)
        return await self._exit(
            pool_address,
            amounts,
            ExactTokensOutExit(
                amounts_out=amounts, max_shares_in=to_fixed_point(max_shares_in)
            ),
        )

    async def collect_market_fee(
        self, pool_address: str, market_fee_collector: str
    ) -> TxResult:
        return await self._exit(
            pool_address, None, MarketFeeExit(), recipient=market_fee_collector
        )

    async def collect_community_fee(
        self, pool_address: str, community_fee_collector: str
    ) -> TxResult:
        return await self._exit(
            pool_address, None, CommunityFeeExit(), recipient=community_fee_collector
        )

    async def set_market_fee_collector(
        self, pool_address: str, market_fee_collector: str
    ) -> TxResult:
        return await self._transact(
            pool_address,
            WEIGHTED_POOL_ABI,
            "updateMarketCollector",
            [to_checksum_address(market_fee_collector)],
        )

    @staticmethod
    def pool_balance_deltas(receipt: dict[str, Any] | None) -> list[PoolBalanceDelta]:
        """``PoolBalanceChanged`` events in ``receipt``, in log order."""
        return [
            PoolBalanceDelta(
                pool_id=_pool_id_hex(args["poolId"]),
                liquidity_provider=to_checksum_address(args["liquidityProvider"]),
                tokens=[to_checksum_address(t) for t in args["tokens"]],
                deltas=[int(d) for d in args["deltas"]],
                protocol_fee_amounts=[int(a) for a in args["protocolFeeAmounts"]],
            )
            for args in decode_event_args(VAULT_ABI, receipt, "PoolBalanceChanged")
        ]
