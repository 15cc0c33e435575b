"""Typed ``userData`` payloads for Balancer V2 vault joins and exits.

The vault forwards ``userData`` opaquely to the pool, which reads the leading
kind word and decodes the rest with the layout for that kind. A mismatched
layout is only caught at execution time, so each kind gets its own model and
nothing else can reach the encoder:

============================  ==========  =====================================
model                         kind        ABI layout
============================  ==========  =====================================
``InitJoin``                  join 0      ``(uint256, uint256[])``
``ExactTokensInJoin``         join 1      ``(uint256, uint256[], uint256)``
``SingleTokenJoin``           join 2      ``(uint256, uint256, uint256)``
``ExactSharesInExit``         exit 1      ``(uint256, uint256)``
``ExactTokensOutExit``        exit 2      ``(uint256, uint256[], uint256)``
``CommunityFeeExit``          exit 3      ``(uint256)``
``MarketFeeExit``             exit 4      ``(uint256)``
============================  ==========  =====================================

All amounts are on-chain integers; convert display values with
:func:`datatoken_paths.core.utils.units.to_fixed_point` first.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum, IntEnum
from typing import Annotated, Any, ClassVar, Literal

from eth_abi import decode, encode
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from datatoken_paths.core.constants.base import MAX_UINT256
from datatoken_paths.core.errors import UnsortedTokensError

Uint256 = Annotated[int, Field(strict=True, ge=0, le=MAX_UINT256)]


class JoinKind(IntEnum):
    INIT = 0
    EXACT_TOKENS_IN = 1
    SINGLE_TOKEN = 2


class ExitKind(IntEnum):
    EXACT_SHARES_IN = 1
    EXACT_TOKENS_OUT = 2
    COMMUNITY_FEE = 3
    MARKET_FEE = 4


class _UserData(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    abi_types: ClassVar[tuple[str, ...]] = ("uint256",)
    payload_fields: ClassVar[tuple[str, ...]] = ()

    kind: int

    def abi_values(self) -> list[Any]:
        values: list[Any] = [int(self.kind)]
        for name in self.payload_fields:
            value = getattr(self, name)
            values.append(list(value) if isinstance(value, (list, tuple)) else value)
        return values

    def encode(self) -> bytes:
        return encode(list(self.abi_types), self.abi_values())


class InitJoin(_UserData):
    abi_types: ClassVar[tuple[str, ...]] = ("uint256", "uint256[]")
    payload_fields: ClassVar[tuple[str, ...]] = ("amounts_in",)

    kind: Literal[0] = 0
    amounts_in: list[Uint256]


class ExactTokensInJoin(_UserData):
    abi_types: ClassVar[tuple[str, ...]] = ("uint256", "uint256[]", "uint256")
    payload_fields: ClassVar[tuple[str, ...]] = ("amounts_in", "min_shares_out")

    kind: Literal[1] = 1
    amounts_in: list[Uint256]
    min_shares_out: Uint256


class SingleTokenJoin(_UserData):
    abi_types: ClassVar[tuple[str, ...]] = ("uint256", "uint256", "uint256")
    payload_fields: ClassVar[tuple[str, ...]] = ("min_shares_out", "token_index")

    kind: Literal[2] = 2
    min_shares_out: Uint256
    token_index: Uint256


class ExactSharesInExit(_UserData):
    abi_types: ClassVar[tuple[str, ...]] = ("uint256", "uint256")
    payload_fields: ClassVar[tuple[str, ...]] = ("shares_in",)

    kind: Literal[1] = 1
    shares_in: Uint256


class ExactTokensOutExit(_UserData):
    abi_types: ClassVar[tuple[str, ...]] = ("uint256", "uint256[]", "uint256")
    payload_fields: ClassVar[tuple[str, ...]] = ("amounts_out", "max_shares_in")

    kind: Literal[2] = 2
    amounts_out: list[Uint256]
    max_shares_in: Uint256


class CommunityFeeExit(_UserData):
    kind: Literal[3] = 3


class MarketFeeExit(_UserData):
    kind: Literal[4] = 4


JoinUserData = Annotated[
    InitJoin | ExactTokensInJoin | SingleTokenJoin, Field(discriminator="kind")
]
ExitUserData = Annotated[
    ExactSharesInExit | ExactTokensOutExit | CommunityFeeExit | MarketFeeExit,
    Field(discriminator="kind"),
]

_JOIN_ADAPTER: TypeAdapter[JoinUserData] = TypeAdapter(JoinUserData)
_EXIT_ADAPTER: TypeAdapter[ExitUserData] = TypeAdapter(ExitUserData)

_JOIN_MODELS: dict[int, type[_UserData]] = {
    JoinKind.INIT: InitJoin,
    JoinKind.EXACT_TOKENS_IN: ExactTokensInJoin,
    JoinKind.SINGLE_TOKEN: SingleTokenJoin,
}
_EXIT_MODELS: dict[int, type[_UserData]] = {
    ExitKind.EXACT_SHARES_IN: ExactSharesInExit,
    ExitKind.EXACT_TOKENS_OUT: ExactTokensOutExit,
    ExitKind.COMMUNITY_FEE: CommunityFeeExit,
    ExitKind.MARKET_FEE: MarketFeeExit,
}


def _plain_kind(data: Mapping[str, Any]) -> dict[str, Any]:
    data = dict(data)
    kind = data.get("kind")
    if isinstance(kind, Enum):
        data["kind"] = kind.value
    return data


def parse_join_user_data(data: Mapping[str, Any]) -> JoinUserData:
    """Validate a loose mapping into the join payload its ``kind`` names.

    Fields belonging to another kind are rejected.
    """
    return _JOIN_ADAPTER.validate_python(_plain_kind(data))


def parse_exit_user_data(data: Mapping[str, Any]) -> ExitUserData:
    return _EXIT_ADAPTER.validate_python(_plain_kind(data))


def encode_user_data(payload: _UserData) -> bytes:
    return payload.encode()


def _decode(data: bytes, models: dict[int, type[_UserData]], side: str) -> _UserData:
    data = bytes(data)
    if len(data) < 32:
        raise ValueError(f"{side} userData too short: {len(data)} bytes")
    kind = int.from_bytes(data[:32], "big")
    model = models.get(kind)
    if model is None:
        raise ValueError(f"Unknown {side} kind {kind}")
    values = decode(list(model.abi_types), data)
    fields = {
        name: list(value) if isinstance(value, tuple) else value
        for name, value in zip(model.payload_fields, values[1:])
    }
    return model(kind=kind, **fields)


def decode_join_user_data(data: bytes) -> JoinUserData:
    return _decode(data, _JOIN_MODELS, "join")  # type: ignore[return-value]


def decode_exit_user_data(data: bytes) -> ExitUserData:
    return _decode(data, _EXIT_MODELS, "exit")  # type: ignore[return-value]


class _PoolRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    assets: list[str]
    user_data: bytes

    def _check_lengths(self, amounts: Sequence[int], label: str) -> None:
        if len(amounts) != len(self.assets):
            raise ValueError(
                f"{label} has {len(amounts)} entries for {len(self.assets)} assets"
            )


class JoinPoolRequest(_PoolRequest):
    """Vault ``JoinPoolRequest``: ``(assets, maxAmountsIn, userData, fromInternalBalance)``."""

    max_amounts_in: list[Uint256]
    from_internal_balance: bool = False

    @model_validator(mode="after")
    def _parallel_arrays(self) -> JoinPoolRequest:
        self._check_lengths(self.max_amounts_in, "max_amounts_in")
        return self

    @classmethod
    def build(
        cls,
        assets: Sequence[str],
        max_amounts_in: Sequence[int],
        payload: _UserData,
        from_internal_balance: bool = False,
    ) -> JoinPoolRequest:
        return cls(
            assets=list(assets),
            max_amounts_in=list(max_amounts_in),
            user_data=payload.encode(),
            from_internal_balance=from_internal_balance,
        )

    def as_tuple(self) -> tuple[list[str], list[int], bytes, bool]:
        return (
            list(self.assets),
            list(self.max_amounts_in),
            self.user_data,
            self.from_internal_balance,
        )


class ExitPoolRequest(_PoolRequest):
    """Vault ``ExitPoolRequest``: ``(assets, minAmountsOut, userData, toInternalBalance)``."""

    min_amounts_out: list[Uint256]
    to_internal_balance: bool = False

    @model_validator(mode="after")
    def _parallel_arrays(self) -> ExitPoolRequest:
        self._check_lengths(self.min_amounts_out, "min_amounts_out")
        return self

    @classmethod
    def build(
        cls,
        assets: Sequence[str],
        min_amounts_out: Sequence[int],
        payload: _UserData,
        to_internal_balance: bool = False,
    ) -> ExitPoolRequest:
        return cls(
            assets=list(assets),
            min_amounts_out=list(min_amounts_out),
            user_data=payload.encode(),
            to_internal_balance=to_internal_balance,
        )

    def as_tuple(self) -> tuple[list[str], list[int], bytes, bool]:
        return (
            list(self.assets),
            list(self.min_amounts_out),
            self.user_data,
            self.to_internal_balance,
        )


def _address_key(address: str) -> int:
    return int(address, 16)


def is_sorted_tokens(tokens: Sequence[str]) -> bool:
    """Strictly ascending by numeric address value, as the vault requires."""
    keys = [_address_key(t) for t in tokens]
    return all(a < b for a, b in zip(keys, keys[1:]))


def ensure_sorted_tokens(tokens: Sequence[str]) -> None:
    if not is_sorted_tokens(tokens):
        raise UnsortedTokensError(list(tokens))


def sort_tokens(
    tokens: Sequence[str], *parallel: Sequence[Any]
) -> tuple[list[str], ...]:
    """Sort ``tokens`` ascending and permute every parallel array the same way."""
    for arr in parallel:
        if len(arr) != len(tokens):
            raise ValueError(
                f"parallel array has {len(arr)} entries for {len(tokens)} tokens"
            )
    order = sorted(range(len(tokens)), key=lambda i: _address_key(tokens[i]))
    return (
        [tokens[i] for i in order],
        *([arr[i] for i in order] for arr in parallel),
    )
