from enum import IntEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from datatoken_paths.core.constants.base import DEFAULT_NFT_TOKEN_ID
from datatoken_paths.core.errors import EventNotFoundError


class TxResult(BaseModel):
    """A mined, successful transaction.

    ``value`` carries the first field of the creation event (token or pool
    address) when the call produces one. When the receipt lacks the event the
    transaction still succeeded: ``value`` is ``None`` and ``event_missing``
    is set.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    tx_hash: str
    chain_id: int | None = None
    receipt: Any = None
    gas_limit: int | None = None
    gas_estimated: bool = True
    value: Any = None
    event_name: str | None = None
    event_missing: bool = False

    def require_value(self) -> Any:
        if self.event_missing or self.value is None:
            raise EventNotFoundError(self.event_name or "creation event", self.tx_hash)
        return self.value


OutcomeStatus = Literal["success", "denied", "reverted", "unparseable"]


class Outcome(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: OutcomeStatus
    value: Any = None
    reason: str | None = None
    tx_hash: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"


class TokenTemplate(BaseModel):
    template_address: str
    is_active: bool


class DatatokenName(BaseModel):
    name: str
    symbol: str


class PoolCreateProgressStep(IntEnum):
    CREATING_POOL = 0
    APPROVING_TOKENS = 1
    ADD_INITIAL_LIQUIDITY = 2


class NftMetadata(BaseModel):
    decryptor_url: str
    decryptor_address: str
    state: int
    has_metadata: bool


class MetadataProof(BaseModel):
    validator_address: str
    v: int
    r: bytes
    s: bytes

    def as_tuple(self) -> tuple[str, int, bytes, bytes]:
        return (self.validator_address, self.v, self.r, self.s)


class MetadataAndTokenUri(BaseModel):
    metadata_state: int
    decryptor_url: str
    decryptor_address: str
    flags: bytes
    data: bytes
    metadata_hash: bytes
    token_id: int = DEFAULT_NFT_TOKEN_ID
    token_uri: str
    metadata_proofs: list[MetadataProof] = Field(default_factory=list)

    def as_tuple(self) -> tuple[Any, ...]:
        return (
            self.metadata_state,
            self.decryptor_url,
            self.decryptor_address,
            self.flags,
            self.data,
            self.metadata_hash,
            self.token_id,
            self.token_uri,
            [p.as_tuple() for p in self.metadata_proofs],
        )


class PoolBalanceDelta(BaseModel):
    """One ``PoolBalanceChanged`` vault event; deltas are signed raw amounts."""

    pool_id: str
    liquidity_provider: str
    tokens: list[str]
    deltas: list[int]
    protocol_fee_amounts: list[int]


class PoolDeployment(BaseModel):
    pool_address: str
    deploy: TxResult
    approvals: list[TxResult] = Field(default_factory=list)
    join: TxResult
