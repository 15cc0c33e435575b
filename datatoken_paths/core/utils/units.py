from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal, InvalidOperation, ROUND_DOWN, localcontext

from datatoken_paths.core.constants.base import FIXED_POINT_DECIMALS, MAX_UINT256

# uint256 has 78 digits; keep Decimal arithmetic exact well past that.
_PRECISION = 160


def _to_decimal(value: str | int | float | Decimal) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    return Decimal(str(value).strip())


def to_fixed_point(
    amount: str | int | float | Decimal, decimals: int = FIXED_POINT_DECIMALS
) -> int:
    """Display amount -> on-chain integer (``"1.5"`` -> ``1500000000000000000``).

    Digits past ``decimals`` are truncated toward zero.
    """
    try:
        amt = _to_decimal(amount)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid token amount: {amount!r}") from exc
    if not amt.is_finite():
        raise ValueError(f"Invalid token amount: {amount!r}")
    if amt < 0:
        raise ValueError("Amount must be non-negative")
    try:
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            scaled = amt.scaleb(int(decimals))
            raw = int(scaled.to_integral_value(rounding=ROUND_DOWN))
    except ArithmeticError as exc:
        raise ValueError(f"Token amount out of range: {amount!r}") from exc
    if raw > MAX_UINT256:
        raise ValueError(f"Token amount exceeds uint256: {amount!r}")
    return raw


def from_fixed_point(value: int | str, decimals: int = FIXED_POINT_DECIMALS) -> str:
    """On-chain integer -> canonical display string (no trailing zeros)."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid raw amount: {value!r}")
    try:
        raw = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid raw amount: {value!r}") from exc
    if raw < 0:
        raise ValueError("Amount must be non-negative")

    whole, frac = divmod(raw, 10 ** int(decimals))
    if not frac:
        return str(whole)
    digits = str(frac).zfill(int(decimals)).rstrip("0")
    return f"{whole}.{digits}"


def to_fixed_point_list(
    amounts: Iterable[str | int | float | Decimal],
    decimals: int = FIXED_POINT_DECIMALS,
) -> list[int]:
    return [to_fixed_point(a, decimals) for a in amounts]
