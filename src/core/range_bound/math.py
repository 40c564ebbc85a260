"""Pure fixed-point arithmetic for range-bound operations.

Every function is stateless and operates on plain Python ints.

Rounding is explicit: `mul_div` floors (Python `//`), while `trunc_div` rounds
toward zero. The auction scale adjustment halves a *signed* price exponent and
must use `trunc_div`; flooring would shift every negative exponent by one digit
and misprice the auction by a factor of ten.
"""

from __future__ import annotations

from .errors import InvalidParamsError

# Domain constants
ONE_HUNDRED_PERCENT: int = 10_000
ONE_PERCENT: int = 100
DEBT_BUFFER_SCALE: int = 100_000  # 3-decimal percentage used by the auctioneer
MIN_DEBT_BUFFER: int = 10_000
NO_MARKET: int = 2**256 - 1
AUCTION_PRICE_DECIMALS: int = 36
MAX_TOKEN_DECIMALS: int = 38

HOUR: int = 3600
DAY: int = 24 * HOUR


# -- Basic helpers -----------------------------------------------------------

def mul_div(x: int, y: int, denominator: int) -> int:
    """``floor(x * y / denominator)`` with full precision."""
    if denominator == 0:
        raise InvalidParamsError("mul_div: zero denominator")
    return (x * y) // denominator


def trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    if b == 0:
        raise InvalidParamsError("trunc_div: zero denominator")
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def pow10(exponent: int) -> int:
    """``10**exponent`` for a non-negative exponent."""
    if exponent < 0:
        raise InvalidParamsError(f"negative scale exponent: {exponent}")
    return 10**exponent


# -- Spreads -------------------------------------------------------------------

def apply_spread_down(price: int, spread: int) -> int:
    """``price * (1 - spread)`` in basis points."""
    return (price * (ONE_HUNDRED_PERCENT - spread)) // ONE_HUNDRED_PERCENT


def apply_spread_up(price: int, spread: int) -> int:
    """``price * (1 + spread)`` in basis points."""
    return (price * (ONE_HUNDRED_PERCENT + spread)) // ONE_HUNDRED_PERCENT


def percent_of(amount: int, factor: int) -> int:
    """``amount * factor / 100%``."""
    return (amount * factor) // ONE_HUNDRED_PERCENT


# -- Price exponents -----------------------------------------------------------

def price_decimals(price: int, oracle_decimals: int) -> int:
    """Decimal exponent of *price* relative to the oracle scale.

    A price of ``12.5`` at 18 decimals (``12_500_000_000_000_000_000``) has 20
    digits, so its exponent is ``19 - 18 = 1``. A price below one unit yields a
    negative exponent.
    """
    if price < 0:
        raise InvalidParamsError(f"price must be non-negative: {price}")
    digits = len(str(price)) - 1 if price > 0 else 0
    return digits - oracle_decimals


def scale_adjustment(payout_decimals: int, quote_decimals: int, price_exponent: int) -> int:
    """Auction scale adjustment for a quote-per-payout price.

    The payout price exponent is taken as zero and the quote price exponent as
    *price_exponent*, so the adjustment is
    ``payout - quote - (0 - price_exponent) / 2`` with truncating division.
    """
    return payout_decimals - quote_decimals + trunc_div(price_exponent, 2)


def auction_scales(
    payout_decimals: int,
    quote_decimals: int,
    oracle_decimals: int,
    price_exponent: int,
) -> tuple[int, int, int]:
    """Return ``(scale_adjustment, oracle_scale, auction_scale)``.

    A formatted auction price is ``price * auction_scale // oracle_scale``.
    """
    adjustment = scale_adjustment(payout_decimals, quote_decimals, price_exponent)
    oracle_scale = pow10(oracle_decimals - price_exponent)
    auction_scale = pow10(
        AUCTION_PRICE_DECIMALS + adjustment + quote_decimals - payout_decimals - price_exponent
    )
    return adjustment, oracle_scale, auction_scale


def format_auction_prices(
    initial_price: int,
    minimum_price: int,
    *,
    payout_decimals: int,
    quote_decimals: int,
    oracle_decimals: int,
) -> tuple[int, int, int]:
    """Convert oracle-scaled quote-per-payout prices into auction format.

    Returns ``(formatted_initial, formatted_minimum, scale_adjustment)``. The
    exponent is derived from *minimum_price* (the cushion), matching the price
    the auction decays toward.
    """
    if initial_price <= 0 or minimum_price <= 0:
        raise InvalidParamsError("auction prices must be positive")
    exponent = price_decimals(minimum_price, oracle_decimals)
    adjustment, oracle_scale, auction_scale = auction_scales(
        payout_decimals, quote_decimals, oracle_decimals, exponent,
    )
    return (
        mul_div(initial_price, auction_scale, oracle_scale),
        mul_div(minimum_price, auction_scale, oracle_scale),
        adjustment,
    )


def invert_price(price: int, oracle_decimals: int) -> int:
    """Reciprocal of an oracle-scaled price at the same scale."""
    if price <= 0:
        raise InvalidParamsError(f"cannot invert non-positive price: {price}")
    return pow10(2 * oracle_decimals) // price


# -- Conversions at a wall price ---------------------------------------------

def token_to_reserve(
    amount: int, price: int, token_decimals: int, reserve_decimals: int, oracle_decimals: int,
) -> int:
    """Reserve paid out for *amount* tokens at *price* (reserve per token)."""
    return mul_div(amount, pow10(reserve_decimals) * price, pow10(token_decimals) * pow10(oracle_decimals))


def reserve_to_token(
    amount: int, price: int, token_decimals: int, reserve_decimals: int, oracle_decimals: int,
) -> int:
    """Tokens paid out for *amount* reserve at *price* (reserve per token)."""
    if price <= 0:
        raise InvalidParamsError(f"wall price must be positive: {price}")
    return mul_div(amount, pow10(token_decimals) * pow10(oracle_decimals), pow10(reserve_decimals) * price)


# -- Capacity --------------------------------------------------------------------

def full_capacity_low(reserve_balance: int, reserve_factor: int) -> int:
    """Low-wall capacity in reserve units."""
    return percent_of(reserve_balance, reserve_factor)


def full_capacity_high(
    reserve_balance: int,
    reserve_factor: int,
    high_wall_price: int,
    wall_spread: int,
    cushion_spread: int,
    *,
    token_decimals: int,
    reserve_decimals: int,
    oracle_decimals: int,
) -> int:
    """High-wall capacity in token units.

    The reserve-denominated capacity is converted to tokens at the high wall and
    scaled up by ``1 + wall_spread + cushion_spread`` so that the token side can
    absorb the same reserve value over the full band.
    """
    reserve_capacity = full_capacity_low(reserve_balance, reserve_factor)
    tokens = reserve_to_token(
        reserve_capacity, high_wall_price, token_decimals, reserve_decimals, oracle_decimals,
    )
    return (tokens * (ONE_HUNDRED_PERCENT + wall_spread + cushion_spread)) // ONE_HUNDRED_PERCENT
