"""Cushion auction parameterisation.

Pure construction of `MarketParams` for a cushion on either side. The auction
quotes prices as quote-token per payout-token:
- HIGH side sells protocol tokens for reserve, so the quote-per-payout price is
  the band price itself;
- LOW side sells reserve for protocol tokens, so both band prices are inverted
  first (which is where negative price exponents come from).
"""

from __future__ import annotations

from .config import OperatorConfig
from .math import format_auction_prices, invert_price, percent_of
from .types import Asset, MarketParams, RangeSide, Side


def cushion_capacity(side: RangeSide, cushion_factor: int) -> int:
    """Payout capacity offered by a new cushion: a slice of the wall's capacity."""
    return percent_of(side.capacity, cushion_factor)


def cushion_prices(
    side: Side,
    range_side: RangeSide,
    *,
    token: Asset,
    reserve: Asset,
    oracle_decimals: int,
) -> tuple[int, int, int]:
    """Return (formatted_initial, formatted_minimum, scale_adjustment) for a cushion."""
    if side.is_high:
        payout, quote = token, reserve
        initial, minimum = range_side.wall_price, range_side.cushion_price
    else:
        payout, quote = reserve, token
        initial = invert_price(range_side.wall_price, oracle_decimals)
        minimum = invert_price(range_side.cushion_price, oracle_decimals)

    return format_auction_prices(
        initial,
        minimum,
        payout_decimals=payout.decimals,
        quote_decimals=quote.decimals,
        oracle_decimals=oracle_decimals,
    )


def cushion_market_params(
    side: Side,
    range_side: RangeSide,
    *,
    token: Asset,
    reserve: Asset,
    oracle_decimals: int,
    config: OperatorConfig,
    callback: str,
    now: int,
) -> MarketParams:
    payout, quote = (token, reserve) if side.is_high else (reserve, token)
    formatted_initial, formatted_minimum, adjustment = cushion_prices(
        side, range_side, token=token, reserve=reserve, oracle_decimals=oracle_decimals
    )
    return MarketParams(
        payout_token=payout.address,
        quote_token=quote.address,
        callback=callback,
        capacity=cushion_capacity(range_side, config.cushion_factor),
        formatted_initial_price=formatted_initial,
        formatted_minimum_price=formatted_minimum,
        debt_buffer=config.cushion_debt_buffer,
        conclusion=now + config.cushion_duration,
        deposit_interval=config.cushion_deposit_interval,
        scale_adjustment=adjustment,
    )
