"""
pricing.py — Pricing Policy for Custom Painting Orders

Prices are in Toman. The base price depends only on the canvas size; a fixed
rush fee is added for express orders. The function is pure, so the wizard
calls it on every change to show a live price.
"""

from .domain import CanvasSize, PriceBreakdown
from .errors import InvalidInput

BASE_PRICES = {
    CanvasSize.SMALL: 500_000,
    CanvasSize.MEDIUM: 800_000,
    CanvasSize.LARGE: 1_200_000,
    CanvasSize.EXTRA_LARGE: 1_800_000,
}

RUSH_FEE = 300_000


def compute_price(canvas_size, is_rush: bool) -> PriceBreakdown:
    """
    Computes the price of an order.

    Args:
        canvas_size (CanvasSize | str): One of the four canvas sizes, as enum or value (e.g. "50x70").
        is_rush (bool): Whether express production was requested.
    Returns:
        PriceBreakdown: base price, rush fee and their sum.
    Raises:
        InvalidInput: If canvas_size is not one of the enumerated sizes.
    """
    try:
        size = CanvasSize(canvas_size)
    except ValueError:
        raise InvalidInput(f"Unknown canvas size: {canvas_size!r}")

    base_price = BASE_PRICES[size]
    rush_fee = RUSH_FEE if is_rush else 0
    return PriceBreakdown(base_price=base_price, rush_fee=rush_fee, total_price=base_price + rush_fee)
