"""
Price-spread gate: skip the search when import prices barely move.

    spread % = (max − min) / min × 100
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np

from .optimization_context import InputSample
from .system_parameters import DEFAULT_MIN_PRICE_SPREAD_PERCENT

logger = logging.getLogger(__name__)


def price_spread_percentage(samples: Sequence[InputSample]) -> float:
    prices = np.array([s.import_price for s in samples], dtype=float)
    if prices.size == 0:
        return 0.0
    low, high = float(prices.min()), float(prices.max())
    if low <= 0:
        # relative spread undefined; any movement counts as worth optimising
        return math.inf if high > low else 0.0
    return (high - low) / low * 100


def should_optimize(
    samples: Sequence[InputSample],
    min_price_spread_percent: float = DEFAULT_MIN_PRICE_SPREAD_PERCENT,
) -> bool:
    spread = price_spread_percentage(samples)
    if spread < min_price_spread_percent:
        logger.info(
            "price spread %.1f%% below %.1f%%, skipping optimisation",
            spread,
            min_price_spread_percent,
        )
        return False
    return True
