"""
Pricing Module - Quantitative cost estimate (DQE) from unit prices.
"""

from .dqe import DQE, DQELine, PriceBook, build_dqe, load_price_book

__all__ = [
    "DQE",
    "DQELine",
    "PriceBook",
    "build_dqe",
    "load_price_book",
]
