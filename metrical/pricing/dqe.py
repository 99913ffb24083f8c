"""
DQE (Devis Quantitatif Estimatif) - Priced quantity estimate.

Turns an EstimateReport into priced lines using a unit price book.
Lines without a price are kept, unpriced, so the estimate shows what
still needs a quotation.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .. import RULES_DIR
from ..estimate import EstimateReport
from ..validation import safe_number

logger = logging.getLogger(__name__)

DEFAULT_PRICES_PATH = RULES_DIR / "prices.yaml"

# Price keys and their units
PRICE_UNITS = {
    "cement_bag": "bag",
    "sand_m3": "m³",
    "gravel_m3": "m³",
    "water_l": "L",
    "block": "nos",
    "steel_kg": "kg",
    "waterproofing_kg": "kg",
}


@dataclass
class PriceBook:
    """Unit prices by price key."""
    prices: Dict[str, float] = field(default_factory=dict)
    currency: str = "EUR"

    def price(self, key: str) -> Optional[float]:
        return self.prices.get(key)


def load_price_book(path: Optional[Path] = None) -> PriceBook:
    """Load unit prices from YAML; an unreadable file gives an empty book."""
    path = Path(path) if path else DEFAULT_PRICES_PATH
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load price book {path}: {e}")
        return PriceBook()

    if not isinstance(data, dict):
        logger.warning(f"Ignoring price book {path}: expected a mapping")
        return PriceBook()

    prices = {
        str(key): safe_number(value)
        for key, value in (data.get("prices") or {}).items()
        if key in PRICE_UNITS
    }
    return PriceBook(prices=prices, currency=str(data.get("currency") or "EUR"))


@dataclass
class DQELine:
    """One priced line of the estimate."""
    section: str
    description: str
    price_key: str
    quantity: float
    unit: str
    unit_price: Optional[float] = None

    @property
    def amount(self) -> Optional[float]:
        if self.unit_price is None:
            return None
        return self.quantity * self.unit_price

    def to_dict(self) -> dict:
        return {
            "section": self.section,
            "description": self.description,
            "price_key": self.price_key,
            "quantity": self.quantity,
            "unit": self.unit,
            "unit_price": self.unit_price,
            "amount": self.amount,
        }


@dataclass
class DQE:
    """Priced estimate."""
    lines: List[DQELine] = field(default_factory=list)
    currency: str = "EUR"

    @property
    def total(self) -> float:
        return sum(line.amount for line in self.lines if line.amount is not None)

    @property
    def unpriced(self) -> List[DQELine]:
        return [line for line in self.lines if line.unit_price is None]

    def section_totals(self) -> Dict[str, float]:
        totals: Dict[str, float] = {}
        for line in self.lines:
            if line.amount is not None:
                totals[line.section] = totals.get(line.section, 0.0) + line.amount
        return totals

    def to_dict(self) -> dict:
        return {
            "currency": self.currency,
            "lines": [line.to_dict() for line in self.lines],
            "section_totals": self.section_totals(),
            "total": self.total,
            "unpriced_lines": len(self.unpriced),
        }


def _quantities(report: EstimateReport) -> List[tuple]:
    """(section, description, price_key, quantity) for every material line."""
    rows = []

    materials = report.concrete.total_materials
    rows += [
        ("Béton", "Ciment (sacs de 50 kg)", "cement_bag", materials.cement_bags),
        ("Béton", "Sable", "sand_m3", materials.sand_m3),
        ("Béton", "Gravier", "gravel_m3", materials.gravel_m3),
        ("Béton", "Eau", "water_l", materials.water_l),
    ]

    if report.masonry is not None:
        rows.append(("Maçonnerie", "Blocs", "block", report.masonry.blocks_needed))
        if report.masonry.mortar is not None:
            rows += [
                ("Maçonnerie", "Ciment mortier (sacs de 50 kg)", "cement_bag",
                 report.masonry.mortar.cement_bags),
                ("Maçonnerie", "Sable mortier", "sand_m3", report.masonry.mortar.sand_m3),
            ]

    if report.plaster is not None and report.plaster.has_result:
        rows += [
            ("Enduit", "Ciment (sacs de 50 kg)", "cement_bag",
             report.plaster.materials.cement_bags),
            ("Enduit", "Sable", "sand_m3", report.plaster.materials.sand_m3),
        ]

    if report.waterproofing is not None and report.waterproofing.has_result:
        rows.append(("Étanchéité", "Produit d'étanchéité", "waterproofing_kg",
                     report.waterproofing.total_product_kg))

    for dia, entry in report.steel.by_diameter.items():
        rows.append(("Aciers", f"Acier HA{dia}", "steel_kg", entry.weight_kg))

    return rows


def build_dqe(report: EstimateReport, price_book: Optional[PriceBook] = None) -> DQE:
    """
    Price the quantities of an estimate.

    Args:
        report: EstimateReport from run_estimate
        price_book: Unit prices (packaged illustrative prices if omitted)

    Returns:
        DQE with one line per non-zero quantity
    """
    price_book = price_book if price_book is not None else load_price_book()
    dqe = DQE(currency=price_book.currency)

    for section, description, key, quantity in _quantities(report):
        if quantity <= 0:
            continue
        dqe.lines.append(DQELine(
            section=section,
            description=description,
            price_key=key,
            quantity=quantity,
            unit=PRICE_UNITS[key],
            unit_price=price_book.price(key),
        ))

    if dqe.unpriced:
        logger.warning(f"{len(dqe.unpriced)} DQE lines have no unit price")

    return dqe
