from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from flask import current_app

CENT = Decimal('0.01')


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class TaxBreakdown:
    cgst: Decimal
    sgst: Decimal
    igst: Decimal

    @property
    def total(self) -> Decimal:
        return self.cgst + self.sgst + self.igst


@dataclass(frozen=True)
class TaxPolicy:
    """Flat GST rates applied to an order subtotal"""
    cgst_rate: Decimal = Decimal('0.09')
    sgst_rate: Decimal = Decimal('0.09')
    igst_rate: Decimal = Decimal('0')

    @classmethod
    def from_config(cls) -> "TaxPolicy":
        config = current_app.config
        return cls(
            cgst_rate=Decimal(str(config.get('CGST_RATE', '0.09'))),
            sgst_rate=Decimal(str(config.get('SGST_RATE', '0.09'))),
            igst_rate=Decimal(str(config.get('IGST_RATE', '0'))),
        )

    def apply(self, subtotal: Decimal) -> TaxBreakdown:
        return TaxBreakdown(
            cgst=to_money(subtotal * self.cgst_rate),
            sgst=to_money(subtotal * self.sgst_rate),
            igst=to_money(subtotal * self.igst_rate),
        )
