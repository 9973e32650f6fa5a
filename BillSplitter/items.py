"""
Items Module

This module defines bill line items and how their totals are computed for
the bill splitter application.

Features:
    - Item model with split policy settings
    - Subtotal / tax / total calculation with per-stage rounding
    - Tolerant construction from browser bill-state payloads

Data Model:
    Item (dict form, as consumed by splitter.py and analytics.py):
        - item_id: int or string
        - name: string
        - price: number (>= 0), price of a single unit
        - quantity: number (> 0, default 1)
        - tax_rate: number, percentage (e.g. 8.1 for 8.1%)
        - split_type: one of SPLIT_TYPES (default "equal")
        - splits: dict of participant_id -> raw user-entered value
        - included_participants: list of participant_ids (equal split only)

Item total:
    subtotal = round2(price * quantity)
    tax      = round2(subtotal * tax_rate / 100)
    total    = round2(subtotal + tax)

Functions:
    calculate_item_breakdown: Subtotal, tax and total of an item.
    calculate_item_total: Total of an item.
"""

from decimal import Decimal
from typing import Optional

from utils import ONE_HUNDRED, pick, round2, to_decimal


SPLIT_EQUAL = "equal"
SPLIT_MONEY = "unequal-money"
SPLIT_PERCENT = "unequal-percent"
SPLIT_SHARES = "unequal-shares"

# Valid split policies
SPLIT_TYPES = (SPLIT_EQUAL, SPLIT_MONEY, SPLIT_PERCENT, SPLIT_SHARES)

# Split policies whose entries are weights normalized against their sum
WEIGHTED_SPLIT_TYPES = {SPLIT_PERCENT, SPLIT_SHARES}


class Item:
    """
    Represents a single line item on a bill.

    Attributes:
        item_id (int | str): Unique identifier.
        name (str): Free-text description (may be empty).
        price (float): Unit price.
        quantity (float): Number of units (default 1).
        tax_rate (float): Tax percentage applied to the subtotal.
        split_type (str): One of SPLIT_TYPES.
        splits (dict): participant_id -> raw split value.
        included_participants (list): participant_ids sharing an equal split.
    """

    def __init__(
        self,
        item_id,
        price: float = 0,
        quantity: float = 1,
        tax_rate: float = 0,
        split_type: str = SPLIT_EQUAL,
        splits: Optional[dict] = None,
        included_participants: Optional[list] = None,
        name: str = ""
    ):
        self.item_id = item_id
        self.name = name
        self.price = price
        self.quantity = quantity
        self.tax_rate = tax_rate
        self.split_type = split_type
        self.splits = dict(splits or {})
        self.included_participants = list(included_participants or [])

    def to_dict(self) -> dict:
        """Convert item to the dictionary form used by the calculation modules."""
        return {
            "item_id": self.item_id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "tax_rate": self.tax_rate,
            "split_type": self.split_type,
            "splits": dict(self.splits),
            "included_participants": list(self.included_participants)
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Item":
        """
        Create an Item from a dictionary.

        Missing keys fall back to defaults, and the camelCase keys of the
        browser payloads (taxRate, splitType, includedParticipants, qty)
        are accepted alongside snake_case ones.
        """
        quantity = pick(data, "quantity", "qty")
        return cls(
            item_id=pick(data, "item_id", "id"),
            name=data.get("name") or "",
            price=pick(data, "price", default=0),
            quantity=1 if quantity is None else quantity,
            tax_rate=pick(data, "tax_rate", "taxRate", default=0),
            split_type=pick(data, "split_type", "splitType") or SPLIT_EQUAL,
            splits=data.get("splits") or {},
            included_participants=pick(
                data, "included_participants", "includedParticipants"
            ) or []
        )

    def __repr__(self) -> str:
        """Return string representation of item."""
        return (
            f"Item(id={self.item_id!r}, price={self.price}, qty={self.quantity}, "
            f"tax_rate={self.tax_rate}, split_type='{self.split_type}')"
        )


def _item_quantity(item: dict) -> Decimal:
    # A missing quantity means a single unit; anything else present is parsed leniently.
    quantity = item.get("quantity")
    if quantity is None:
        return Decimal("1")
    return to_decimal(quantity)


def calculate_item_breakdown(item: dict) -> dict:
    """
    Calculate subtotal, tax and total for an item.

    Each stage is rounded half-up to cents before it feeds the next one.
    Non-numeric price or tax rate count as 0.

    Args:
        item: Item dict with price, quantity and tax_rate.

    Returns:
        dict: Decimal values under "subtotal", "tax" and "total".

    Example:
        price=9.99, quantity=2.5, tax_rate=8.1
        subtotal = 24.98 (24.975 rounded), tax = 2.02, total = 27.00
    """
    price = to_decimal(item.get("price"))
    tax_rate = to_decimal(item.get("tax_rate"))

    subtotal = round2(price * _item_quantity(item))
    tax = round2(subtotal * tax_rate / ONE_HUNDRED)
    total = round2(subtotal + tax)

    return {
        "subtotal": subtotal,
        "tax": tax,
        "total": total
    }


def calculate_item_total(item: dict) -> Decimal:
    """Return the rounded total (subtotal plus tax) of an item."""
    return calculate_item_breakdown(item)["total"]
