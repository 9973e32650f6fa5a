"""
Splitter Module

This module handles the cost allocation logic for the bill splitter
application.

Features:
    - Equal splitting among all or a selected subset of participants
    - Unequal splitting by exact money amounts
    - Unequal splitting by percentages or shares (normalized to the total)
    - Per-participant owed amounts across all items
    - Decimal-safe rounding

Data Model:
    Input - participants (list of dicts):
        - participant_id: int or string
        - name: string
        - amount_paid: number

    Input - items (list of dicts, see items.py):
        - price, quantity, tax_rate
        - split_type: equal | unequal-money | unequal-percent | unequal-shares
        - splits: dict of participant_id -> raw value
        - included_participants: list of participant_ids

    Output - allocation (dict keyed by participant_id):
        - Decimal owed by that participant for one item

Leniency:
    Non-numeric split values count as 0 and negative values are clamped to
    0. An item nobody can be charged for allocates 0 to everyone. Nothing
    in this module raises on bad numbers.

Functions:
    calculate_item_split: Allocate a known item total among participants.
    allocate_item: Compute an item's total and allocate it.
    calculate_amounts_owed: Total owed per participant across items.
    recalculate_participants: Participants with amount_owed recomputed.
"""

from decimal import Decimal

from items import (
    SPLIT_EQUAL,
    SPLIT_MONEY,
    WEIGHTED_SPLIT_TYPES,
    calculate_item_total,
)
from participants import build_participant_lookup, participant_key
from utils import ZERO, round2, to_non_negative_decimal


def _resolve_id(raw_id, lookup: dict):
    """Return the participant's own id for a split key, or the key itself if unknown."""
    return lookup.get(participant_key(raw_id), raw_id)


def _equal_split(item: dict, item_total: Decimal, participants: list[dict], lookup: dict) -> dict:
    """
    Split the total evenly over the included participants.

    An empty included_participants list means everyone shares the item.
    Duplicate ids in the list are counted once.
    """
    included = item.get("included_participants") or []

    if included:
        relevant = []
        seen = set()
        for raw_id in included:
            key = participant_key(raw_id)
            if key in seen:
                continue
            seen.add(key)
            relevant.append(_resolve_id(raw_id, lookup))
    else:
        relevant = [p["participant_id"] for p in participants]

    # Guard the divisor so an empty bill yields zero instead of failing
    divisor = Decimal(len(relevant) or 1)
    share = item_total / divisor

    return {participant_id: share for participant_id in relevant}


def _money_split(item: dict, lookup: dict) -> dict:
    """Use each entered amount as-is; the sum may differ from the item total."""
    return {
        _resolve_id(raw_id, lookup): to_non_negative_decimal(value)
        for raw_id, value in (item.get("splits") or {}).items()
    }


def _weighted_split(item: dict, item_total: Decimal, lookup: dict) -> dict:
    """
    Distribute the full total proportionally to percentages or shares.

    Weights are normalized against their own sum, not against 100, so
    percentages adding up to 120 (or 70) still distribute exactly the
    item total.
    """
    weights = {
        _resolve_id(raw_id, lookup): to_non_negative_decimal(value)
        for raw_id, value in (item.get("splits") or {}).items()
    }
    denominator = sum(weights.values(), ZERO)

    if denominator == 0:
        return {participant_id: ZERO for participant_id in weights}

    return {
        participant_id: item_total * weight / denominator
        for participant_id, weight in weights.items()
    }


def calculate_item_split(item: dict, item_total, participants: list[dict]) -> dict:
    """
    Allocate an item's total among participants according to its split type.

    Policies:
        - equal: total / number of relevant participants each
        - unequal-money: entered amounts used directly (no normalization)
        - unequal-percent: total * percent / sum of percents
        - unequal-shares: total * shares / sum of shares

    Args:
        item: Item dict (split_type, splits, included_participants).
        item_total: The item's total, as computed by items.calculate_item_total.
        participants: List of participant dicts with participant_id.

    Returns:
        dict: participant_id -> unrounded Decimal owed for this item. Every
              participant is present (0 if not involved); split keys that
              match no participant are kept under their own key.

    Notes:
        - Pure function: inputs are never modified
        - Unknown split types allocate nothing
    """
    item_total = item_total if isinstance(item_total, Decimal) else to_non_negative_decimal(item_total)
    lookup = build_participant_lookup(participants)
    split_type = item.get("split_type") or SPLIT_EQUAL

    if split_type == SPLIT_EQUAL:
        shares = _equal_split(item, item_total, participants, lookup)
    elif split_type == SPLIT_MONEY:
        shares = _money_split(item, lookup)
    elif split_type in WEIGHTED_SPLIT_TYPES:
        shares = _weighted_split(item, item_total, lookup)
    else:
        shares = {}

    allocation = {p["participant_id"]: ZERO for p in participants}
    allocation.update(shares)
    return allocation


def allocate_item(item: dict, participants: list[dict]) -> dict:
    """
    Compute an item's total and allocate it among participants.

    Args:
        item: Item dict (see items.py).
        participants: List of participant dicts.

    Returns:
        dict: participant_id -> unrounded Decimal owed for this item.
    """
    return calculate_item_split(item, calculate_item_total(item), participants)


def calculate_amounts_owed(items: list[dict], participants: list[dict]) -> dict:
    """
    Calculate the total amount each participant owes across all items.

    Each per-item share is rounded to 2 decimals before it is added, so the
    cents lost or gained by rounding accumulate item by item (three equal
    shares of 110.00 add up to 110.01).

    Args:
        items: List of item dicts.
        participants: List of participant dicts.

    Returns:
        dict: participant_id -> Decimal total owed (2 decimal places).
              Shares assigned to unknown ids are dropped.
    """
    owed = {p["participant_id"]: ZERO for p in participants}

    for item in items:
        allocation = allocate_item(item, participants)
        for participant_id, share in allocation.items():
            if participant_id in owed:
                owed[participant_id] += round2(share)

    return {participant_id: round2(amount) for participant_id, amount in owed.items()}


def recalculate_participants(items: list[dict], participants: list[dict]) -> list[dict]:
    """
    Return copies of the participants with amount_owed recomputed from items.

    Any amount_owed already present on the input is ignored; the owed amount
    is always derived from the current items.

    Args:
        items: List of item dicts.
        participants: List of participant dicts.

    Returns:
        list[dict]: New participant dicts, in input order, with amount_owed
                    set to a Decimal.
    """
    owed = calculate_amounts_owed(items, participants)
    return [
        {**p, "amount_owed": owed[p["participant_id"]]}
        for p in participants
    ]
