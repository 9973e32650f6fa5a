"""
Analytics Module

This module provides the bill summary, imbalance warnings and
per-participant explanations for the bill splitter application.

Features:
    - Bill total and per-item totals
    - Total paid vs. total owed
    - Per-item split discrepancies (allocated minus item total)
    - Smart warnings for imbalances the calculation tolerates silently
    - Per-participant breakdown of owed amounts by item

Data Model:
    Input - items: list of item dicts (see items.py)
    Input - participants: list of participant dicts (see participants.py)

    Output - generate_bill_summary() dict containing:
        - summary: dict with bill_total, total_paid, total_owed,
                   item_totals, split_discrepancies
        - warnings: list of warning strings

Functions:
    generate_bill_summary: Summarize a bill and flag imbalances.
    explain_participant_share: Get detailed breakdown for one participant.
    explain_all_participants: Get detailed breakdown for all participants.
"""

from decimal import Decimal

from items import SPLIT_EQUAL, SPLIT_MONEY, SPLIT_PERCENT, WEIGHTED_SPLIT_TYPES, calculate_item_total
from participants import participant_key
from splitter import calculate_amounts_owed, calculate_item_split
from utils import ONE_HUNDRED, ZERO, format_currency, round2, to_decimal, to_non_negative_decimal


def _item_label(item: dict) -> str:
    name = (item.get("name") or "").strip()
    return f"'{name}'" if name else f"item {item.get('item_id')}"


def _item_warnings(item: dict, item_total: Decimal, allocated: Decimal, known: set, symbol: str) -> list[str]:
    """Rule-based warnings for a single item; only weights of known participants count."""
    warnings = []
    label = _item_label(item)
    split_type = item.get("split_type") or SPLIT_EQUAL

    if split_type == SPLIT_MONEY:
        difference = allocated - item_total
        if difference > 0:
            warnings.append(
                f"Warning: splits for {label} exceed the item total by "
                f"{format_currency(difference, symbol)} "
                f"({format_currency(allocated, symbol)} of {format_currency(item_total, symbol)})"
            )
        elif difference < 0:
            warnings.append(
                f"Warning: splits for {label} leave {format_currency(-difference, symbol)} unallocated "
                f"({format_currency(allocated, symbol)} of {format_currency(item_total, symbol)})"
            )

    elif split_type in WEIGHTED_SPLIT_TYPES:
        weight_sum = sum(
            (
                to_non_negative_decimal(v)
                for k, v in (item.get("splits") or {}).items()
                if participant_key(k) in known
            ),
            ZERO
        )
        if weight_sum == 0 and item_total > 0:
            warnings.append(
                f"Warning: {label} has no {'percentages' if split_type == SPLIT_PERCENT else 'shares'} "
                f"entered; {format_currency(item_total, symbol)} is not allocated"
            )
        elif split_type == SPLIT_PERCENT and weight_sum != ONE_HUNDRED and weight_sum > 0:
            warnings.append(
                f"Warning: percentages for {label} add up to {weight_sum.normalize():f}%; "
                f"shares were scaled to the item total"
            )

    elif split_type == SPLIT_EQUAL:
        if allocated == 0 and item_total > 0:
            warnings.append(
                f"Warning: nobody shares {label}; {format_currency(item_total, symbol)} is not allocated"
            )

    else:
        warnings.append(f"Warning: {label} has an unknown split type '{split_type}'")

    return warnings


def generate_bill_summary(items: list[dict], participants: list[dict], symbol: str = "$") -> dict:
    """
    Generate a bill summary and smart warnings.

    Summary computed:
        - bill_total: sum of item totals
        - total_paid: sum of amount_paid over participants
        - total_owed: sum of recomputed amount_owed over participants
        - item_totals: item_id -> item total
        - split_discrepancies: item_id -> allocated minus item total,
          only for items where they differ; shares on split or included
          ids that match no participant do not count as allocated

    Warnings generated (rule-based):
        - If total paid differs from the bill total
        - If unequal-money splits over- or under-allocate an item
        - If a percent/shares item has no weights entered
        - If percentages do not add up to 100 (they are normalized)
        - If an equal item has nobody to share it

    Args:
        items: List of item dicts.
        participants: List of participant dicts.
        symbol: Currency symbol used in warning messages.

    Returns:
        dict: Contains two keys:
            - summary: dict described above (Decimal values, 2 places)
            - warnings: list of warning strings

    Notes:
        - Never raises on malformed numbers; they count as 0
        - Rounding noise from equal splits is not reported
    """
    bill_total = ZERO
    item_totals = {}
    split_discrepancies = {}
    warnings = []

    known = {participant_key(p["participant_id"]) for p in participants}

    for item in items:
        item_total = calculate_item_total(item)
        allocation = calculate_item_split(item, item_total, participants)
        # shares on ids that match no participant are never owed by anyone
        allocated = round2(sum(
            (share for pid, share in allocation.items() if participant_key(pid) in known),
            ZERO
        ))

        bill_total += item_total
        item_totals[item.get("item_id")] = item_total

        discrepancy = allocated - item_total
        if discrepancy != 0:
            split_discrepancies[item.get("item_id")] = discrepancy

        warnings.extend(_item_warnings(item, item_total, allocated, known, symbol))

    owed = calculate_amounts_owed(items, participants)
    total_owed = round2(sum(owed.values(), ZERO))
    total_paid = round2(sum((to_decimal(p.get("amount_paid")) for p in participants), ZERO))
    bill_total = round2(bill_total)

    # Rule: payments should cover the bill exactly
    if total_paid < bill_total:
        warnings.append(
            f"Warning: total paid ({format_currency(total_paid, symbol)}) is "
            f"{format_currency(bill_total - total_paid, symbol)} short of the bill total "
            f"({format_currency(bill_total, symbol)})"
        )
    elif total_paid > bill_total:
        warnings.append(
            f"Warning: total paid ({format_currency(total_paid, symbol)}) exceeds the bill total "
            f"({format_currency(bill_total, symbol)}) by {format_currency(total_paid - bill_total, symbol)}"
        )

    summary = {
        "bill_total": bill_total,
        "total_paid": total_paid,
        "total_owed": total_owed,
        "item_totals": item_totals,
        "split_discrepancies": split_discrepancies
    }

    return {
        "summary": summary,
        "warnings": warnings
    }


def explain_participant_share(participant_id, items: list[dict], participants: list[dict]) -> dict:
    """
    Explain how a participant's owed amount is made up.

    For each item the participant has a non-zero share in, lists the item,
    its split type, its total and the participant's rounded share.

    Args:
        participant_id: ID of the participant to explain.
        items: List of item dicts.
        participants: List of participant dicts.

    Returns:
        dict: Contains:
            - participant_id, name
            - item_contributions: list of dicts with item_id, name,
              split_type, item_total, share
            - total_owed: sum of the rounded shares
            - total_paid: amount_paid of the participant
            - net_balance: total_paid - total_owed
    """
    key = participant_key(participant_id)
    participant = next(
        (p for p in participants if participant_key(p["participant_id"]) == key),
        {}
    )

    contributions = []
    total_owed = ZERO

    for item in items:
        item_total = calculate_item_total(item)
        allocation = calculate_item_split(item, item_total, participants)
        share = round2(allocation.get(participant.get("participant_id", participant_id), ZERO))
        if share == 0:
            continue

        total_owed += share
        contributions.append({
            "item_id": item.get("item_id"),
            "name": item.get("name") or "",
            "split_type": item.get("split_type") or SPLIT_EQUAL,
            "item_total": item_total,
            "share": share
        })

    total_paid = round2(to_decimal(participant.get("amount_paid")))

    return {
        "participant_id": participant.get("participant_id", participant_id),
        "name": participant.get("name") or "",
        "item_contributions": contributions,
        "total_owed": total_owed,
        "total_paid": total_paid,
        "net_balance": total_paid - total_owed
    }


def explain_all_participants(items: list[dict], participants: list[dict]) -> list[dict]:
    """
    Generate explanations for all participants.

    Args:
        items: List of item dicts.
        participants: List of participant dicts.

    Returns:
        list[dict]: One explanation per participant, in input order.
    """
    return [
        explain_participant_share(p["participant_id"], items, participants)
        for p in participants
    ]
