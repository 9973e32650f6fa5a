"""
Settlement Module

This module handles the settlement calculations for the bill splitter
application.

Features:
    - Convert paid/owed amounts into net balances
    - Minimize number of transactions using greedy algorithm
    - Handle rounding safely
    - Replay transactions to check what is left unsettled

Data Model:
    Input - participants (list of dicts):
        - name: string
        - amount_paid: number
        - amount_owed: number (as computed by splitter.py)

    Output - list of settlement transactions:
        - from: string (debtor who pays)
        - to: string (creditor who receives)
        - amount: string with 2 decimal places, e.g. "50.00"

Functions:
    calculate_net_balances: Paid minus owed per participant.
    compute_settlement: Convert balances into minimal settlement transactions.
    apply_settlement: Net balances left after applying transactions.
"""

from decimal import Decimal

from utils import ZERO, format_amount, to_decimal

# Balances closer to zero than this are treated as settled
SETTLED_TOLERANCE = Decimal("0.0001")


def _net_balance(participant: dict) -> Decimal:
    return to_decimal(participant.get("amount_paid")) - to_decimal(participant.get("amount_owed"))


def calculate_net_balances(participants: list[dict]) -> dict:
    """
    Calculate each participant's net balance.

    Positive means the participant is owed money (creditor), negative means
    they owe money (debtor). Participants sharing a name are merged.

    Args:
        participants: List of dicts with name, amount_paid, amount_owed.

    Returns:
        dict: name -> Decimal (amount_paid - amount_owed).
    """
    balances = {}
    for participant in participants:
        name = participant.get("name")
        balances[name] = balances.get(name, ZERO) + _net_balance(participant)
    return balances


def compute_settlement(participants: list[dict]) -> list[dict]:
    """
    Convert net balances into minimal settlement transactions.

    Uses a greedy algorithm:
        1. net_balance = amount_paid - amount_owed for each participant
        2. Debtors (net < 0) sorted most negative first, creditors (net > 0)
           sorted largest first; balances within 0.0001 of zero are skipped
        3. Match the current debtor with the current creditor:
           - Transfer the minimum of the debt and the credit
           - Update both remaining balances
           - Move past whichever side is now settled (possibly both)
        4. Stop when either list runs out

    Each step settles at least one party, so n unsettled participants
    produce at most n - 1 transactions.

    Args:
        participants: List of dicts with name, amount_paid, amount_owed.

    Returns:
        list[dict]: Transactions with "from", "to" and "amount" (2-place string).

    Notes:
        - Does NOT modify input participants
        - If total paid differs from total owed, the leftover balance stays
          unsettled on one side; no error is raised
        - Nobody paid (no creditors) gives an empty list
    """
    debtors = []    # [name, net_balance] pairs, net_balance < 0
    creditors = []  # [name, net_balance] pairs, net_balance > 0

    for participant in participants:
        net = _net_balance(participant)
        if abs(net) < SETTLED_TOLERANCE:
            continue
        if net < 0:
            debtors.append([participant.get("name"), net])
        else:
            creditors.append([participant.get("name"), net])

    debtors.sort(key=lambda entry: entry[1])
    creditors.sort(key=lambda entry: entry[1], reverse=True)

    settlements = []
    d = 0
    c = 0

    while d < len(debtors) and c < len(creditors):
        debtor = debtors[d]
        creditor = creditors[c]

        amount = min(abs(debtor[1]), creditor[1])

        settlements.append({
            "from": debtor[0],
            "to": creditor[0],
            "amount": format_amount(amount)
        })

        debtor[1] += amount
        creditor[1] -= amount

        if abs(debtor[1]) < SETTLED_TOLERANCE:
            d += 1
        if creditor[1] < SETTLED_TOLERANCE:
            c += 1

    return settlements


def apply_settlement(participants: list[dict], settlements: list[dict]) -> dict:
    """
    Replay settlement transactions on top of the participants' net balances.

    A payer's balance goes up by the amount they send, a receiver's goes down.
    When total paid equals total owed, every result is within a cent of zero.

    Args:
        participants: List of dicts with name, amount_paid, amount_owed.
        settlements: Output of compute_settlement().

    Returns:
        dict: name -> Decimal balance remaining after the transfers.
    """
    balances = calculate_net_balances(participants)
    for transaction in settlements:
        amount = to_decimal(transaction["amount"])
        balances[transaction["from"]] = balances.get(transaction["from"], ZERO) + amount
        balances[transaction["to"]] = balances.get(transaction["to"], ZERO) - amount
    return balances
