"""
Participants Module

This module defines the people sharing a bill for the bill splitter
application.

Features:
    - Participant model (who paid what, who owes what)
    - Participant id normalization for split lookups
    - Tolerant construction from browser bill-state payloads

Data Model:
    Participant (dict form, as consumed by splitter.py and settlement.py):
        - participant_id: int or string (opaque)
        - name: string
        - amount_paid: number (>= 0)
        - amount_owed: number, derived by splitter.py; never user-set

Id matching:
    JSON object keys are always strings while participant ids may be
    integers, so {1: 60} and {"1": 60} must address the same participant.
    All lookups compare ids through participant_key().

Functions:
    participant_key: Normalized lookup key for a participant id.
    build_participant_lookup: Map normalized keys back to original ids.
"""

from typing import Optional

from utils import pick


class Participant:
    """
    Represents a participant in a bill.

    Attributes:
        participant_id (int | str): Unique identifier.
        name (str): Display name used in settlement transactions.
        amount_paid (float): Amount this participant paid towards the bill.
        amount_owed (float): Amount this participant owes (computed).
    """

    def __init__(
        self,
        participant_id,
        name: str,
        amount_paid: float = 0,
        amount_owed: Optional[float] = 0
    ):
        self.participant_id = participant_id
        self.name = name
        self.amount_paid = amount_paid
        self.amount_owed = amount_owed or 0

    def to_dict(self) -> dict:
        """Convert participant to the dictionary form used by the calculation modules."""
        return {
            "participant_id": self.participant_id,
            "name": self.name,
            "amount_paid": self.amount_paid,
            "amount_owed": self.amount_owed
        }

    def __repr__(self) -> str:
        """Return string representation of participant."""
        return (
            f"Participant(name='{self.name}', paid={self.amount_paid}, "
            f"owed={self.amount_owed})"
        )

    @classmethod
    def from_dict(cls, data: dict) -> "Participant":
        """Create a Participant from a dictionary (snake_case or camelCase keys)."""
        return cls(
            participant_id=pick(data, "participant_id", "id"),
            name=data.get("name") or "",
            amount_paid=pick(data, "amount_paid", "amountPaid", default=0),
            amount_owed=pick(data, "amount_owed", "amountOwed", default=0)
        )


def participant_key(participant_id) -> str:
    """Return the normalized key used to match ids across splits and participants."""
    return str(participant_id)


def build_participant_lookup(participants: list[dict]) -> dict:
    """
    Map normalized participant keys back to the original ids.

    Args:
        participants: List of participant dicts with participant_id.

    Returns:
        dict: participant_key(id) -> id, in input order.
    """
    return {
        participant_key(p["participant_id"]): p["participant_id"]
        for p in participants
    }

