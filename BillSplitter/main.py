"""
BillSplitter - FastAPI Web Backend

This module serves as the main entry point for the web-based bill
splitting service using FastAPI.

Features:
    - Stateless JSON API: every request carries a full bill snapshot
    - Item totals and per-item allocation
    - Owed amounts, settlement transactions and imbalance warnings
    - Per-participant breakdowns

Endpoints:
    POST /items/total      - Subtotal, tax and total of one item
    POST /items/allocate   - Allocate one item among participants
    POST /settlements      - Settlement transactions from paid/owed amounts
    POST /bills/calculate  - Full calculation for a bill snapshot
    GET  /health           - Health check

Monetary values in responses are strings with 2 decimal places.

Usage:
    uvicorn main:app --reload
"""

from typing import Literal, Optional, Union

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from analytics import explain_all_participants, generate_bill_summary
from config.settings import configure_logging, get_settings
from items import SPLIT_EQUAL, Item, calculate_item_breakdown
from participants import Participant, participant_key
from settlement import apply_settlement, compute_settlement
from splitter import allocate_item, recalculate_participants
from utils import MAX_AMOUNT, format_amount


settings = get_settings()
logger = configure_logging(settings, __name__)


# =============================================================================
# Pydantic Models for Request/Response Validation
# =============================================================================

ParticipantId = Union[int, str]
# Upper bound for every numeric request field
MAX_VALUE = float(MAX_AMOUNT)
SplitTypeName = Literal["equal", "unequal-money", "unequal-percent", "unequal-shares"]


class ParticipantIn(BaseModel):
    """Request model for a participant."""
    participant_id: ParticipantId = Field(..., description="Unique participant id")
    name: str = Field("", description="Display name used in settlements")
    amount_paid: float = Field(0, ge=0, le=MAX_VALUE, description="Amount paid towards the bill")
    amount_owed: float = Field(0, ge=0, le=MAX_VALUE, description="Owed amount (recomputed by /bills/calculate)")


class ItemIn(BaseModel):
    """Request model for a bill line item."""
    item_id: Optional[ParticipantId] = Field(None, description="Unique item id")
    name: str = Field("", description="Item description")
    price: float = Field(0, ge=0, le=MAX_VALUE, description="Unit price")
    quantity: float = Field(1, gt=0, le=MAX_VALUE, description="Number of units")
    tax_rate: float = Field(0, ge=0, le=MAX_VALUE, description="Tax percentage")
    split_type: SplitTypeName = Field(SPLIT_EQUAL, description="Split policy")
    # Values stay loose: blank or non-numeric entries count as 0
    splits: dict[str, Union[float, str, None]] = Field(
        default_factory=dict, description="Participant id -> amount, percent or shares"
    )
    included_participants: list[ParticipantId] = Field(
        default_factory=list, description="Participants sharing an equal split (empty = all)"
    )


class AllocateRequest(BaseModel):
    """Request model for allocating one item."""
    item: ItemIn
    participants: list[ParticipantIn]


class SettlementRequest(BaseModel):
    """Request model for computing settlements."""
    participants: list[ParticipantIn]


class BillRequest(BaseModel):
    """Request model for a full bill calculation."""
    items: list[ItemIn] = Field(default_factory=list)
    participants: list[ParticipantIn] = Field(default_factory=list)


class ItemTotalResponse(BaseModel):
    """Response model for an item total."""
    subtotal: str
    tax: str
    total: str


class AllocateResponse(BaseModel):
    """Response model for an item allocation."""
    item_total: str
    allocations: dict[str, str]


class SettlementResponse(BaseModel):
    """Response model for settlement transactions."""
    settlements: list


class CalculateResponse(BaseModel):
    """Response model for calculation results."""
    participants: list
    settlements: list
    summary: dict
    warnings: list
    explanations: list


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title=settings.title,
    description="Split bill items among participants and settle up with the fewest transfers",
    version="1.0.0"
)


# =============================================================================
# Helper Functions
# =============================================================================

def _participant_to_dict(p: ParticipantIn) -> dict:
    """Convert a request participant to the dict form used by the calculation modules."""
    return Participant.from_dict(p.model_dump()).to_dict()


def _item_to_dict(item: ItemIn) -> dict:
    """Convert a request item to the dict form used by the calculation modules."""
    return Item.from_dict(item.model_dump()).to_dict()


def _check_unique_ids(participants: list[dict]) -> None:
    """
    Reject snapshots where two participants share an id.

    Raises:
        ValueError: If a participant id (compared as a string) repeats.
    """
    seen = set()
    for p in participants:
        key = participant_key(p["participant_id"])
        if key in seen:
            raise ValueError(f"duplicate participant_id: {p['participant_id']}")
        seen.add(key)


def _serialize_participant(p: dict) -> dict:
    """Convert a recalculated participant to its response form (money as strings)."""
    return {
        "participant_id": p["participant_id"],
        "name": p["name"],
        "amount_paid": format_amount(p["amount_paid"]),
        "amount_owed": format_amount(p["amount_owed"])
    }


def _serialize_summary(summary: dict, unsettled: dict) -> dict:
    """Convert a bill summary plus unsettled balances to its response form."""
    return {
        "bill_total": format_amount(summary["bill_total"]),
        "total_paid": format_amount(summary["total_paid"]),
        "total_owed": format_amount(summary["total_owed"]),
        "item_totals": {
            str(item_id): format_amount(total)
            for item_id, total in summary["item_totals"].items()
        },
        "split_discrepancies": {
            str(item_id): format_amount(diff)
            for item_id, diff in summary["split_discrepancies"].items()
        },
        "unsettled_balances": {
            name: format_amount(balance)
            for name, balance in unsettled.items()
        }
    }


def _serialize_explanation(explanation: dict) -> dict:
    """Convert a participant explanation to its response form."""
    return {
        "participant_id": explanation["participant_id"],
        "name": explanation["name"],
        "item_contributions": [
            {
                **contribution,
                "item_total": format_amount(contribution["item_total"]),
                "share": format_amount(contribution["share"])
            }
            for contribution in explanation["item_contributions"]
        ],
        "total_owed": format_amount(explanation["total_owed"]),
        "total_paid": format_amount(explanation["total_paid"]),
        "net_balance": format_amount(explanation["net_balance"])
    }


# =============================================================================
# API Endpoints
# =============================================================================

@app.post("/items/total", response_model=ItemTotalResponse)
async def item_total(item: ItemIn):
    """Return the subtotal, tax and total of a single item."""
    try:
        breakdown = calculate_item_breakdown(_item_to_dict(item))
        return ItemTotalResponse(
            subtotal=format_amount(breakdown["subtotal"]),
            tax=format_amount(breakdown["tax"]),
            total=format_amount(breakdown["total"])
        )

    except Exception as e:
        logger.exception("Item total failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/items/allocate", response_model=AllocateResponse)
async def allocate(request: AllocateRequest):
    """
    Allocate one item among participants.

    Shares are returned unsummed and rounded to 2 places per participant.
    """
    try:
        participants_dicts = [_participant_to_dict(p) for p in request.participants]
        _check_unique_ids(participants_dicts)
        item_dict = _item_to_dict(request.item)

        allocation = allocate_item(item_dict, participants_dicts)
        breakdown = calculate_item_breakdown(item_dict)

        return AllocateResponse(
            item_total=format_amount(breakdown["total"]),
            allocations={
                str(participant_id): format_amount(share)
                for participant_id, share in allocation.items()
            }
        )

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Allocation failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/settlements", response_model=SettlementResponse)
async def settlements(request: SettlementRequest):
    """Compute settlement transactions from the amounts paid and owed as given."""
    try:
        participants_dicts = [_participant_to_dict(p) for p in request.participants]
        return SettlementResponse(settlements=compute_settlement(participants_dicts))

    except Exception as e:
        logger.exception("Settlement failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/bills/calculate", response_model=CalculateResponse)
async def calculate_bill(request: BillRequest):
    """
    Calculate everything for a bill snapshot.

    Request flow:
        1. Recompute each participant's amount_owed from the items (splitter.py)
        2. Compute settlement transactions (settlement.py)
        3. Generate bill summary and warnings (analytics.py)
        4. Generate per-participant explanations (analytics.py)
        5. Return complete results (nothing is stored)
    """
    try:
        participants_dicts = [_participant_to_dict(p) for p in request.participants]
        _check_unique_ids(participants_dicts)
        items_dicts = [_item_to_dict(item) for item in request.items]

        logger.debug(
            "Calculating bill: %d items, %d participants",
            len(items_dicts), len(participants_dicts)
        )

        # Step 1: amount_owed always comes from the items, never the request
        updated_participants = recalculate_participants(items_dicts, participants_dicts)

        # Step 2: settlement transactions
        settlement_plan = compute_settlement(updated_participants)
        unsettled = {
            name: balance
            for name, balance in apply_settlement(updated_participants, settlement_plan).items()
            if format_amount(balance) != "0.00"
        }

        # Step 3: summary and warnings
        summary_result = generate_bill_summary(
            items_dicts, participants_dicts, symbol=settings.currency_symbol
        )
        warnings = summary_result["warnings"]
        if warnings:
            logger.info("Bill calculated with %d warning(s)", len(warnings))

        # Step 4: explanations
        explanations = explain_all_participants(items_dicts, participants_dicts)

        return CalculateResponse(
            participants=[_serialize_participant(p) for p in updated_participants],
            settlements=settlement_plan,
            summary=_serialize_summary(summary_result["summary"], unsettled),
            warnings=warnings,
            explanations=[_serialize_explanation(e) for e in explanations]
        )

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Bill calculation failed")
        raise HTTPException(status_code=500, detail=str(e))


# =============================================================================
# Health Check Endpoint
# =============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint to verify API is running."""
    return {"status": "healthy", "service": settings.title}


# =============================================================================
# Run with: python main.py
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=True)
