from decimal import Decimal

from analytics import explain_all_participants, explain_participant_share, generate_bill_summary

PARTICIPANTS = [
    {"participant_id": 1, "name": "Alice", "amount_paid": 100},
    {"participant_id": 2, "name": "Bob", "amount_paid": 0},
]


def test_balanced_bill_has_no_warnings():
    items = [
        {"item_id": 1, "name": "Pizza", "price": 60, "split_type": "equal"},
        {"item_id": 2, "name": "Wine", "price": 40, "split_type": "unequal-money",
         "splits": {"1": 25, "2": 15}},
    ]
    result = generate_bill_summary(items, PARTICIPANTS)
    summary = result["summary"]
    assert summary["bill_total"] == Decimal("100.00")
    assert summary["total_paid"] == Decimal("100.00")
    assert summary["total_owed"] == Decimal("100.00")
    assert summary["item_totals"] == {1: Decimal("60.00"), 2: Decimal("40.00")}
    assert summary["split_discrepancies"] == {}
    assert result["warnings"] == []


def test_money_split_discrepancy_is_reported():
    items = [
        {"item_id": "w", "name": "Wine", "price": 100, "tax_rate": 10,
         "split_type": "unequal-money", "splits": {"1": 60, "2": 40}},
    ]
    result = generate_bill_summary(items, PARTICIPANTS)
    assert result["summary"]["split_discrepancies"] == {"w": Decimal("-10.00")}
    assert any("'Wine'" in w and "$10.00 unallocated" in w for w in result["warnings"])


def test_money_split_overallocation_is_reported():
    items = [
        {"item_id": 1, "price": 100, "split_type": "unequal-money", "splits": {"1": 60, "2": 55}},
    ]
    result = generate_bill_summary(items, PARTICIPANTS)
    assert result["summary"]["split_discrepancies"] == {1: Decimal("15.00")}
    assert any("item 1" in w and "exceed" in w for w in result["warnings"])


def test_paid_differs_from_bill_total():
    items = [{"item_id": 1, "price": 150, "split_type": "equal"}]
    warnings = generate_bill_summary(items, PARTICIPANTS, symbol="€")["warnings"]
    assert warnings == [
        "Warning: total paid (€100.00) is €50.00 short of the bill total (€150.00)"
    ]


def test_percent_entries_not_adding_to_100():
    items = [
        {"item_id": 1, "price": 100, "split_type": "unequal-percent", "splits": {"1": 60, "2": 60}},
    ]
    result = generate_bill_summary(items, PARTICIPANTS)
    assert result["summary"]["split_discrepancies"] == {}
    assert any("add up to 120%" in w for w in result["warnings"])


def test_weighted_item_without_entries():
    items = [{"item_id": 1, "price": 100, "split_type": "unequal-shares", "splits": {}}]
    result = generate_bill_summary(items, PARTICIPANTS)
    assert result["summary"]["split_discrepancies"] == {1: Decimal("-100.00")}
    assert any("no shares entered" in w for w in result["warnings"])


def test_equal_item_without_participants():
    items = [{"item_id": 1, "price": 20, "split_type": "equal"}]
    result = generate_bill_summary(items, [])
    assert any("nobody shares item 1" in w for w in result["warnings"])


def test_equal_split_rounding_is_not_a_discrepancy():
    people = PARTICIPANTS + [{"participant_id": 3, "name": "Charlie", "amount_paid": 10}]
    items = [{"item_id": 1, "price": 100, "tax_rate": 10, "split_type": "equal"}]
    result = generate_bill_summary(items, people)
    assert result["summary"]["split_discrepancies"] == {}
    assert result["summary"]["total_owed"] == Decimal("110.01")


def test_explain_participant_share():
    items = [
        {"item_id": 1, "name": "Pizza", "price": 60, "split_type": "equal"},
        {"item_id": 2, "name": "Dessert", "price": 12, "split_type": "equal",
         "included_participants": [2]},
    ]
    explanation = explain_participant_share(2, items, PARTICIPANTS)
    assert explanation["name"] == "Bob"
    assert [c["item_id"] for c in explanation["item_contributions"]] == [1, 2]
    assert explanation["item_contributions"][1]["share"] == Decimal("12.00")
    assert explanation["total_owed"] == Decimal("42.00")
    assert explanation["net_balance"] == Decimal("-42.00")


def test_explain_all_participants_keeps_order():
    items = [{"item_id": 1, "price": 50, "split_type": "equal"}]
    explanations = explain_all_participants(items, PARTICIPANTS)
    assert [e["participant_id"] for e in explanations] == [1, 2]
    assert explanations[0]["net_balance"] == Decimal("75.00")


def test_equal_item_shared_only_by_unknown_ids():
    items = [{"item_id": 1, "name": "Taxi", "price": 50, "split_type": "equal",
              "included_participants": [9]}]
    result = generate_bill_summary(items, PARTICIPANTS)
    summary = result["summary"]
    assert summary["total_owed"] == Decimal("0.00")
    assert summary["split_discrepancies"] == {1: Decimal("-50.00")}
    assert any("nobody shares 'Taxi'" in w for w in result["warnings"])


def test_money_split_on_unknown_id_is_unallocated():
    items = [{"item_id": 1, "price": 10, "split_type": "unequal-money",
              "splits": {"9": 10, "1": 5}}]
    result = generate_bill_summary(items, PARTICIPANTS)
    assert result["summary"]["split_discrepancies"] == {1: Decimal("-5.00")}
    assert any("$5.00 unallocated" in w for w in result["warnings"])


def test_percent_warning_counts_known_participants_only():
    items = [{"item_id": 1, "price": 100, "split_type": "unequal-percent",
              "splits": {"1": 30, "2": 30, "9": 40}}]
    result = generate_bill_summary(items, PARTICIPANTS)
    assert any("add up to 60%" in w for w in result["warnings"])
    assert result["summary"]["split_discrepancies"] == {1: Decimal("-40.00")}
