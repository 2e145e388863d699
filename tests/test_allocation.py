import pytest

from cardwise.domain.errors import ValidationError
from cardwise.domain.models import CalculationPreferences
from cardwise.engine.allocation import allocate_categories, optimize
from cardwise.engine.evaluator import compute_value


def test_dining_goes_to_the_five_percent_card(make_card, spend, prefs) -> None:
    card_a = make_card("card-a", base_reward=0.01, reward_rules=[{"category_id": "dining", "rate": 0.05}])
    card_b = make_card("card-b", base_reward=0.03)

    strategy = optimize([card_a, card_b], [spend("dining", 100)], prefs)

    assert len(strategy.category_allocations) == 1
    allocation = strategy.category_allocations[0]
    assert allocation.assigned_card_id == "card-a"
    assert allocation.annual_value == 60.0
    assert strategy.total_net_annual_value == 60.0


def test_allocations_stay_inside_the_subset(make_card, spend, prefs) -> None:
    subset = [
        make_card("groceries", reward_rules=[{"category_id": "groceries", "rate": 0.06}]),
        make_card("flat", base_reward=0.02),
        make_card("gas", reward_rules=[{"category_id": "gas", "rate": 0.05}]),
    ]
    entries = [spend("groceries", 500), spend("gas", 100), spend("dining", 300), spend("travel", 0)]

    strategy = optimize(subset, entries, prefs)

    assert {allocation.assigned_card_id for allocation in strategy.category_allocations} <= set(strategy.card_ids)
    assert [allocation.category_id for allocation in strategy.category_allocations] == ["groceries", "gas", "dining"]
    assigned = {allocation.category_id: allocation.assigned_card_id for allocation in strategy.category_allocations}
    assert assigned == {"groceries": "groceries", "gas": "gas", "dining": "flat"}


def test_fees_are_charged_once_per_card(make_card, spend) -> None:
    subset = [
        make_card("premium-a", base_reward=0.02, annual_fee=95),
        make_card("premium-b", base_reward=0.01, annual_fee=250),
    ]
    entries = [spend("dining", 100), spend("gas", 100), spend("travel", 100)]

    with_fees = optimize(subset, entries, CalculationPreferences())
    without_fees = optimize(subset, entries, CalculationPreferences(include_annual_fees=False))

    assert with_fees.total_annual_fees == 345.0
    assert with_fees.gross_reward_value == 72.0
    assert with_fees.total_net_annual_value == 72.0 - 345.0
    assert without_fees.total_annual_fees == 345.0
    assert without_fees.total_net_annual_value == 72.0


def test_shared_benefit_counts_once_and_bonuses_add(make_card, prefs) -> None:
    subset = [
        make_card("a", signup_bonus=200, benefits=[{"id": "a-tsa", "name": "TSA PreCheck Credit", "annual_value": 20,
                                                   "category": "travel"}]),
        make_card("b", signup_bonus=150, benefits=[{"id": "b-tsa", "name": "TSA PreCheck Credit", "annual_value": 20,
                                                   "category": "travel"},
                                                  {"id": "b-cell", "name": "Cell Phone Protection", "annual_value": 30,
                                                   "category": "insurance"}]),
    ]

    strategy = optimize(subset, [], prefs)

    assert strategy.benefits_value == 50.0
    assert strategy.signup_bonus_value == 350.0
    assert strategy.total_net_annual_value == 400.0


def test_card_usage_lists_assigned_categories(make_card, spend, prefs) -> None:
    subset = [
        make_card("travel", reward_rules=[{"category_id": "travel", "sub_category_id": "airfare", "rate": 0.05}]),
        make_card("flat", base_reward=0.02),
    ]

    strategy = optimize(subset, [spend("travel", 200, "airfare"), spend("other", 100)], prefs)
    usage = {row.card_id: row for row in strategy.card_usage}

    assert usage["travel"].assigned_categories == ["travel/airfare"]
    assert usage["travel"].category_value == 120.0
    assert usage["flat"].assigned_categories == ["other"]


def test_ties_go_to_the_earlier_card(make_card, spend, prefs) -> None:
    subset = [make_card("first", base_reward=0.02), make_card("second", base_reward=0.02)]

    strategy = optimize(subset, [spend("dining", 100)], prefs)

    assert strategy.category_allocations[0].assigned_card_id == "first"


def test_subset_size_is_enforced(make_card, spend, prefs) -> None:
    cards = [compute_value(make_card(f"c{i}"), [], prefs) for i in range(4)]

    with pytest.raises(ValidationError):
        allocate_categories(cards[:1], [spend("dining", 10)], prefs)
    with pytest.raises(ValidationError):
        allocate_categories(cards, [spend("dining", 10)], prefs)
