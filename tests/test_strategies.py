import pytest

from cardwise.domain.errors import ValidationError
from cardwise.domain.models import RewardPreference, SubscriptionTier
from cardwise.engine.strategies import recommend_strategies


@pytest.fixture
def catalog(make_card):
    return [
        make_card("dining", base_reward=0.01, reward_rules=[{"category_id": "dining", "rate": 0.05}]),
        make_card(
            "groceries",
            base_reward=0.01,
            annual_fee=95,
            reward_rules=[{"category_id": "groceries", "rate": 0.06, "cap": 360, "period": "yearly"}],
        ),
        make_card("flat", base_reward=0.02),
        make_card("gas", base_reward=0.01, reward_rules=[{"category_id": "gas", "rate": 0.05}]),
    ]


@pytest.fixture
def entries(spend):
    return [spend("dining", 400), spend("groceries", 600), spend("gas", 150), spend("other", 800)]


def test_best_strategy_combines_specialists(catalog, entries, prefs) -> None:
    strategies, warnings = recommend_strategies(catalog, entries, prefs, RewardPreference.BEST_OVERALL, limit=3)

    assert warnings == []
    best = strategies[0]
    assert set(best.card_ids) == {"dining", "groceries", "flat"}
    assigned = {allocation.category_id: allocation.assigned_card_id for allocation in best.category_allocations}
    assert assigned == {"dining": "dining", "groceries": "groceries", "gas": "flat", "other": "flat"}
    assert best.total_annual_fees == 95.0
    assert best.total_net_annual_value == 733.0
    assert best.rank == 1
    assert best.strategy_name == "Best 3-Card Combination"


def test_strategies_are_ranked_and_limited(catalog, entries, prefs) -> None:
    strategies, _ = recommend_strategies(catalog, entries, prefs, RewardPreference.BEST_OVERALL, limit=2)

    assert len(strategies) == 2
    assert strategies[0].total_net_annual_value >= strategies[1].total_net_annual_value


def test_pruned_search_matches_exhaustive_search(catalog, entries, prefs) -> None:
    exhaustive, _ = recommend_strategies(catalog, entries, prefs, RewardPreference.BEST_OVERALL, limit=4)
    pruned, _ = recommend_strategies(
        catalog, entries, prefs, RewardPreference.BEST_OVERALL, limit=4, brute_force_threshold=0
    )

    assert [strategy.card_ids for strategy in pruned] == [strategy.card_ids for strategy in exhaustive]
    assert [strategy.total_net_annual_value for strategy in pruned] == [
        strategy.total_net_annual_value for strategy in exhaustive
    ]


def test_fewer_than_two_cards_gives_no_strategies(make_card, entries, prefs) -> None:
    strategies, warnings = recommend_strategies(
        [make_card("only", base_reward=0.02), make_card("points", reward_type="points")],
        entries,
        prefs,
        RewardPreference.BEST_OVERALL,
        subscription_tier=SubscriptionTier.PREMIUM,
    )

    assert strategies == []
    assert [warning.card_id for warning in warnings] == ["points"]


def test_owned_cards_are_left_out(catalog, entries, prefs) -> None:
    strategies, _ = recommend_strategies(
        catalog, entries, prefs, RewardPreference.BEST_OVERALL, owned_card_ids=["flat"], limit=5
    )

    assert all("flat" not in strategy.card_ids for strategy in strategies)


def test_invalid_limit_is_rejected(catalog, entries, prefs) -> None:
    with pytest.raises(ValidationError):
        recommend_strategies(catalog, entries, prefs, RewardPreference.BEST_OVERALL, limit=0)


def test_unknown_subscription_tier_is_rejected_for_empty_catalog(entries, prefs) -> None:
    with pytest.raises(ValidationError):
        recommend_strategies([], entries, prefs, RewardPreference.BEST_OVERALL, subscription_tier="gold")


def test_unknown_reward_preference_is_rejected_for_inactive_catalog(make_card, entries, prefs) -> None:
    cards = [make_card("a", base_reward=0.02, is_active=False), make_card("b", base_reward=0.02, is_active=False)]

    with pytest.raises(ValidationError):
        recommend_strategies(cards, entries, prefs, "miles")


def test_pruning_keeps_wallets_with_shared_negative_benefits(make_card, prefs) -> None:
    cards = [
        make_card("a", benefits=[{"id": "lounge-a", "name": "Lounge", "annual_value": -100}]),
        make_card("b", benefits=[{"id": "lounge-b", "name": "Lounge", "annual_value": -100}]),
        make_card("c", annual_fee=75),
        make_card("d", annual_fee=75),
    ]

    for limit in (1, 3):
        exhaustive, _ = recommend_strategies(cards, [], prefs, RewardPreference.BEST_OVERALL, limit=limit)
        pruned, _ = recommend_strategies(
            cards, [], prefs, RewardPreference.BEST_OVERALL, limit=limit, brute_force_threshold=0
        )

        assert exhaustive[0].card_ids == ["a", "b"]
        assert exhaustive[0].total_net_annual_value == -100.0
        assert [strategy.card_ids for strategy in pruned] == [strategy.card_ids for strategy in exhaustive]
