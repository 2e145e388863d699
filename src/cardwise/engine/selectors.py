import logging
from collections.abc import Iterable, Mapping, Sequence

from cardwise.domain.errors import CardValueError
from cardwise.domain.models import (
    BenefitValuation,
    CalculationPreferences,
    CardWarning,
    CreditCardOffer,
    RewardPreference,
    SpendingCategory,
    SpendingEntry,
    SubscriptionTier,
)
from cardwise.domain.results import CardValueResult, CategoryLeader
from cardwise.engine.evaluator import compute_value
from cardwise.engine.resolver import subcategory_parents
from cardwise.engine.validation import coerce_choices, eligible_cards, validate_point_value, validate_spending

logger = logging.getLogger(__name__)


def value_cards(
    cards: Iterable[CreditCardOffer],
    spending_entries: Sequence[SpendingEntry],
    preferences: CalculationPreferences,
    benefit_valuations: Sequence[BenefitValuation] | None = None,
    point_value_override: float | None = None,
    parents: Mapping[str, str] | None = None,
) -> tuple[list[CardValueResult], list[CardWarning]]:
    """Value every card, collecting per-card failures instead of aborting."""
    results: list[CardValueResult] = []
    warnings: list[CardWarning] = []
    for offer in cards:
        try:
            results.append(
                compute_value(offer, spending_entries, preferences, benefit_valuations, point_value_override, parents)
            )
        except CardValueError as exc:
            logger.warning("Skipping card %s: %s", offer.id, exc.message)
            warnings.append(
                CardWarning(
                    card_id=offer.id,
                    card_name=offer.name,
                    error_type=type(exc).__name__,
                    message=exc.message,
                )
            )
    return results, warnings


def rank_cards(results: Iterable[CardValueResult]) -> list[CardValueResult]:
    return sorted(results, key=lambda item: (-item.net_annual_value, item.annual_fee, item.card_name))


def recommend_cards(
    catalog: Iterable[CreditCardOffer],
    spending_entries: Sequence[SpendingEntry],
    preferences: CalculationPreferences,
    reward_preference: RewardPreference,
    owned_card_ids: Iterable[str] = (),
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE,
    benefit_valuations: Sequence[BenefitValuation] | None = None,
    point_value_override: float | None = None,
    categories: Sequence[SpendingCategory] | None = None,
) -> tuple[list[CardValueResult], list[CardWarning]]:
    reward_preference, subscription_tier = coerce_choices(reward_preference, subscription_tier)
    validate_spending(spending_entries, categories)
    validate_point_value(point_value_override)

    cards = eligible_cards(catalog, reward_preference, subscription_tier, owned_card_ids)
    results, warnings = value_cards(
        cards,
        spending_entries,
        preferences,
        benefit_valuations,
        point_value_override,
        subcategory_parents(categories or []),
    )
    logger.debug("Valued %d of %d eligible cards", len(results), len(cards))
    return rank_cards(results), warnings


def best_card_per_category(
    catalog: Iterable[CreditCardOffer],
    spending_entries: Sequence[SpendingEntry],
    preferences: CalculationPreferences,
    reward_preference: RewardPreference,
    owned_card_ids: Iterable[str] = (),
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE,
    benefit_valuations: Sequence[BenefitValuation] | None = None,
    point_value_override: float | None = None,
    categories: Sequence[SpendingCategory] | None = None,
) -> tuple[list[CategoryLeader], list[CardWarning]]:
    ranked, warnings = recommend_cards(
        catalog,
        spending_entries,
        preferences,
        reward_preference,
        owned_card_ids,
        subscription_tier,
        benefit_valuations,
        point_value_override,
        categories,
    )

    leaders: list[CategoryLeader] = []
    for entry in spending_entries:
        if entry.monthly_spend <= 0:
            continue
        best: CategoryLeader | None = None
        # ranked is already ordered by net value, fee and name, so the first
        # card with the top category value wins ties.
        for result in ranked:
            row = result.category_value(entry.category_id, entry.sub_category_id)
            if row is None or (best is not None and row.annual_value <= best.annual_value):
                continue
            best = CategoryLeader(
                category_id=entry.category_id,
                sub_category_id=entry.sub_category_id,
                card_id=result.card_id,
                card_name=result.card_name,
                reward_rate=row.reward_rate,
                annual_value=row.annual_value,
            )
        if best is not None:
            leaders.append(best)
    return leaders, warnings
