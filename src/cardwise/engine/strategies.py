import logging
from collections.abc import Iterable, Sequence

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
from cardwise.domain.results import MultiCardStrategy
from cardwise.engine.allocation import allocate_categories
from cardwise.engine.combinations import BRUTE_FORCE_THRESHOLD, DEFAULT_SIZES, SAFETY_MARGIN, CombinationEnumerator
from cardwise.engine.ranking import StrategyBoard, rank
from cardwise.engine.resolver import subcategory_parents
from cardwise.engine.selectors import value_cards
from cardwise.engine.validation import (
    coerce_choices,
    eligible_cards,
    validate_limit,
    validate_point_value,
    validate_spending,
)

logger = logging.getLogger(__name__)


def recommend_strategies(
    catalog: Iterable[CreditCardOffer],
    spending_entries: Sequence[SpendingEntry],
    preferences: CalculationPreferences,
    reward_preference: RewardPreference,
    owned_card_ids: Iterable[str] = (),
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE,
    benefit_valuations: Sequence[BenefitValuation] | None = None,
    point_value_override: float | None = None,
    categories: Sequence[SpendingCategory] | None = None,
    limit: int = 3,
    sizes: Iterable[int] = DEFAULT_SIZES,
    brute_force_threshold: int = BRUTE_FORCE_THRESHOLD,
    safety_margin: float = SAFETY_MARGIN,
) -> tuple[list[MultiCardStrategy], list[CardWarning]]:
    """Best 2-3 card wallets for a spending profile, plus per-card warnings."""
    reward_preference, subscription_tier = coerce_choices(reward_preference, subscription_tier)
    validate_spending(spending_entries, categories)
    validate_point_value(point_value_override)
    validate_limit(limit)

    cards = eligible_cards(catalog, reward_preference, subscription_tier, owned_card_ids)
    valued, warnings = value_cards(
        cards,
        spending_entries,
        preferences,
        benefit_valuations,
        point_value_override,
        subcategory_parents(categories or []),
    )
    if len(valued) < 2:
        logger.info("Only %d valuable cards, no multi-card strategy possible", len(valued))
        return [], warnings

    by_id = {card.card_id: card for card in valued}
    enumerator = CombinationEnumerator(
        valued,
        include_annual_fees=preferences.include_annual_fees,
        brute_force_threshold=brute_force_threshold,
        safety_margin=safety_margin,
    )
    board = StrategyBoard(limit)
    for subset in enumerator.subsets(sizes, floor=board.floor):
        board.offer(allocate_categories([by_id[card_id] for card_id in subset], spending_entries, preferences))

    logger.debug("Evaluated %d subsets over %d cards", enumerator.emitted, len(valued))
    return rank(board.strategies(), limit), warnings
