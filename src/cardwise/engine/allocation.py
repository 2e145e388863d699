from collections.abc import Mapping, Sequence

from cardwise.domain.errors import ValidationError
from cardwise.domain.models import BenefitValuation, CalculationPreferences, CreditCardOffer, SpendingEntry
from cardwise.domain.results import CardUsage, CardValueResult, CategoryAllocation, MultiCardStrategy
from cardwise.engine.evaluator import compute_value

MIN_SUBSET_SIZE = 2
MAX_SUBSET_SIZE = 3


def category_label(category_id: str, sub_category_id: str | None) -> str:
    return f"{category_id}/{sub_category_id}" if sub_category_id else category_id


def _strategy_benefits(cards: Sequence[CardValueResult], include_benefits: bool) -> float:
    if not include_benefits:
        return 0.0
    # The same perk on two cards in one wallet is only worth having once.
    seen: set[tuple[str, str | None]] = set()
    total = 0.0
    for card in cards:
        for benefit in card.benefits_breakdown:
            key = (benefit.name.strip().lower(), benefit.category)
            if key in seen:
                continue
            seen.add(key)
            total += benefit.personal_value
    return total


def allocate_categories(
    cards: Sequence[CardValueResult],
    spending_entries: Sequence[SpendingEntry],
    preferences: CalculationPreferences,
) -> MultiCardStrategy:
    """Assign each spending category to the member card that earns the most on it."""
    if not MIN_SUBSET_SIZE <= len(cards) <= MAX_SUBSET_SIZE:
        raise ValidationError(f"a strategy needs 2 or 3 cards, got {len(cards)}")

    usage = {
        card.card_id: CardUsage(card_id=card.card_id, card_name=card.card_name, annual_fee=card.annual_fee)
        for card in cards
    }
    allocations: list[CategoryAllocation] = []

    for entry in spending_entries:
        if entry.monthly_spend <= 0:
            continue
        best_card: CardValueResult | None = None
        best_row = None
        for card in cards:
            row = card.category_value(entry.category_id, entry.sub_category_id)
            if row is None:
                continue
            if best_row is None or row.annual_value > best_row.annual_value:
                best_card, best_row = card, row
        if best_card is None or best_row is None:
            continue

        allocations.append(
            CategoryAllocation(
                category_id=entry.category_id,
                sub_category_id=entry.sub_category_id,
                assigned_card_id=best_card.card_id,
                assigned_card_name=best_card.card_name,
                monthly_spend=entry.monthly_spend,
                reward_rate=best_row.reward_rate,
                annual_value=best_row.annual_value,
            )
        )
        card_usage = usage[best_card.card_id]
        card_usage.assigned_categories.append(category_label(entry.category_id, entry.sub_category_id))
        card_usage.category_value = round(card_usage.category_value + best_row.annual_value, 2)

    gross = sum(allocation.annual_value for allocation in allocations)
    benefits_value = _strategy_benefits(cards, preferences.include_benefits)
    signup_value = sum(card.signup_bonus_amortized_value for card in cards)
    total_fees = sum(card.annual_fee for card in cards)
    counted_fees = total_fees if preferences.include_annual_fees else 0.0

    return MultiCardStrategy(
        card_ids=[card.card_id for card in cards],
        category_allocations=allocations,
        card_usage=list(usage.values()),
        gross_reward_value=round(gross, 2),
        benefits_value=round(benefits_value, 2),
        signup_bonus_value=round(signup_value, 2),
        total_annual_fees=round(total_fees, 2),
        total_net_annual_value=round(gross + benefits_value + signup_value - counted_fees, 2),
    )


def optimize(
    card_subset: Sequence[CreditCardOffer],
    spending_entries: Sequence[SpendingEntry],
    preferences: CalculationPreferences,
    benefit_valuations: Sequence[BenefitValuation] | None = None,
    point_value_override: float | None = None,
    parents: Mapping[str, str] | None = None,
) -> MultiCardStrategy:
    valued = [
        compute_value(offer, spending_entries, preferences, benefit_valuations, point_value_override, parents)
        for offer in card_subset
    ]
    return allocate_categories(valued, spending_entries, preferences)
