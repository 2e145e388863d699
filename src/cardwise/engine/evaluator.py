from collections.abc import Mapping, Sequence

from cardwise.domain.errors import ConfigurationError
from cardwise.domain.models import (
    BenefitValuation,
    CalculationMode,
    CalculationPreferences,
    CreditCardOffer,
    RewardType,
    SpendingEntry,
)
from cardwise.domain.results import BenefitBreakdown, CardValueResult, CategoryBreakdown, SignupBonusTerms
from cardwise.engine.resolver import RewardRuleResolver, apply_cap

MONTHS_PER_YEAR = 12


def effective_point_value(offer: CreditCardOffer, point_value_override: float | None = None) -> float | None:
    """Cash value of one point, or None for cashback cards."""
    if offer.reward_type == RewardType.CASHBACK:
        return None
    if offer.reward_type == RewardType.POINTS:
        if offer.point_value is None or offer.point_value <= 0:
            raise ConfigurationError(offer.id, f"{offer.name}: points card has no point value")
        if point_value_override is not None:
            return point_value_override
        return offer.point_value
    raise ConfigurationError(offer.id, f"{offer.name}: unknown reward type {offer.reward_type!r}")


def _valuation_factor(offer: CreditCardOffer, point_value: float | None) -> float:
    # Rates are quoted at the catalog point value; a user valuation rescales them.
    if point_value is None or offer.point_value is None:
        return 1.0
    return point_value / offer.point_value


def _category_rows(
    offer: CreditCardOffer,
    spending_entries: Sequence[SpendingEntry],
    preferences: CalculationPreferences,
    factor: float,
    parents: Mapping[str, str] | None,
) -> list[CategoryBreakdown]:
    resolver = RewardRuleResolver(offer, parents)
    apply_caps = preferences.calculation_mode == CalculationMode.COMPREHENSIVE

    rows: list[CategoryBreakdown] = []
    for entry in spending_entries:
        if entry.monthly_spend <= 0:
            continue
        resolved = resolver.resolve(entry.category_id, entry.sub_category_id)
        raw = entry.monthly_spend * resolved.rate * MONTHS_PER_YEAR
        value, capped = apply_cap(raw, resolved.rule) if apply_caps else (raw, False)
        rows.append(
            CategoryBreakdown(
                category_id=entry.category_id,
                sub_category_id=entry.sub_category_id,
                monthly_spend=entry.monthly_spend,
                reward_rate=resolved.rate * factor,
                matched_rule=resolved.reason,
                raw_annual_value=round(raw * factor, 2),
                annual_value=round(value * factor, 2),
                capped=capped,
            )
        )
    return rows


def _benefit_rows(
    offer: CreditCardOffer,
    benefit_valuations: Sequence[BenefitValuation],
    include: bool,
) -> list[BenefitBreakdown]:
    personal = {valuation.benefit_id: valuation.personal_value for valuation in benefit_valuations}
    return [
        BenefitBreakdown(
            benefit_id=benefit.id,
            name=benefit.name,
            category=benefit.category,
            official_value=benefit.annual_value,
            personal_value=personal.get(benefit.id, benefit.annual_value),
            counted=include,
        )
        for benefit in offer.benefits
    ]


def _signup_terms(offer: CreditCardOffer, point_value: float | None) -> SignupBonusTerms | None:
    if not offer.signup_bonus or offer.signup_bonus <= 0:
        return None
    cash_value = offer.signup_bonus * point_value if point_value is not None else offer.signup_bonus
    return SignupBonusTerms(
        amount=offer.signup_bonus,
        required_spend=offer.signup_spend,
        timeframe_months=offer.signup_timeframe,
        cash_value=round(cash_value, 2),
    )


def compute_value(
    offer: CreditCardOffer,
    spending_entries: Sequence[SpendingEntry],
    preferences: CalculationPreferences,
    benefit_valuations: Sequence[BenefitValuation] | None = None,
    point_value_override: float | None = None,
    parents: Mapping[str, str] | None = None,
) -> CardValueResult:
    """First-year value of one card for a spending profile.

    Raises ConfigurationError or CatalogIntegrityError when the card itself
    cannot be valued.
    """
    point_value = effective_point_value(offer, point_value_override)
    factor = _valuation_factor(offer, point_value)

    categories = _category_rows(offer, spending_entries, preferences, factor, parents)
    gross = sum(row.annual_value for row in categories)

    benefits = _benefit_rows(offer, benefit_valuations or [], preferences.include_benefits)
    benefits_value = sum(row.personal_value for row in benefits) if preferences.include_benefits else 0.0

    # The horizon is always the first year, so the bonus is credited in full.
    signup = _signup_terms(offer, point_value)
    signup_value = signup.cash_value if signup is not None and preferences.include_signup_bonuses else 0.0

    fee = offer.annual_fee if preferences.include_annual_fees else 0.0
    net = gross + benefits_value + signup_value - fee

    reasoning = (
        f"rewards={gross:.2f} over {len(categories)} categories, benefits={benefits_value:.2f}, "
        f"signup={signup_value:.2f}, fee={fee:.2f}, net={net:.2f}"
    )

    return CardValueResult(
        card_id=offer.id,
        card_name=offer.name,
        issuer=offer.issuer,
        reward_type=offer.reward_type,
        tier=offer.tier,
        gross_reward_value=round(gross, 2),
        benefits_value=round(benefits_value, 2),
        signup_bonus_amortized_value=round(signup_value, 2),
        annual_fee=offer.annual_fee,
        net_annual_value=round(net, 2),
        per_category_breakdown=categories,
        benefits_breakdown=benefits,
        signup_bonus=signup,
        reasoning=reasoning,
    )
