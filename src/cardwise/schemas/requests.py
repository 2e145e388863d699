from pydantic import BaseModel, Field

from cardwise.domain.models import (
    BenefitValuation,
    CalculationPreferences,
    RewardPreference,
    SpendingEntry,
    SubscriptionTier,
)


class UserPreferences(BaseModel):
    reward_preference: RewardPreference = RewardPreference.BEST_OVERALL
    point_value_override: float | None = None
    calculation: CalculationPreferences = Field(default_factory=CalculationPreferences)


class RecommendRequest(BaseModel):
    spending_entries: list[SpendingEntry]
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    benefit_valuations: list[BenefitValuation] = Field(default_factory=list)
    owned_card_ids: list[str] = Field(default_factory=list)
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE
    limit: int | None = None
