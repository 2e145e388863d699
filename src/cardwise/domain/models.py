from enum import Enum

from pydantic import BaseModel, Field


class RewardType(str, Enum):
    CASHBACK = "cashback"
    POINTS = "points"


class CardTier(str, Enum):
    FREE = "free"
    PREMIUM = "premium"


class CapPeriod(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class RewardPreference(str, Enum):
    CASHBACK = "cashback"
    POINTS = "points"
    BEST_OVERALL = "best_overall"


class SubscriptionTier(str, Enum):
    FREE = "free"
    PREMIUM = "premium"


class CalculationMode(str, Enum):
    COMPREHENSIVE = "comprehensive"
    SIMPLE = "simple"


class SubCategory(BaseModel):
    id: str
    name: str


class SpendingCategory(BaseModel):
    id: str
    name: str
    sub_categories: list[SubCategory] = Field(default_factory=list)


class RewardRule(BaseModel):
    category_id: str
    sub_category_id: str | None = None
    rate: float
    cap: float | None = None
    period: CapPeriod | None = None


class CardBenefit(BaseModel):
    id: str
    name: str
    annual_value: float = 0
    is_recurring: bool = True
    category: str | None = None


class CreditCardOffer(BaseModel):
    id: str
    name: str
    issuer: str = ""
    annual_fee: float = Field(default=0, ge=0)
    reward_type: RewardType = RewardType.CASHBACK
    base_reward: float = 0
    point_value: float | None = None
    signup_bonus: float | None = None
    signup_spend: float | None = None
    signup_timeframe: int | None = None
    tier: CardTier = CardTier.FREE
    is_active: bool = True
    reward_rules: list[RewardRule] = Field(default_factory=list)
    benefits: list[CardBenefit] = Field(default_factory=list)
    application_url: str | None = None


class SpendingEntry(BaseModel):
    # Range checks live in engine.validation so they surface as domain errors.
    category_id: str
    sub_category_id: str | None = None
    monthly_spend: float = 0


class BenefitValuation(BaseModel):
    benefit_id: str
    personal_value: float


class CalculationPreferences(BaseModel):
    include_annual_fees: bool = True
    include_benefits: bool = True
    include_signup_bonuses: bool = True
    calculation_mode: CalculationMode = CalculationMode.COMPREHENSIVE


class CardWarning(BaseModel):
    """A card left out of a result, with the reason."""

    card_id: str
    card_name: str
    error_type: str
    message: str


class CatalogSnapshot(BaseModel):
    categories: list[SpendingCategory] = Field(default_factory=list)
    cards: list[CreditCardOffer] = Field(default_factory=list)
    rejected: list[CardWarning] = Field(default_factory=list)
