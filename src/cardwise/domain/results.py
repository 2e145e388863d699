from pydantic import BaseModel, Field

from cardwise.domain.models import CardTier, RewardType


class CategoryBreakdown(BaseModel):
    category_id: str
    sub_category_id: str | None = None
    monthly_spend: float
    reward_rate: float
    matched_rule: str
    raw_annual_value: float
    annual_value: float
    capped: bool = False


class BenefitBreakdown(BaseModel):
    benefit_id: str
    name: str
    category: str | None = None
    official_value: float
    personal_value: float
    counted: bool = True


class SignupBonusTerms(BaseModel):
    amount: float
    required_spend: float | None = None
    timeframe_months: int | None = None
    cash_value: float


class CardValueResult(BaseModel):
    card_id: str
    card_name: str
    issuer: str = ""
    reward_type: RewardType
    tier: CardTier
    gross_reward_value: float
    benefits_value: float
    signup_bonus_amortized_value: float
    annual_fee: float
    net_annual_value: float
    per_category_breakdown: list[CategoryBreakdown] = Field(default_factory=list)
    benefits_breakdown: list[BenefitBreakdown] = Field(default_factory=list)
    signup_bonus: SignupBonusTerms | None = None
    reasoning: str = ""

    def category_value(self, category_id: str, sub_category_id: str | None = None) -> CategoryBreakdown | None:
        for row in self.per_category_breakdown:
            if row.category_id == category_id and row.sub_category_id == sub_category_id:
                return row
        return None


class CategoryAllocation(BaseModel):
    category_id: str
    sub_category_id: str | None = None
    assigned_card_id: str
    assigned_card_name: str
    monthly_spend: float
    reward_rate: float
    annual_value: float


class CardUsage(BaseModel):
    card_id: str
    card_name: str
    annual_fee: float
    assigned_categories: list[str] = Field(default_factory=list)
    category_value: float = 0


class MultiCardStrategy(BaseModel):
    card_ids: list[str] = Field(min_length=2, max_length=3)
    category_allocations: list[CategoryAllocation] = Field(default_factory=list)
    card_usage: list[CardUsage] = Field(default_factory=list)
    gross_reward_value: float
    benefits_value: float
    signup_bonus_value: float
    total_annual_fees: float
    total_net_annual_value: float
    strategy_name: str = ""
    description: str = ""
    rank: int | None = None


class CategoryLeader(BaseModel):
    category_id: str
    sub_category_id: str | None = None
    card_id: str
    card_name: str
    reward_rate: float
    annual_value: float
