from pydantic import BaseModel, Field

from cardwise.domain.models import CardWarning
from cardwise.domain.results import CardValueResult, CategoryLeader, MultiCardStrategy


class CardRecommendationResponse(BaseModel):
    best_card: CardValueResult | None = None
    results: list[CardValueResult]
    warnings: list[CardWarning] = Field(default_factory=list)


class StrategyResponse(BaseModel):
    strategies: list[MultiCardStrategy]
    warnings: list[CardWarning] = Field(default_factory=list)


class CategoryLeadersResponse(BaseModel):
    leaders: list[CategoryLeader]
    warnings: list[CardWarning] = Field(default_factory=list)
