import logging
from typing import Any

from cardwise.config import Settings, settings
from cardwise.domain.errors import SubscriptionRequiredError
from cardwise.domain.models import CatalogSnapshot, SubscriptionTier
from cardwise.engine.selectors import best_card_per_category, recommend_cards
from cardwise.engine.strategies import recommend_strategies
from cardwise.engine.validation import validate_limit
from cardwise.repository.catalog_store import CatalogStore
from cardwise.schemas.requests import RecommendRequest
from cardwise.schemas.responses import CardRecommendationResponse, CategoryLeadersResponse, StrategyResponse

logger = logging.getLogger(__name__)


class RecommendationOrchestrator:
    def __init__(self, catalog_store: CatalogStore, app_settings: Settings = settings):
        self.catalog_store = catalog_store
        self.settings = app_settings

    def _engine_arguments(self, request: RecommendRequest, catalog: CatalogSnapshot) -> dict[str, Any]:
        return {
            "catalog": catalog.cards,
            "spending_entries": request.spending_entries,
            "preferences": request.preferences.calculation,
            "reward_preference": request.preferences.reward_preference,
            "owned_card_ids": request.owned_card_ids,
            "subscription_tier": request.subscription_tier,
            "benefit_valuations": request.benefit_valuations,
            "point_value_override": request.preferences.point_value_override,
            "categories": catalog.categories,
        }

    def recommend(self, request: RecommendRequest) -> CardRecommendationResponse:
        if request.limit is not None:
            validate_limit(request.limit)

        catalog = self.catalog_store.load_catalog()
        ranked, warnings = recommend_cards(**self._engine_arguments(request, catalog))
        if request.limit is not None:
            ranked = ranked[: request.limit]

        logger.info("Ranked %d cards (%d skipped)", len(ranked), len(warnings))
        return CardRecommendationResponse(
            best_card=ranked[0] if ranked else None,
            results=ranked,
            warnings=catalog.rejected + warnings,
        )

    def strategies(self, request: RecommendRequest) -> StrategyResponse:
        if self.settings.strategies_require_premium and request.subscription_tier != SubscriptionTier.PREMIUM:
            raise SubscriptionRequiredError("Multi-card strategies are available for premium subscribers only.")

        limit = request.limit if request.limit is not None else self.settings.default_strategy_limit
        validate_limit(limit, self.settings.max_strategy_limit)

        catalog = self.catalog_store.load_catalog()
        strategies, warnings = recommend_strategies(
            **self._engine_arguments(request, catalog),
            limit=limit,
            brute_force_threshold=self.settings.brute_force_threshold,
            safety_margin=self.settings.prune_safety_margin,
        )

        logger.info("Built %d strategies (%d cards skipped)", len(strategies), len(warnings))
        return StrategyResponse(strategies=strategies, warnings=catalog.rejected + warnings)

    def category_leaders(self, request: RecommendRequest) -> CategoryLeadersResponse:
        catalog = self.catalog_store.load_catalog()
        leaders, warnings = best_card_per_category(**self._engine_arguments(request, catalog))
        return CategoryLeadersResponse(leaders=leaders, warnings=catalog.rejected + warnings)
