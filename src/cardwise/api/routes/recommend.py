from fastapi import APIRouter, HTTPException

from cardwise.agents.orchestrator import RecommendationOrchestrator
from cardwise.config import settings
from cardwise.domain.errors import SubscriptionRequiredError, ValidationError
from cardwise.repository.catalog_store import CatalogStore
from cardwise.schemas.requests import RecommendRequest
from cardwise.schemas.responses import CardRecommendationResponse, CategoryLeadersResponse, StrategyResponse

router = APIRouter(tags=["recommend"])
orchestrator = RecommendationOrchestrator(CatalogStore(settings.catalog_file))


@router.post("/recommendations", response_model=CardRecommendationResponse)
def recommend(request: RecommendRequest) -> CardRecommendationResponse:
    try:
        return orchestrator.recommend(request)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/recommendations/by-category", response_model=CategoryLeadersResponse)
def recommend_by_category(request: RecommendRequest) -> CategoryLeadersResponse:
    try:
        return orchestrator.category_leaders(request)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/strategies", response_model=StrategyResponse)
def strategies(request: RecommendRequest) -> StrategyResponse:
    try:
        return orchestrator.strategies(request)
    except SubscriptionRequiredError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
