# Path: api/app.py
# Purpose: Expose a FastAPI application for art search, image search, and collector personalization.
# Layer: api.
# Details: Thin HTTP layer over IntelligenceService; InputError maps to 400 and CollaboratorError to 503.

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from core.errors import CollaboratorError, InputError
from core.models.domain import PriceRange, QueryFilters, ScoringOptions, TimePeriod, utc_now
from core.models.profile import (
    ArtworkAttributes,
    InteractionMetadata,
    RecommendationContext,
    UserInteraction,
)
from core.service import IntelligenceService


class FiltersModel(BaseModel):
    mediums: List[str] = Field(default_factory=list)
    genres: List[str] = Field(default_factory=list)
    subjects: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    start_year: Optional[int] = None
    end_year: Optional[int] = None
    min_width_cm: Optional[float] = None
    max_width_cm: Optional[float] = None
    min_height_cm: Optional[float] = None
    max_height_cm: Optional[float] = None
    palette_temperature: Optional[str] = None

    def to_query_filters(self) -> QueryFilters:
        price_range = None
        if self.min_price is not None or self.max_price is not None:
            price_range = PriceRange(min=self.min_price or 0.0, max=self.max_price)
        time_period = None
        if self.start_year is not None or self.end_year is not None:
            start = self.start_year if self.start_year is not None else self.end_year
            end = self.end_year if self.end_year is not None else start + 10
            time_period = TimePeriod(start_year=start, end_year=end)
        return QueryFilters(
            mediums=frozenset(self.mediums),
            genres=frozenset(self.genres),
            subjects=frozenset(self.subjects),
            colors=frozenset(self.colors),
            keywords=tuple(self.keywords),
            price_range=price_range,
            time_period=time_period,
            min_width_cm=self.min_width_cm,
            max_width_cm=self.max_width_cm,
            min_height_cm=self.min_height_cm,
            max_height_cm=self.max_height_cm,
            palette_temperature=self.palette_temperature,
        )


class OptionsModel(BaseModel):
    price_sensitivity: float = 0.5
    discovery_mode: float = 0.3
    abstraction_level: float = 0.5
    size_bias: Optional[str] = None
    palette_bias: Optional[str] = None

    def to_scoring_options(self) -> ScoringOptions:
        return ScoringOptions(
            price_sensitivity=self.price_sensitivity,
            discovery_mode=self.discovery_mode,
            abstraction_level=self.abstraction_level,
            size_bias=self.size_bias,
            palette_bias=self.palette_bias,
        )


class SearchRequest(BaseModel):
    query: str = ""
    limit: Optional[int] = None
    filters: Optional[FiltersModel] = None
    options: Optional[OptionsModel] = None


class AttributesModel(BaseModel):
    medium: Optional[str] = None
    style: Optional[str] = None
    colors: List[str] = Field(default_factory=list)
    price: Optional[float] = None
    width_cm: Optional[float] = None
    height_cm: Optional[float] = None


class InteractionRequest(BaseModel):
    user_id: str
    interaction_type: str
    target_id: str
    target_type: str = "artwork"
    timestamp: Optional[datetime] = None
    artwork_attributes: Optional[AttributesModel] = None
    search_query: Optional[str] = None

    def to_event(self) -> UserInteraction:
        metadata = None
        if self.artwork_attributes is not None or self.search_query:
            attributes = None
            if self.artwork_attributes is not None:
                raw = self.artwork_attributes
                attributes = ArtworkAttributes(
                    medium=raw.medium,
                    style=raw.style,
                    colors=tuple(raw.colors),
                    price=raw.price,
                    width_cm=raw.width_cm,
                    height_cm=raw.height_cm,
                )
            metadata = InteractionMetadata(artwork_attributes=attributes, search_query=self.search_query)
        return UserInteraction(
            user_id=self.user_id,
            interaction_type=self.interaction_type,
            target_type=self.target_type,
            target_id=self.target_id,
            timestamp=self.timestamp or utc_now(),
            metadata=metadata,
        )


class RecommendationRequest(BaseModel):
    occasion: Optional[str] = None
    budget_range: Optional[Tuple[float, float]] = None
    discovery_mode: Optional[str] = None
    limit: Optional[int] = None


def create_app(service: Optional[IntelligenceService] = None):  # type: ignore[override]
    """Create a FastAPI app instance configured with the provided intelligence service."""

    from fastapi import FastAPI, HTTPException, Request
    from fastapi.concurrency import run_in_threadpool
    from fastapi.responses import JSONResponse

    app = FastAPI(title="ArtFlow Intelligence API", version="0.1.0")

    @app.exception_handler(InputError)
    def handle_input_error(_request: Request, exc: InputError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(CollaboratorError)
    def handle_collaborator_error(_request: Request, exc: CollaboratorError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": str(exc), "collaborator": exc.collaborator})

    def require_service() -> IntelligenceService:
        if service is None:
            raise HTTPException(status_code=500, detail="Intelligence service is not configured.")
        return service

    @app.get("/health")
    def health() -> Dict[str, str]:
        """Return a simple health status payload."""

        return {"status": "ok"}

    @app.post("/search")
    def search(payload: SearchRequest) -> Dict[str, Any]:
        """Run a text search across artworks, artists and catalogues."""

        outcome = require_service().search_detailed(
            payload.query,
            filters=payload.filters.to_query_filters() if payload.filters else None,
            limit=payload.limit,
            options=payload.options.to_scoring_options() if payload.options else None,
        )
        return outcome.to_dict()

    @app.post("/search/image")
    async def search_by_image(request: Request) -> Dict[str, Any]:
        """Rank artworks by palette similarity to the raw image bytes in the request body."""

        data = await request.body()
        results = await run_in_threadpool(require_service().search_by_image, data)
        return {"results": [result.to_dict() for result in results]}

    @app.get("/search/suggestions")
    def suggestions(q: str = "", limit: int = 5) -> Dict[str, List[str]]:
        return {"suggestions": require_service().suggest(q, limit)}

    @app.get("/search/trending")
    def trending(limit: Optional[int] = None) -> Dict[str, List[str]]:
        return {"trending": require_service().trending_searches(limit)}

    @app.post("/interactions", status_code=201)
    def record_interaction(payload: InteractionRequest) -> Dict[str, Any]:
        """Store an interaction and return the updated profile."""

        profile = require_service().record_interaction(payload.to_event())
        return {"status": "recorded", "profile": profile.to_dict()}

    @app.get("/users/{user_id}/profile")
    def profile(user_id: str) -> Dict[str, Any]:
        return require_service().get_profile(user_id).to_dict()

    @app.get("/users/{user_id}/insights")
    def insights(user_id: str) -> Dict[str, Any]:
        return require_service().generate_insights(user_id).to_dict()

    @app.post("/users/{user_id}/recommendations")
    def recommendations(user_id: str, payload: Optional[RecommendationRequest] = None) -> Dict[str, Any]:
        payload = payload or RecommendationRequest()
        context = RecommendationContext(
            occasion=payload.occasion,
            budget_range=payload.budget_range,
            discovery_mode=payload.discovery_mode,
            limit=payload.limit,
        )
        items = require_service().get_recommendations(user_id, context)
        return {"recommendations": [item.to_dict() for item in items]}

    @app.get("/users/{user_id}/purchase-intent/{artwork_id}")
    def purchase_intent(user_id: str, artwork_id: str) -> Dict[str, Any]:
        score = require_service().predict_purchase_intent(artwork_id, user_id)
        return {"user_id": user_id, "artwork_id": artwork_id, "purchase_intent": score}

    return app
