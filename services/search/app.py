from typing import Any, Dict, List

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse

from services.common.api import error_response, ok_response, status_for_code
from services.common.errors import SearchError
from services.listings.models import Location
from services.search.api_models import InteractionRequestModel, SearchRequestModel
from services.search.config import build_search_service, load_search_config
from services.search.models import LocationFilter, SemanticSearchQuery, SemanticSearchResult

app = FastAPI(title="Listing Search", docs_url=None, redoc_url=None)

_config = load_search_config()
_service, _listings, _behavior = build_search_service(config=_config)


def _schema_error() -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=error_response("VALIDATION_ERROR", "schema_version must be v1"),
    )


def _search_error(exc: SearchError) -> JSONResponse:
    return JSONResponse(
        status_code=status_for_code(exc.code),
        content=error_response(exc.code, str(exc), exc.details),
    )


def _to_query(request: SearchRequestModel) -> SemanticSearchQuery:
    location = None
    if request.location is not None:
        location = LocationFilter(
            city=request.location.city,
            latitude=request.location.latitude,
            longitude=request.location.longitude,
            radius_km=request.location.radius_km,
        )
    return SemanticSearchQuery(
        query=request.query,
        limit=request.limit or _config.default_limit,
        page=request.page,
        category=request.category,
        location=location,
        tags=list(request.tags),
        min_score=request.min_score,
    )


def _location_payload(location: Location) -> Dict[str, Any]:
    return {
        "latitude": location.latitude,
        "longitude": location.longitude,
        "address": location.address,
        "city": location.city,
        "country": location.country,
    }


def _result_payload(result: SemanticSearchResult) -> Dict[str, Any]:
    return {
        "id": result.id,
        "title": result.title,
        "description": result.description,
        "category": result.category,
        "location": _location_payload(result.location),
        "tags": result.tags,
        "images": result.images,
        "user_id": result.user_id,
        "created_at": result.created_at.isoformat(),
        "updated_at": result.updated_at.isoformat() if result.updated_at else None,
        "score": result.score,
        "relevance_score": result.relevance_score,
        "source": result.source.value,
    }


def _results_payload(results: List[SemanticSearchResult]) -> List[Dict[str, Any]]:
    return [_result_payload(result) for result in results]


@app.post("/search/semantic")
def semantic_search(request: SearchRequestModel):
    if request.schema_version != "v1":
        return _schema_error()
    try:
        results = _service.semantic_search(_to_query(request), user_id=request.user_id)
    except SearchError as exc:
        return _search_error(exc)
    return ok_response({"results": _results_payload(results), "count": len(results)})


@app.post("/search/hybrid")
def hybrid_search(request: SearchRequestModel):
    if request.schema_version != "v1":
        return _schema_error()
    try:
        result = _service.hybrid_search(_to_query(request), user_id=request.user_id)
    except SearchError as exc:
        return _search_error(exc)
    return ok_response(
        {
            "semantic_results": _results_payload(result.semantic_results),
            "keyword_results": [listing.id for listing in result.keyword_results],
            "combined_results": _results_payload(result.combined_results),
            "total_results": result.total_results,
            "search_time_ms": result.search_time_ms,
            "page": result.page,
            "limit": result.limit,
        }
    )


@app.get("/listings/{listing_id}/similar")
def similar_listings(listing_id: str, limit: int = Query(default=5, ge=1, le=50)):
    try:
        results = _service.find_similar_listings(listing_id, limit=limit)
    except SearchError as exc:
        return _search_error(exc)
    return ok_response({"listing_id": listing_id, "results": _results_payload(results)})


@app.get("/recommendations/{user_id}")
def recommendations(user_id: str, limit: int = Query(default=10, ge=1, le=50)):
    try:
        results = _service.personalized_recommendations(user_id, limit=limit)
    except SearchError as exc:
        return _search_error(exc)
    return ok_response({"user_id": user_id, "results": _results_payload(results)})


@app.post("/listings/{listing_id}/interactions")
def record_interaction(listing_id: str, request: InteractionRequestModel):
    if request.schema_version != "v1":
        return _schema_error()
    _service.record_interaction(
        user_id=request.user_id,
        listing_id=listing_id,
        interaction_type=request.interaction_type,
        duration_seconds=request.duration_seconds,
    )
    return JSONResponse(status_code=202, content=ok_response({"listing_id": listing_id, "accepted": True}))
