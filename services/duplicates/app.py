from fastapi import FastAPI
from fastapi.responses import JSONResponse

from services.common.api import error_response, ok_response
from services.duplicates.api_models import DuplicateCheckRequestModel
from services.duplicates.config import build_duplicate_service
from services.duplicates.service import blocking_matches, should_block
from services.listings.models import ContactInfo, ListingDraft, Location

app = FastAPI(title="Duplicate Detection", docs_url=None, redoc_url=None)

_service, _listings = build_duplicate_service()


def _to_draft(request: DuplicateCheckRequestModel) -> ListingDraft:
    return ListingDraft(
        title=request.title,
        description=request.description,
        category=request.category,
        location=Location(
            latitude=request.location.latitude,
            longitude=request.location.longitude,
            address=request.location.address,
            city=request.location.city,
            country=request.location.country,
            region=request.location.region,
            postal_code=request.location.postal_code,
        ),
        contact_info=ContactInfo(
            email=request.contact_info.email,
            phone=request.contact_info.phone,
            website=request.contact_info.website,
        ),
        tags=list(request.tags),
        is_organic=request.is_organic,
        is_certified=request.is_certified,
        price_range=request.price_range,
    )


@app.post("/listings/duplicates")
def check_duplicates(request: DuplicateCheckRequestModel):
    if request.schema_version != "v1":
        return JSONResponse(
            status_code=400,
            content=error_response("VALIDATION_ERROR", "schema_version must be v1"),
        )
    matches = _service.check_for_duplicates(_to_draft(request), request.owner_user_id)
    threshold = _service.config.block_threshold
    return ok_response(
        {
            "duplicates": [
                {
                    "listing_id": match.listing_id,
                    "title": match.title,
                    "address": match.address,
                    "user_id": match.user_id,
                    "match_type": match.match_type.value,
                    "confidence": match.confidence,
                    "reason": match.reason,
                }
                for match in matches
            ],
            "blocked": should_block(matches, threshold),
            "blocking_count": len(blocking_matches(matches, threshold)),
            "threshold": threshold,
        }
    )
