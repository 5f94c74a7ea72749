from fastapi import APIRouter, Request
from app.domain.normalize import normalize_request
from app.domain.schema import ListQueryPayload, NormalizedQuery

router = APIRouter(tags=["query"])


@router.post("/query/normalize", response_model=NormalizedQuery)
def normalize(req: ListQueryPayload, request: Request) -> NormalizedQuery:
    strict = getattr(request.app.state, "strict_booleans", False)
    query = normalize_request(req, strict_booleans=strict)
    return NormalizedQuery.model_validate(query.to_dict())
