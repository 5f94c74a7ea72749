from fastapi import APIRouter

from app.api.v1.query import router as query_router

router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


router.include_router(query_router)
