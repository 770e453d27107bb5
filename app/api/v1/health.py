from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status of the application.")
async def health_check(request: Request):
    normalizer = getattr(request.app.state, "normalizer", None)
    evaluator = getattr(normalizer, "evaluator", None)
    return {
        "status": "healthy",
        "evaluator_configured": bool(getattr(evaluator, "configured", False)),
    }
