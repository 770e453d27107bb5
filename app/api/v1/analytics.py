from fastapi import APIRouter, Depends

from app.analytics import db as analytics_db
from app.core.security import require_api_key

router = APIRouter()


@router.get("/analytics/evaluations")
def evaluation_summary(_: None = Depends(require_api_key)):
    return analytics_db.get_summary()
