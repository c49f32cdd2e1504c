from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.config import settings
from app.schemas.response import APIResponse
from app.utils import deps

router = APIRouter()


@router.get("/health", response_model=APIResponse[dict])
def health_check(db: Session = Depends(deps.get_db)):
    db.execute(text("SELECT 1"))
    return APIResponse(
        message="Service is healthy",
        data={"status": "ok", "database": "ok", "version": settings.VERSION},
    )
