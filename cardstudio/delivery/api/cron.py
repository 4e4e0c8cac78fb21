# cardstudio/delivery/api/cron.py
import logging
import traceback
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardstudio.config.database import get_db
from cardstudio.delivery.api.generation import get_pipeline
from cardstudio.delivery.schemas.cron import CelebrationSummary, PersonOutcome
from cardstudio.domain.celebrations import CelebrationScanner
from cardstudio.domain.generation import GenerationPipeline
from cardstudio.infrastructure.database.repositories import PersonRepository

router = APIRouter(prefix="/cron", tags=["cron"])
logger = logging.getLogger("uvicorn.error")


@router.get("/birthday", response_model=CelebrationSummary)
async def birthday_scan(
    request: Request,
    db: AsyncSession = Depends(get_db),
    pipeline: GenerationPipeline = Depends(get_pipeline),
):
    scanner = CelebrationScanner(
        load_people=PersonRepository(db).list,
        pipeline=pipeline,
        email_sender=request.app.state.email_sender,
        notification_email=request.app.state.settings.NOTIFICATION_EMAIL,
    )
    try:
        summary = await scanner.run()
    except Exception as e:
        logger.error(f"Celebration scan failed: {e}\n{traceback.format_exc()}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to process celebrations: {e}",
        )

    if summary.skipped:
        message = "Celebration check skipped"
    else:
        message = "Celebration check completed"
    return CelebrationSummary(
        message=message,
        ai_status="available" if summary.ai_available else "unavailable",
        processed=[
            PersonOutcome(
                name=r.name,
                status=r.status,
                error=r.error,
                is_ai_generated=r.is_ai_generated,
                birthday=r.celebration.is_birthday,
                work_anniversary=r.celebration.is_work_anniversary,
            )
            for r in summary.processed
        ],
        error=summary.error,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
