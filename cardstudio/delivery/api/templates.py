# cardstudio/delivery/api/templates.py
import logging
import traceback
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardstudio.config.database import get_db
from cardstudio.delivery.schemas.template import (
    CardType, RenderRequest, Template, TemplateCreate, decoded_data_uri_size,
)
from cardstudio.domain.errors import NotFoundError
from cardstudio.domain.template_service import TemplateService, new_template_draft, preset_templates
from cardstudio.infrastructure.database.repositories import TemplateRepository

router = APIRouter(tags=["templates"])
logger = logging.getLogger("uvicorn.error")


def get_template_service(request: Request) -> TemplateService:
    service = getattr(request.app.state, "template_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is not ready. Please try again in a moment.",
        )
    return service


def check_upload_size(body: TemplateCreate, request: Request) -> TemplateCreate:
    """Inline backgrounds are capped by the running app's MAX_TEMPLATE_UPLOAD_BYTES."""
    limit = request.app.state.settings.MAX_TEMPLATE_UPLOAD_BYTES
    size = decoded_data_uri_size(body.url)
    if size is not None and size > limit:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Background image exceeds the {limit}-byte upload limit",
        )
    return body


@router.get("/templates", response_model=List[Template])
async def list_templates(db: AsyncSession = Depends(get_db)):
    try:
        return await TemplateRepository(db).list()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching templates: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch templates")


@router.post("/templates", response_model=Template, status_code=status.HTTP_201_CREATED)
async def create_template(body: TemplateCreate = Depends(check_upload_size), db: AsyncSession = Depends(get_db)):
    try:
        template = await TemplateRepository(db).create(body)
    except SQLAlchemyError as e:
        logger.error(f"Error creating template: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create template")
    logger.info(f"Template created: {template.id} ({len(template.elements)} elements)")
    return template


@router.get("/templates/presets", response_model=List[Template])
async def list_presets(card_type: CardType = Query(CardType.BIRTHDAY, alias="cardType")):
    return preset_templates(card_type)


@router.get("/templates/new", response_model=Template)
async def new_template(card_type: CardType = Query(CardType.BIRTHDAY, alias="cardType")):
    return new_template_draft(card_type)


@router.get("/templates/{template_id}", response_model=Template)
async def get_template(template_id: str, db: AsyncSession = Depends(get_db)):
    try:
        return await TemplateRepository(db).get(template_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SQLAlchemyError as e:
        logger.error(f"Error fetching template {template_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch template")


@router.put("/templates/{template_id}", response_model=Template)
async def update_template(
    template_id: str,
    body: TemplateCreate = Depends(check_upload_size),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await TemplateRepository(db).update(template_id, body)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SQLAlchemyError as e:
        logger.error(f"Error updating template {template_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update template")


@router.delete("/templates/{template_id}")
async def delete_template(template_id: str, db: AsyncSession = Depends(get_db)):
    try:
        await TemplateRepository(db).delete(template_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SQLAlchemyError as e:
        logger.error(f"Error deleting template {template_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete template")
    return {"success": True}


@router.post("/templates/{template_id}/render", response_class=Response)
async def render_template(
    template_id: str,
    body: RenderRequest,
    db: AsyncSession = Depends(get_db),
    service: TemplateService = Depends(get_template_service),
):
    try:
        template = await TemplateRepository(db).get(template_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    try:
        result = await service.render(template, body.name, body.message, body.width, body.height, body.overlay)
    except Exception as e:
        logger.error(f"Render failed for template {template_id}: {e}\n{traceback.format_exc()}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to render template")

    headers = {"X-Render-Error": result.error} if result.error else {}
    return Response(content=result.to_png(), media_type="image/png", headers=headers)
