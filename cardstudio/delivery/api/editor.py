# cardstudio/delivery/api/editor.py
import logging
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, status

from cardstudio.delivery.api.templates import get_template_service
from cardstudio.delivery.schemas.editor import AddElementRequest, DragRequest, HitTestRequest, HitTestResponse
from cardstudio.delivery.schemas.template import Template
from cardstudio.domain.errors import NotFoundError
from cardstudio.domain.template_service import TemplateService

router = APIRouter(prefix="/editor", tags=["editor"])
logger = logging.getLogger("uvicorn.error")


def _display_size(body) -> Optional[Tuple[int, int]]:
    if body.display_width and body.display_height:
        return body.display_width, body.display_height
    return None


@router.post("/hit-test", response_model=HitTestResponse)
async def hit_test(body: HitTestRequest, service: TemplateService = Depends(get_template_service)):
    element_id = service.hit_test(body.template, body.x, body.y, _display_size(body), body.name, body.message)
    return HitTestResponse(element_id=element_id)


@router.post("/drag", response_model=Template)
async def drag(body: DragRequest, service: TemplateService = Depends(get_template_service)):
    try:
        return service.drag(body.template, body.element_id, body.dx, body.dy, _display_size(body))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/elements", response_model=Template)
async def add_element(body: AddElementRequest, service: TemplateService = Depends(get_template_service)):
    template = service.add_element(body.template, body.type)
    logger.info(f"Added {body.type} element; template now has {len(template.elements)} elements")
    return template
