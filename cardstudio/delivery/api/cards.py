# cardstudio/delivery/api/cards.py
import logging
import traceback
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardstudio.config.database import get_db
from cardstudio.delivery.api.templates import get_template_service
from cardstudio.delivery.schemas.card import CardCreate, CardRead
from cardstudio.domain.errors import NotFoundError, ProviderError
from cardstudio.domain.template_service import TemplateService
from cardstudio.infrastructure.database.repositories import CardRepository, PersonRepository, TemplateRepository

router = APIRouter(prefix="/cards", tags=["cards"])
logger = logging.getLogger("uvicorn.error")


@router.get("", response_model=List[CardRead])
async def list_cards(db: AsyncSession = Depends(get_db)):
    try:
        return [CardRead.from_row(c) for c in await CardRepository(db).list()]
    except SQLAlchemyError as e:
        logger.error(f"Error fetching cards: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch cards")


@router.post("", response_model=CardRead, status_code=status.HTTP_201_CREATED)
async def create_card(body: CardCreate, db: AsyncSession = Depends(get_db)):
    try:
        if body.person_id:
            await PersonRepository(db).get(body.person_id)
        if body.template_id:
            await TemplateRepository(db).get(body.template_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        card = await CardRepository(db).create(body)
    except SQLAlchemyError as e:
        logger.error(f"Error creating card: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create card")
    logger.info(f"Card created: {card.id} for {card.recipient_name}")
    return CardRead.from_row(card)


@router.get("/{card_id}", response_model=CardRead)
async def get_card(card_id: str, db: AsyncSession = Depends(get_db)):
    try:
        return CardRead.from_row(await CardRepository(db).get(card_id))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete("/{card_id}")
async def delete_card(card_id: str, db: AsyncSession = Depends(get_db)):
    try:
        await CardRepository(db).delete(card_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SQLAlchemyError as e:
        logger.error(f"Error deleting card {card_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete card")
    return {"success": True}


@router.post("/{card_id}/render", response_model=CardRead)
async def render_card(
    card_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    service: TemplateService = Depends(get_template_service),
):
    cards = CardRepository(db)
    try:
        card = await cards.get(card_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    if not card.template_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Card has no template")
    try:
        template = await TemplateRepository(db).get(card.template_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Card template no longer exists")

    try:
        result = await service.render(template, card.recipient_name, card.message or "")
        image_url = await request.app.state.card_store.store(result.image, card.id)
    except ProviderError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    except Exception as e:
        logger.error(f"Card render failed for {card_id}: {e}\n{traceback.format_exc()}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to render card")

    if result.error:
        logger.warning(f"Card {card_id} rendered with fallback background: {result.error}")
    return CardRead.from_row(await cards.set_image_url(card.id, image_url))
