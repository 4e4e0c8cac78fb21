# cardstudio/infrastructure/database/repositories.py
"""Whole-row CRUD over people, templates and cards.

`TemplateRepository` is the only place where a template's element list is
encoded to / decoded from its stored JSON text.
"""
import logging
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cardstudio.delivery.schemas.card import CardCreate
from cardstudio.delivery.schemas.person import PersonCreate
from cardstudio.delivery.schemas.template import Element, Template, TemplateCreate
from cardstudio.domain.errors import NotFoundError
from cardstudio.infrastructure.database import models

logger = logging.getLogger(__name__)

_elements_adapter = TypeAdapter(List[Element])


def encode_elements(elements: List[Element]) -> str:
    return _elements_adapter.dump_json(elements, by_alias=True).decode("utf-8")


def decode_elements(raw: Optional[str], template_id: Optional[str] = None) -> List[Element]:
    if not raw:
        return []
    try:
        return _elements_adapter.validate_json(raw)
    except PydanticValidationError as e:
        logger.error(f"Error parsing elements for template {template_id}: {e.error_count()} problem(s)")
        return []


def template_from_row(row: models.Template) -> Template:
    return Template(
        id=row.id,
        name=row.name,
        url=row.url,
        card_type=row.card_type,
        width=row.width,
        height=row.height,
        elements=decode_elements(row.elements, row.id),
    )


class PersonRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list(self) -> List[models.Person]:
        result = await self.session.execute(select(models.Person).order_by(models.Person.name.asc()))
        return list(result.scalars().all())

    async def get(self, person_id: str) -> models.Person:
        person = await self.session.get(models.Person, person_id)
        if person is None:
            raise NotFoundError("Person not found")
        return person

    async def create(self, data: PersonCreate) -> models.Person:
        person = models.Person(**data.model_dump())
        self.session.add(person)
        await self.session.commit()
        await self.session.refresh(person)
        return person

    async def update(self, person_id: str, data: PersonCreate) -> models.Person:
        person = await self.get(person_id)
        for key, value in data.model_dump().items():
            setattr(person, key, value)
        await self.session.commit()
        await self.session.refresh(person)
        return person

    async def delete(self, person_id: str) -> None:
        person = await self.get(person_id)
        await self.session.delete(person)
        await self.session.commit()


class TemplateRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _row(self, template_id: str) -> models.Template:
        row = await self.session.get(models.Template, template_id)
        if row is None:
            raise NotFoundError("Template not found")
        return row

    async def list(self) -> List[Template]:
        result = await self.session.execute(select(models.Template).order_by(models.Template.name.asc()))
        return [template_from_row(row) for row in result.scalars().all()]

    async def get(self, template_id: str) -> Template:
        return template_from_row(await self._row(template_id))

    def _apply(self, row: models.Template, data: TemplateCreate) -> None:
        row.name = data.name
        row.url = data.url
        row.card_type = data.card_type.value
        row.width = data.width
        row.height = data.height
        row.elements = encode_elements(data.elements)

    async def create(self, data: TemplateCreate) -> Template:
        row = models.Template()
        self._apply(row, data)
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        return template_from_row(row)

    async def update(self, template_id: str, data: TemplateCreate) -> Template:
        row = await self._row(template_id)
        self._apply(row, data)
        await self.session.commit()
        await self.session.refresh(row)
        return template_from_row(row)

    async def delete(self, template_id: str) -> None:
        row = await self._row(template_id)
        await self.session.delete(row)
        await self.session.commit()


class CardRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list(self) -> List[models.Card]:
        result = await self.session.execute(select(models.Card).order_by(models.Card.created_at.desc()))
        return list(result.scalars().all())

    async def get(self, card_id: str) -> models.Card:
        card = await self.session.get(models.Card, card_id)
        if card is None:
            raise NotFoundError("Card not found")
        return card

    async def create(self, data: CardCreate) -> models.Card:
        card = models.Card(**data.model_dump())
        card.card_type = data.card_type.value
        self.session.add(card)
        await self.session.commit()
        await self.session.refresh(card)
        return card

    async def set_image_url(self, card_id: str, image_url: str) -> models.Card:
        card = await self.get(card_id)
        card.image_url = image_url
        await self.session.commit()
        await self.session.refresh(card)
        return card

    async def delete(self, card_id: str) -> None:
        card = await self.get(card_id)
        await self.session.delete(card)
        await self.session.commit()
