from datetime import datetime
from typing import Optional

from pydantic import Field

from cardstudio.delivery.schemas.template import CamelModel, CardType


class CardCreate(CamelModel):
    recipient_name: str = Field(min_length=1)
    message: Optional[str] = None
    photo_url: Optional[str] = None
    card_type: CardType = CardType.BIRTHDAY
    image_url: Optional[str] = None
    person_id: Optional[str] = None
    template_id: Optional[str] = None


class CardRead(CardCreate):
    id: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "CardRead":
        return cls(
            id=row.id,
            recipient_name=row.recipient_name,
            message=row.message,
            photo_url=row.photo_url,
            card_type=row.card_type,
            image_url=row.image_url,
            person_id=row.person_id,
            template_id=row.template_id,
            created_at=row.created_at,
        )
