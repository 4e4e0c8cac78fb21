import base64
import binascii
import re
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator, model_validator
from pydantic.alias_generators import to_camel

PROFILE_PHOTO_LABEL = "Profile Photo"
DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600

_DATA_URI_RE = re.compile(r"^data:image/[\w.+-]+;base64,(?P<payload>.+)$", re.DOTALL)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CardType(str, Enum):
    BIRTHDAY = "birthday"
    ANNIVERSARY = "anniversary"


class TextElement(CamelModel):
    id: str
    type: Literal["text"] = "text"
    x: float
    y: float
    label: str = ""
    font_size: PositiveInt = 24
    font_family: str = "Arial"
    color: str = "#ffffff"
    stroke_color: Optional[str] = None
    stroke_width: Optional[int] = None
    align: Literal["left", "center", "right"] = "center"


class ImageElement(CamelModel):
    id: str
    type: Literal["image"] = "image"
    x: float
    y: float
    label: str = ""
    width: PositiveInt = 150
    height: PositiveInt = 150

    @property
    def is_profile_photo(self) -> bool:
        return self.label == PROFILE_PHOTO_LABEL


Element = Annotated[Union[TextElement, ImageElement], Field(discriminator="type")]


def _check_unique_ids(elements: List[Union[TextElement, ImageElement]]) -> None:
    seen = set()
    for el in elements:
        if el.id in seen:
            raise ValueError(f"Element id '{el.id}' is used more than once")
        seen.add(el.id)


def decoded_data_uri_size(url: str) -> Optional[int]:
    """Byte size of an inline base64 image, or None when `url` is not a data URI."""
    m = _DATA_URI_RE.match(url)
    if not m:
        return None
    try:
        return len(base64.b64decode(m.group("payload"), validate=True))
    except (binascii.Error, ValueError):
        raise ValueError("Background image data URI is not valid base64")


class Template(CamelModel):
    """A card design: background reference plus elements in paint order.

    `id` is None for an unsaved draft.
    """
    id: Optional[str] = None
    name: str = ""
    url: str = ""
    card_type: CardType = CardType.BIRTHDAY
    width: PositiveInt = DEFAULT_WIDTH
    height: PositiveInt = DEFAULT_HEIGHT
    elements: List[Element] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_element_ids(self) -> "Template":
        _check_unique_ids(self.elements)
        return self


class TemplateCreate(CamelModel):
    name: str = Field(min_length=1)
    url: str
    card_type: CardType = CardType.BIRTHDAY
    width: PositiveInt = DEFAULT_WIDTH
    height: PositiveInt = DEFAULT_HEIGHT
    elements: List[Element] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_element_ids(self) -> "TemplateCreate":
        _check_unique_ids(self.elements)
        return self

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Template name is required")
        return v.strip()

    @field_validator("url")
    @classmethod
    def _check_background(cls, v: str) -> str:
        v = v.strip()
        if v.startswith(("http://", "https://")):
            return v
        if decoded_data_uri_size(v) is None:
            raise ValueError("Background must be an http(s) URL or a base64 image data URI")
        return v


class RenderRequest(CamelModel):
    name: str = ""
    message: str = ""
    width: Optional[PositiveInt] = None
    height: Optional[PositiveInt] = None
    overlay: bool = True
