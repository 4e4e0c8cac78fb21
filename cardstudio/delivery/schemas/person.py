from datetime import date
from typing import Optional

from pydantic import Field, field_validator

from cardstudio.delivery.schemas.template import CamelModel
from cardstudio.domain.notifications import is_valid_email


class PersonBase(CamelModel):
    name: str = Field(min_length=1)
    email: str
    photo: Optional[str] = None
    date_of_birth: Optional[date] = None
    date_of_joining: Optional[date] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("email")
    @classmethod
    def _email_format(cls, v: str) -> str:
        v = v.strip()
        if not is_valid_email(v):
            raise ValueError("Email must look like name@domain.tld")
        return v

    @field_validator("photo")
    @classmethod
    def _photo_reference(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        if not v.startswith(("http://", "https://", "data:image/", "/")):
            raise ValueError("Photo must be an http(s) URL, a data URI or a site path")
        return v


class PersonCreate(PersonBase):
    pass


class PersonRead(CamelModel):
    id: str
    name: str
    email: str
    photo: Optional[str] = None
    date_of_birth: Optional[date] = None
    date_of_joining: Optional[date] = None

    @classmethod
    def from_row(cls, row) -> "PersonRead":
        return cls(
            id=row.id,
            name=row.name,
            email=row.email,
            photo=row.photo,
            date_of_birth=row.date_of_birth,
            date_of_joining=row.date_of_joining,
        )
