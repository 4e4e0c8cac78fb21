import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, Text, Date, DateTime, ForeignKey
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Person(Base):
    __tablename__ = "person"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    photo = Column(Text)
    date_of_birth = Column(Date)
    date_of_joining = Column(Date)
    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)


class Template(Base):
    __tablename__ = "template"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    url = Column(Text, nullable=False)  # remote URL or data URI
    card_type = Column(String, nullable=False, default="birthday")
    width = Column(Integer, nullable=False, default=800)
    height = Column(Integer, nullable=False, default=600)
    elements = Column(Text, nullable=False, default="[]")  # JSON-encoded element list
    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)


class Card(Base):
    __tablename__ = "card"

    id = Column(String(36), primary_key=True, default=_new_id)
    recipient_name = Column(String, nullable=False)
    message = Column(Text)
    photo_url = Column(Text)
    card_type = Column(String, nullable=False, default="birthday")
    image_url = Column(Text)
    person_id = Column(String(36), ForeignKey("person.id", ondelete="SET NULL"))
    template_id = Column(String(36), ForeignKey("template.id", ondelete="SET NULL"))
    created_at = Column(DateTime(timezone=True), default=_now)
