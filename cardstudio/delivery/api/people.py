# cardstudio/delivery/api/people.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardstudio.config.database import get_db
from cardstudio.delivery.schemas.person import PersonCreate, PersonRead
from cardstudio.domain.errors import NotFoundError
from cardstudio.infrastructure.database.repositories import PersonRepository

router = APIRouter(tags=["people"])
logger = logging.getLogger("uvicorn.error")


@router.get("/people", response_model=List[PersonRead])
@router.get("/person", response_model=List[PersonRead], include_in_schema=False)
async def list_people(db: AsyncSession = Depends(get_db)):
    try:
        return [PersonRead.from_row(p) for p in await PersonRepository(db).list()]
    except SQLAlchemyError as e:
        logger.error(f"Error fetching people: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch people")


@router.post("/people", response_model=PersonRead, status_code=status.HTTP_201_CREATED)
@router.post("/person", response_model=PersonRead, status_code=status.HTTP_201_CREATED, include_in_schema=False)
async def create_person(body: PersonCreate, db: AsyncSession = Depends(get_db)):
    try:
        person = await PersonRepository(db).create(body)
    except SQLAlchemyError as e:
        logger.error(f"Error creating person: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create person")
    logger.info(f"Person created: {person.id}")
    return PersonRead.from_row(person)


@router.get("/people/{person_id}", response_model=PersonRead)
@router.get("/person/{person_id}", response_model=PersonRead, include_in_schema=False)
async def get_person(person_id: str, db: AsyncSession = Depends(get_db)):
    try:
        return PersonRead.from_row(await PersonRepository(db).get(person_id))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SQLAlchemyError as e:
        logger.error(f"Error fetching person {person_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch person")


@router.put("/people/{person_id}", response_model=PersonRead)
@router.put("/person/{person_id}", response_model=PersonRead, include_in_schema=False)
async def update_person(person_id: str, body: PersonCreate, db: AsyncSession = Depends(get_db)):
    try:
        return PersonRead.from_row(await PersonRepository(db).update(person_id, body))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SQLAlchemyError as e:
        logger.error(f"Error updating person {person_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update person")


@router.delete("/people/{person_id}")
@router.delete("/person/{person_id}", include_in_schema=False)
async def delete_person(person_id: str, db: AsyncSession = Depends(get_db)):
    try:
        await PersonRepository(db).delete(person_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SQLAlchemyError as e:
        logger.error(f"Error deleting person {person_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete person")
    return {"message": "Person deleted successfully"}
