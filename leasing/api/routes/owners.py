"""Unit, owner and client API routes."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leasing.api.deps import get_view_cache
from leasing.errors import EntityNotFoundError
from leasing.models import Client, Unit
from leasing.schemas.owners import ClientResponse, OwnerCreate, OwnerResponse, UnitResponse
from leasing.services import get_async_session
from leasing.services.cache import ACTIVE_OWNER_KEY, UNITS_KEY, ViewCache
from leasing.services.entity_store import OwnerData, SqlEntityStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["owners"])


@router.post(
    "/external-unit-owners",
    response_model=OwnerResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_owner(
    payload: OwnerCreate,
    db: AsyncSession = Depends(get_async_session),
    cache: ViewCache = Depends(get_view_cache),
) -> OwnerResponse:
    """
    Create an owner for a unit.

    Returns:
        201: Created owner
        404: Unit does not exist
    """
    owner = await SqlEntityStore(db).create_owner(
        payload.unit_id,
        OwnerData(name=payload.owner_name, email=payload.owner_email, phone=payload.owner_phone),
    )
    if not payload.is_active:
        owner.is_active = False
        await db.commit()
    cache.invalidate(ACTIVE_OWNER_KEY)
    return OwnerResponse.model_validate(owner)


@router.get("/external-unit-owners/active/{unit_id}", response_model=OwnerResponse)
async def get_active_owner(
    unit_id: int,
    db: AsyncSession = Depends(get_async_session),
    cache: ViewCache = Depends(get_view_cache),
) -> OwnerResponse:
    """Active owner of a unit; 404 when the unit has none."""

    async def load() -> OwnerResponse | None:
        owner = await SqlEntityStore(db).get_active_owner(unit_id)
        return OwnerResponse.model_validate(owner) if owner else None

    owner = await cache.get_or_load(ACTIVE_OWNER_KEY + (unit_id,), load)
    if owner is None:
        raise EntityNotFoundError("Active owner for unit", unit_id)
    return owner


@router.get("/external-units", response_model=list[UnitResponse])
async def list_units(
    db: AsyncSession = Depends(get_async_session),
    cache: ViewCache = Depends(get_view_cache),
) -> list[UnitResponse]:
    """All units with their availability."""

    async def load() -> list[UnitResponse]:
        units = (await db.execute(select(Unit).order_by(Unit.id))).scalars().all()
        return [UnitResponse.model_validate(unit) for unit in units]

    return await cache.get_or_load(UNITS_KEY, load)


@router.get("/external-clients/{client_id}", response_model=ClientResponse)
async def get_client(client_id: int, db: AsyncSession = Depends(get_async_session)) -> ClientResponse:
    client = await db.get(Client, client_id)
    if client is None:
        raise EntityNotFoundError("Client", client_id)
    return ClientResponse.model_validate(client)
