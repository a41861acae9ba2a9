"""Client (pet owner) management API."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pawscript.api import deps
from pawscript.models.client import Client
from pawscript.models.user import User
from pawscript.schemas.client import ClientCreate, ClientRead, ClientUpdate
from pawscript.services import audit_service, client_service

router = APIRouter()


@router.get("", response_model=list[ClientRead], summary="List clients")
async def list_clients(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    skip: int = 0,
    limit: int = 50,
    q: str | None = Query(default=None),
    is_active: bool | None = Query(default=None),
) -> list[ClientRead]:
    clients = await client_service.list_clients(
        session,
        clinic_id=current_user.clinic_id,
        skip=skip,
        limit=min(limit, 100),
        search=q,
        is_active=is_active,
    )
    return [ClientRead.model_validate(client) for client in clients]


@router.post(
    "",
    response_model=ClientRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create client",
)
async def create_client(
    payload: ClientCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> ClientRead:
    client = await client_service.create_client(
        session, payload, clinic_id=current_user.clinic_id
    )
    await audit_service.record_event(
        session,
        clinic_id=current_user.clinic_id,
        user_id=current_user.id,
        event_type="client.created",
        entity_id=client.id,
    )
    return ClientRead.model_validate(client)


async def _get_client_or_404(
    session: AsyncSession, current_user: User, client_id: uuid.UUID
) -> Client:
    client = await client_service.get_client(
        session, clinic_id=current_user.clinic_id, client_id=client_id
    )
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Client not found"
        )
    return client


@router.get("/{client_id}", response_model=ClientRead, summary="Get client")
async def get_client(
    client_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> ClientRead:
    client = await _get_client_or_404(session, current_user, client_id)
    return ClientRead.model_validate(client)


@router.patch("/{client_id}", response_model=ClientRead, summary="Update client")
async def update_client(
    client_id: uuid.UUID,
    payload: ClientUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> ClientRead:
    client = await _get_client_or_404(session, current_user, client_id)
    client = await client_service.update_client(
        session, client=client, payload=payload
    )
    return ClientRead.model_validate(client)
