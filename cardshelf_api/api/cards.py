"""Card endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..core import CardManager
from ..middleware.auth import get_current_owner, get_read_owner
from ..models import Card, CardCreateRequest, CardListResponse, CardUpdateRequest, MessageResponse
from ..storage import Database, DuplicateCardName, get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cards", tags=["cards"])


async def get_card_manager(db: Database = Depends(get_db)) -> CardManager:
    """Dependency to get card manager instance."""
    return CardManager(db)


@router.get("", response_model=CardListResponse)
async def list_cards(
    owner_id: str = Depends(get_read_owner),
    manager: CardManager = Depends(get_card_manager),
) -> CardListResponse:
    """
    List the cards of the resolved owner.

    `owner=template` shows the showcase collection, `handle=<h>` a public
    profile; otherwise the caller's own cards, or the showcase for anonymous
    visitors.
    """
    cards = await manager.list_cards(owner_id)
    return CardListResponse(owner_id=owner_id, cards=cards, total=len(cards))


@router.get("/{card_id}", response_model=Card)
async def get_card(
    card_id: str,
    owner_id: str = Depends(get_current_owner),
    manager: CardManager = Depends(get_card_manager),
) -> Card:
    """Get one of the caller's cards."""
    card = await manager.get_card(card_id, owner_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    return card


@router.post("", response_model=Card, status_code=201)
async def create_card(
    request: CardCreateRequest,
    owner_id: str = Depends(get_current_owner),
    manager: CardManager = Depends(get_card_manager),
) -> Card:
    """Add a card to the caller's collection."""
    try:
        return await manager.create_card(owner_id, request)
    except DuplicateCardName as e:
        raise HTTPException(status_code=409, detail=str(e)) from e


@router.put("/{card_id}", response_model=Card)
async def update_card(
    card_id: str,
    request: CardUpdateRequest,
    owner_id: str = Depends(get_current_owner),
    manager: CardManager = Depends(get_card_manager),
) -> Card:
    """Update one of the caller's cards. Fields left out are not changed."""
    try:
        card = await manager.update_card(card_id, owner_id, request)
    except DuplicateCardName as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    return card


@router.delete("/{card_id}", response_model=MessageResponse)
async def delete_card(
    card_id: str,
    owner_id: str = Depends(get_current_owner),
    manager: CardManager = Depends(get_card_manager),
) -> MessageResponse:
    """Delete one of the caller's cards."""
    deleted = await manager.delete_card(card_id, owner_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Card not found")
    return MessageResponse(message="Card deleted")
