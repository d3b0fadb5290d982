"""Card manager for owner collections."""

import logging
import uuid

from ..models.card import Card, CardCreateRequest, CardUpdateRequest
from ..storage import Database
from ..telemetry import TelemetryEvents, track_event

logger = logging.getLogger(__name__)


class CardManager:
    """Manages the cards of an owner's collection."""

    def __init__(self, db: Database):
        """Initialize card manager.

        Args:
            db: Database instance
        """
        self.db = db

    async def list_cards(self, owner_id: str) -> list[Card]:
        """List all cards of an owner, oldest first."""
        rows = await self.db.list_cards(owner_id)
        return [Card(**row) for row in rows]

    async def get_card(self, card_id: str, owner_id: str) -> Card | None:
        """Get card by ID.

        Args:
            card_id: Card identifier
            owner_id: Subject id of the owner

        Returns:
            Card or None if the owner has no such card
        """
        row = await self.db.get_card(card_id, owner_id)
        return Card(**row) if row else None

    async def create_card(self, owner_id: str, request: CardCreateRequest) -> Card:
        """Create a new card.

        Args:
            owner_id: Subject id of the verified caller
            request: Card fields

        Returns:
            Card: The created card

        Raises:
            DuplicateCardName: If the owner already has a card with this name
        """
        card_id = str(uuid.uuid4())

        row = await self.db.create_card(
            card_id=card_id,
            owner_id=owner_id,
            name=request.name,
            description=request.description,
            image=request.image,
            image_public_id=request.image_public_id,
            score=request.score,
            categories=request.categories,
        )

        track_event(
            TelemetryEvents.CARD_CREATED,
            {"card_id": card_id, "owner_id": owner_id, "category_count": len(request.categories)},
        )

        logger.info(f"Created card: {card_id} ({request.name}) for owner {owner_id}")
        return Card(**row)

    async def update_card(
        self, card_id: str, owner_id: str, request: CardUpdateRequest
    ) -> Card | None:
        """Update the fields set on the request.

        Returns:
            Updated card or None if the owner has no such card

        Raises:
            DuplicateCardName: If the new name clashes with another of the owner's cards
        """
        changes = request.model_dump(exclude_unset=True)
        # name and score columns are NOT NULL; an explicit null means "leave unchanged"
        changes = {key: value for key, value in changes.items() if value is not None}

        row = await self.db.update_card(card_id, owner_id, **changes)
        if not row:
            return None

        track_event(
            TelemetryEvents.CARD_UPDATED,
            {"card_id": card_id, "owner_id": owner_id, "fields": ",".join(sorted(changes))},
        )

        logger.info(f"Updated card: {card_id}")
        return Card(**row)

    async def delete_card(self, card_id: str, owner_id: str) -> bool:
        """Delete a card. Returns False if the owner has no such card."""
        deleted = await self.db.delete_card(card_id, owner_id)

        if deleted:
            track_event(TelemetryEvents.CARD_DELETED, {"card_id": card_id, "owner_id": owner_id})
            logger.info(f"Deleted card: {card_id}")

        return deleted
