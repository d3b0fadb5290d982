"""Category manager."""

import logging
import uuid

from ..models.category import Category
from ..storage import Database
from ..telemetry import TelemetryEvents, track_event

logger = logging.getLogger(__name__)


class CategoryManager:
    """Manages the categories an owner files cards under."""

    def __init__(self, db: Database):
        self.db = db

    async def list_categories(self, owner_id: str) -> list[Category]:
        rows = await self.db.list_categories(owner_id)
        return [Category(**row) for row in rows]

    async def create_category(self, owner_id: str, name: str) -> Category:
        category_id = str(uuid.uuid4())
        row = await self.db.create_category(category_id, owner_id, name)

        track_event(
            TelemetryEvents.CATEGORY_CREATED, {"category_id": category_id, "owner_id": owner_id}
        )
        logger.info(f"Created category: {category_id} ({name}) for owner {owner_id}")
        return Category(**row)

    async def rename_category(self, category_id: str, owner_id: str, name: str) -> Category | None:
        """Rename a category. Returns None if the owner has no such category."""
        row = await self.db.rename_category(category_id, owner_id, name)
        if not row:
            return None

        track_event(
            TelemetryEvents.CATEGORY_UPDATED, {"category_id": category_id, "owner_id": owner_id}
        )
        return Category(**row)

    async def delete_category(self, category_id: str, owner_id: str) -> bool:
        """Delete a category; its id is removed from the owner's cards as well."""
        deleted = await self.db.delete_category(category_id, owner_id)

        if deleted:
            track_event(
                TelemetryEvents.CATEGORY_DELETED, {"category_id": category_id, "owner_id": owner_id}
            )
            logger.info(f"Deleted category: {category_id}")

        return deleted
