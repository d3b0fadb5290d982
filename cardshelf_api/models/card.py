"""Card data models."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator


class Card(BaseModel):
    """A tracked title in an owner's collection."""

    card_id: str
    owner_id: str
    name: str
    description: str = ""
    image: str = ""
    image_public_id: str | None = None
    score: float = 0.0
    categories: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class CardCreateRequest(BaseModel):
    """Request to create a card (POST only; owner comes from the token)."""

    name: str = Field(..., description="Title of the card", min_length=1, max_length=200)
    description: str = ""
    image: str = Field("", description="URL of the hosted artwork")
    image_public_id: str | None = Field(None, description="Image host reference for the artwork")
    score: float = Field(0.0, ge=0, le=10)
    categories: list[str] = Field(default_factory=list, description="Category ids")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class CardUpdateRequest(BaseModel):
    """Request to update a card (PUT only). Unset fields are left unchanged."""

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    image: str | None = None
    image_public_id: str | None = None
    score: float | None = Field(None, ge=0, le=10)
    categories: list[str] | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class CardListResponse(BaseModel):
    """Cards of the resolved owner."""

    owner_id: str
    cards: list[Card]
    total: int
