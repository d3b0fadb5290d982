"""Category data models."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator


class Category(BaseModel):
    category_id: str
    owner_id: str
    name: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class CategoryCreateRequest(BaseModel):
    """Request to create a category."""

    name: str = Field(..., max_length=100)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Category name is required")
        return v


class CategoryUpdateRequest(CategoryCreateRequest):
    """Request to rename a category."""


class CategoryListResponse(BaseModel):
    owner_id: str
    categories: list[Category]
    total: int
