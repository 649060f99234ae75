from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class ItemBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    quantity: int = Field(ge=0)
    category: str = Field(min_length=1, max_length=50)
    location: Optional[str] = Field(default=None, max_length=100)


class ItemCreate(ItemBase):
    @field_validator("name", "category", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)

    @field_validator("location")
    @classmethod
    def normalise_location(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)


class ItemUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    quantity: Optional[int] = Field(default=None, ge=0)
    category: Optional[str] = Field(default=None, min_length=1, max_length=50)
    location: Optional[str] = Field(default=None, max_length=100)

    @field_validator("name", "category", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)

    @field_validator("location")
    @classmethod
    def normalise_location(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)


class QuantityAdjust(BaseModel):
    quantity: int = Field(ge=0)


class ItemOut(ItemBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class ItemDeleted(BaseModel):
    success: bool = True
