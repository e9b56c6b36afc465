from typing import Annotated, List

from pydantic import BaseModel, Field

from app.models.utils import camel_config


class PlaceFields(BaseModel):
    """Editable listing fields, shared by create and update payloads"""

    model_config = camel_config

    title: Annotated[str, Field(max_length=200)] | None = None
    address: Annotated[str, Field(max_length=500)] | None = None
    photos: List[Annotated[str, Field(max_length=200)]] = Field(default_factory=list)
    description: str | None = None
    bedroom: int | None = None
    bed: int | None = None
    bath: int | None = None
    max_guests: int | None = None
    perks: List[str] = Field(default_factory=list)
    extra_info: str | None = None
    checkin: str | None = None
    checkout: str | None = None
    price: float | None = None


class PlaceUpdate(PlaceFields):
    id: str


class Place(PlaceFields):
    id: str
    owner: str


class Pagination(BaseModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int
    has_next: bool
    has_previous: bool


class PlacePage(BaseModel):
    places: List[Place]
    pagination: Pagination
