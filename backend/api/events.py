"""
Payload models for inbound session events.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

MAX_PATH_CELLS = 500


def _blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
    return value or None


class EmptyPayload(BaseModel):
    """Events that carry no data."""


class JoinPayload(BaseModel):
    """Join the board under a name, color and role."""
    name: Optional[str] = None
    color: Optional[str] = None
    avatar: Optional[str] = None
    isMJ: bool = False

    @field_validator("name", "color", "avatar", mode="before")
    @classmethod
    def blank_is_missing(cls, v):
        return _blank_to_none(v)


class CellPayload(BaseModel):
    """Axial coordinates of a cell."""
    q: int
    r: int

    @property
    def cell_id(self) -> str:
        return f"{self.q},{self.r}"


class ColoredCellPayload(CellPayload):
    """A cell plus an optional color override (hover and click)."""
    color: Optional[str] = None

    @field_validator("color", mode="before")
    @classmethod
    def blank_is_missing(cls, v):
        return _blank_to_none(v)


class PathPayload(BaseModel):
    """A move preview; an empty path clears the sender's preview."""
    path: List[CellPayload] = Field(default_factory=list, max_length=MAX_PATH_CELLS)
    color: Optional[str] = None
    startId: Optional[str] = None


class BackgroundPayload(BaseModel):
    """New background image URL, or None to clear it."""
    url: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def accept_bare_url(cls, data):
        if data is None or isinstance(data, str):
            return {"url": data}
        return data


class GridTypePayload(BaseModel):
    """Grid density."""
    type: Literal["standard", "fine"]

    @model_validator(mode="before")
    @classmethod
    def accept_bare_type(cls, data):
        if isinstance(data, str):
            return {"type": data}
        return data
