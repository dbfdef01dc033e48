from pydantic import BaseModel, field_validator
from typing import Optional, List
import re

_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")
DEFAULT_TAG_COLOR = "#6b7280"


class TagCreate(BaseModel):
    name: str
    color: str = DEFAULT_TAG_COLOR

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Tag name must not be empty")
        return value.strip()

    @field_validator("color")
    @classmethod
    def color_is_hex(cls, value: str) -> str:
        if not _COLOR_RE.match(value):
            raise ValueError("Color must look like #rrggbb")
        return value.lower()


class TagResponse(BaseModel):
    id: str
    name: str
    color: Optional[str] = None

    class Config:
        from_attributes = True


class ItemTagsUpdate(BaseModel):
    tag_ids: List[str] = []


class ItemTagsResponse(BaseModel):
    item_id: str
    tag_ids: List[str]
    added: int = 0
    removed: int = 0
