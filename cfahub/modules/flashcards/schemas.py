from pydantic import BaseModel
from typing import Optional


class CardCreate(BaseModel):
    front: str
    back: str


class CardResponse(BaseModel):
    id: str
    set_id: str
    front: str
    back: str
    position: Optional[int] = None

    class Config:
        from_attributes = True


class TsvImport(BaseModel):
    text: str


class TsvExport(BaseModel):
    text: str
    count: int


class ReviewState(BaseModel):
    index: int
    flipped: bool
    progress: str
    has_prev: bool
    has_next: bool
    card: Optional[CardResponse] = None
    face: Optional[str] = None
