from pydantic import BaseModel, field_validator
from typing import Optional, Literal

FolderKind = Literal["documents", "flashcards", "quizzes"]


class FolderCreate(BaseModel):
    name: str
    kind: FolderKind
    parent_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Folder name must not be empty")
        return value.strip()


class FolderUpdate(BaseModel):
    name: Optional[str] = None
    parent_id: Optional[str] = None
    move: bool = False  # parent_id is applied only when true, so null can mean "move to root"


class FolderResponse(BaseModel):
    id: str
    name: str
    parent_id: Optional[str] = None
    kind: FolderKind
    path: Optional[str] = None

    class Config:
        from_attributes = True
