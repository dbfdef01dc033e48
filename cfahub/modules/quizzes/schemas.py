from pydantic import BaseModel
from typing import Optional, List, Any


class QuestionCreate(BaseModel):
    prompt: str
    choices: List[str]
    correct: int = 1  # 1-based, clamped into range
    explanation: Optional[str] = None


class QuestionUpdate(QuestionCreate):
    pass


class QuestionResponse(BaseModel):
    id: str
    set_id: str
    prompt: str
    choices: List[str]
    correct_index: int
    explanation: Optional[str] = None
    position: int

    class Config:
        from_attributes = True


class ExportedQuestion(BaseModel):
    prompt: Any = ""
    choices: Any = []
    correct_index: Any = 0
    explanation: Optional[Any] = None


class QuizExport(BaseModel):
    version: int = 1
    questions: List[ExportedQuestion] = []


class AttemptCreate(BaseModel):
    answers: List[Optional[int]]  # 0-based choice per question, None when skipped
    duration_seconds: Optional[int] = None


class AttemptResponse(BaseModel):
    set_id: str
    score: int
    total: int
    duration_seconds: Optional[int] = None
    correct: List[bool] = []
