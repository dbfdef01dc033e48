from fastapi import APIRouter, Depends
from cfahub.modules.quizzes.schemas import (
    QuestionCreate, QuestionUpdate, QuestionResponse, QuizExport, AttemptCreate, AttemptResponse
)
from cfahub.modules.quizzes.service import QuizService
from cfahub.core.dependencies import get_current_user, get_db, get_access_cache, get_locale, get_user_group_ids
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/quiz-sets", tags=["quizzes"])


def get_quiz_service(db: Client = Depends(get_db)) -> QuizService:
    return QuizService(db)


@router.get("/{set_id}/questions", response_model=List[QuestionResponse])
async def list_questions(
    set_id: str,
    user_data: Dict = Depends(get_current_user),
    service: QuizService = Depends(get_quiz_service),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache)
):
    """Questions of a quiz set in order"""
    return service.list_questions(set_id, user_data["id"], get_user_group_ids(user_data["id"], db, cache))


@router.post("/{set_id}/questions", response_model=QuestionResponse, status_code=201)
async def add_question(
    set_id: str,
    question: QuestionCreate,
    user_data: Dict = Depends(get_current_user),
    service: QuizService = Depends(get_quiz_service),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache),
    locale: str = Depends(get_locale)
):
    """Append a question"""
    member_groups = get_user_group_ids(user_data["id"], db, cache)
    return service.add_question(set_id, question, user_data["id"], member_groups, locale)


@router.put("/{set_id}/questions/{question_id}", response_model=QuestionResponse)
async def update_question(
    set_id: str,
    question_id: str,
    question: QuestionUpdate,
    user_data: Dict = Depends(get_current_user),
    service: QuizService = Depends(get_quiz_service),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache),
    locale: str = Depends(get_locale)
):
    """Edit a question"""
    member_groups = get_user_group_ids(user_data["id"], db, cache)
    return service.update_question(set_id, question_id, question, user_data["id"], member_groups, locale)


@router.delete("/{set_id}/questions/{question_id}", status_code=204)
async def delete_question(
    set_id: str,
    question_id: str,
    user_data: Dict = Depends(get_current_user),
    service: QuizService = Depends(get_quiz_service),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache)
):
    """Delete a question and close the gap in positions"""
    service.delete_question(set_id, question_id, user_data["id"], get_user_group_ids(user_data["id"], db, cache))
    return None


@router.get("/{set_id}/export", response_model=QuizExport)
async def export_questions(
    set_id: str,
    user_data: Dict = Depends(get_current_user),
    service: QuizService = Depends(get_quiz_service),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache)
):
    """Questions as {"version": 1, "questions": [...]}"""
    return service.export_questions(set_id, user_data["id"], get_user_group_ids(user_data["id"], db, cache))


@router.post("/{set_id}/import", response_model=List[QuestionResponse])
async def import_questions(
    set_id: str,
    payload: QuizExport,
    user_data: Dict = Depends(get_current_user),
    service: QuizService = Depends(get_quiz_service),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache),
    locale: str = Depends(get_locale)
):
    """Replace every question of the set with the exported payload"""
    member_groups = get_user_group_ids(user_data["id"], db, cache)
    return service.import_questions(set_id, payload, user_data["id"], member_groups, locale)


@router.post("/{set_id}/attempts", response_model=AttemptResponse, status_code=201)
async def submit_attempt(
    set_id: str,
    attempt: AttemptCreate,
    user_data: Dict = Depends(get_current_user),
    service: QuizService = Depends(get_quiz_service),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache),
    locale: str = Depends(get_locale)
):
    """Score a finished run and record it"""
    member_groups = get_user_group_ids(user_data["id"], db, cache)
    return service.submit_attempt(set_id, attempt, user_data["id"], member_groups, locale)


@router.get("/{set_id}/attempts", response_model=List[AttemptResponse])
async def list_attempts(
    set_id: str,
    user_data: Dict = Depends(get_current_user),
    service: QuizService = Depends(get_quiz_service)
):
    """The caller's previous attempts"""
    return service.list_attempts(set_id, user_data["id"])
