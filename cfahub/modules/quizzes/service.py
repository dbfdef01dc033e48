from supabase import Client
from cfahub.core.errors import ContentValidationError, backend_failure, validation_failure
from cfahub.modules.content.service import ContentService
from cfahub.modules.quizzes.runner import QuizRun
from cfahub.modules.quizzes.schemas import (
    QuestionCreate, QuestionUpdate, QuestionResponse, QuizExport, ExportedQuestion,
    AttemptCreate, AttemptResponse
)
from typing import Any, List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

MIN_CHOICES = 2
MAX_CHOICES = 6
EXPORT_VERSION = 1

QUESTION_COLUMNS = "id,set_id,prompt,choices,correct_index,explanation,position"


def build_question(prompt: Any, choices: Any, correct: Any, explanation: Any = None) -> dict:
    """
    Cleaned question fields. `correct` is 1-based and is clamped into the
    choice range; the stored index is 0-based.
    """
    text = str(prompt or "").strip()
    if not text:
        raise ContentValidationError("prompt_required")
    lines = [str(c).strip() for c in (choices if isinstance(choices, list) else [])]
    lines = [c for c in lines if c]
    if len(lines) < MIN_CHOICES or len(lines) > MAX_CHOICES:
        raise ContentValidationError("choices_range")
    try:
        wanted = int(correct)
    except (TypeError, ValueError):
        wanted = 1
    index = max(1, min(len(lines), wanted or 1)) - 1
    note = str(explanation).strip() if explanation else ""
    return {
        "prompt": text,
        "choices": lines,
        "correct_index": index,
        "explanation": note or None
    }


def parse_import(payload: QuizExport) -> List[dict]:
    """Validate every imported question before anything is written"""
    if not payload.questions:
        raise ContentValidationError("no_questions")
    rows = []
    for number, question in enumerate(payload.questions, start=1):
        try:
            correct = int(question.correct_index or 0) + 1
        except (TypeError, ValueError):
            correct = 1
        try:
            rows.append(build_question(question.prompt, question.choices, correct, question.explanation))
        except ContentValidationError:
            raise ContentValidationError("import_question_invalid", number=number)
    return rows


class QuizService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.sets = ContentService(supabase, "quizzes")

    def _fetch_questions(self, set_id: str) -> List[dict]:
        result = self.supabase.table("quiz_questions")\
            .select(QUESTION_COLUMNS)\
            .eq("set_id", set_id)\
            .order("position", desc=False)\
            .execute()
        return result.data or []

    def list_questions(self, set_id: str, user_id: str, member_group_ids: List[str]) -> List[QuestionResponse]:
        self.sets.require_view(set_id, user_id, member_group_ids)
        try:
            return [QuestionResponse(**row) for row in self._fetch_questions(set_id)]
        except Exception as e:
            raise backend_failure(e, f"Listing questions of {set_id}")

    def add_question(self, set_id: str, question: QuestionCreate, user_id: str, member_group_ids: List[str], locale: str) -> QuestionResponse:
        """Append a question at position = current count"""
        try:
            fields = build_question(question.prompt, question.choices, question.correct, question.explanation)
        except ContentValidationError as e:
            raise validation_failure(e, locale)
        self.sets.require_edit(set_id, user_id, member_group_ids)
        try:
            position = len(self._fetch_questions(set_id))
            result = self.supabase.table("quiz_questions").insert({
                "set_id": set_id,
                **fields,
                "position": position
            }).execute()
            if not result.data:
                raise HTTPException(status_code=502, detail="Failed to add question")
            return QuestionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise backend_failure(e, f"Adding question to {set_id}")

    def update_question(self, set_id: str, question_id: str, question: QuestionUpdate, user_id: str, member_group_ids: List[str], locale: str) -> QuestionResponse:
        try:
            fields = build_question(question.prompt, question.choices, question.correct, question.explanation)
        except ContentValidationError as e:
            raise validation_failure(e, locale)
        self.sets.require_edit(set_id, user_id, member_group_ids)
        try:
            result = self.supabase.table("quiz_questions")\
                .update(fields)\
                .eq("id", question_id)\
                .eq("set_id", set_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Question not found")
            return QuestionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise backend_failure(e, f"Updating question {question_id}")

    def reindex_positions(self, set_id: str) -> int:
        """Rewrite positions to 0..n-1 in current order; returns the number of rows touched"""
        touched = 0
        for index, row in enumerate(self._fetch_questions(set_id)):
            if row.get("position") == index:
                continue
            self.supabase.table("quiz_questions")\
                .update({"position": index})\
                .eq("id", row["id"])\
                .eq("set_id", set_id)\
                .execute()
            touched += 1
        return touched

    def delete_question(self, set_id: str, question_id: str, user_id: str, member_group_ids: List[str]) -> bool:
        self.sets.require_edit(set_id, user_id, member_group_ids)
        try:
            result = self.supabase.table("quiz_questions")\
                .delete()\
                .eq("id", question_id)\
                .eq("set_id", set_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Question not found")
            self.reindex_positions(set_id)
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise backend_failure(e, f"Deleting question {question_id}")

    def export_questions(self, set_id: str, user_id: str, member_group_ids: List[str]) -> QuizExport:
        questions = self.list_questions(set_id, user_id, member_group_ids)
        return QuizExport(
            version=EXPORT_VERSION,
            questions=[
                ExportedQuestion(
                    prompt=q.prompt,
                    choices=q.choices,
                    correct_index=q.correct_index,
                    explanation=q.explanation
                )
                for q in questions
            ]
        )

    def import_questions(self, set_id: str, payload: QuizExport, user_id: str, member_group_ids: List[str], locale: str) -> List[QuestionResponse]:
        """Replace all questions of the set with the imported ones"""
        try:
            rows = parse_import(payload)
        except ContentValidationError as e:
            raise validation_failure(e, locale)
        self.sets.require_edit(set_id, user_id, member_group_ids)
        try:
            self.supabase.table("quiz_questions").delete().eq("set_id", set_id).execute()
            result = self.supabase.table("quiz_questions")\
                .insert([{"set_id": set_id, **row, "position": k} for k, row in enumerate(rows)])\
                .execute()
            logger.info(f"Imported {len(rows)} questions into {set_id}")
            return [QuestionResponse(**row) for row in result.data or []]
        except Exception as e:
            raise backend_failure(e, f"Importing questions into {set_id}")

    def submit_attempt(self, set_id: str, attempt: AttemptCreate, user_id: str, member_group_ids: List[str], locale: str) -> AttemptResponse:
        """Replay the answers through a QuizRun and store the result"""
        questions = self.list_questions(set_id, user_id, member_group_ids)
        try:
            if not questions:
                raise ContentValidationError("no_questions")
            if len(attempt.answers) > len(questions):
                raise ContentValidationError("too_many_answers")
            run = QuizRun([q.correct_index for q in questions])
            for answer in attempt.answers:
                if answer is not None:
                    run.select(answer)
                    run.validate()
                run.next()
            while not run.finished:
                run.next()
        except ContentValidationError as e:
            raise validation_failure(e, locale)

        duration: Optional[int] = attempt.duration_seconds
        if duration is not None and duration < 0:
            duration = None
        try:
            self.supabase.table("quiz_attempts").insert({
                "user_id": user_id,
                "set_id": set_id,
                "score": run.score,
                "total": run.total,
                "duration_seconds": duration
            }).execute()
        except Exception as e:
            raise backend_failure(e, f"Saving attempt on {set_id}")
        return AttemptResponse(
            set_id=set_id,
            score=run.score,
            total=run.total,
            duration_seconds=duration,
            correct=run.answers
        )

    def list_attempts(self, set_id: str, user_id: str) -> List[AttemptResponse]:
        """The caller's attempts on a set, most recent first"""
        try:
            result = self.supabase.table("quiz_attempts")\
                .select("set_id,score,total,duration_seconds")\
                .eq("set_id", set_id)\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            return [AttemptResponse(**row) for row in result.data or []]
        except Exception as e:
            raise backend_failure(e, f"Listing attempts on {set_id}")
