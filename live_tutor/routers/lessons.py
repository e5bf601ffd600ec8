from typing import Any, Dict

from fastapi import APIRouter, HTTPException, status

from live_tutor.api_models import LessonListResponse, LessonSummary
from live_tutor.config import get_settings
from live_tutor.exceptions import UnknownLessonError
from live_tutor.lessons import LessonDefinition, get_lesson, list_lessons
from live_tutor.prompts import build_live_config

router = APIRouter()


def _lesson_or_404(lesson_id: str) -> LessonDefinition:
    try:
        return get_lesson(lesson_id)
    except UnknownLessonError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/lessons", response_model=LessonListResponse)
async def read_lessons():
    return LessonListResponse(lessons=[LessonSummary.from_lesson(lesson) for lesson in list_lessons()])


@router.get("/lessons/{lesson_id}", response_model=LessonDefinition)
async def read_lesson(lesson_id: str):
    return _lesson_or_404(lesson_id)


@router.get("/lessons/{lesson_id}/config")
async def read_lesson_config(lesson_id: str) -> Dict[str, Any]:
    """Setup payload (model, voice, system instruction, tools) for the realtime agent."""
    return build_live_config(_lesson_or_404(lesson_id), get_settings())
