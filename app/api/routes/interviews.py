import json
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.db.session import get_db
from app.models.interview import Interview
from app.repositories.feedback_repository import FeedbackRepository
from app.repositories.interview_repository import InterviewRepository
from app.schemas.feedback import FeedbackCreateRequest, FeedbackCreateResponse, FeedbackResponse
from app.schemas.interview import (
    FORM_FIELD_MESSAGES,
    InterviewDetail,
    InterviewFormPayload,
    InterviewFormResponse,
    InterviewListItem,
    InterviewRequest,
)
from app.services.feedback_service import FeedbackService
from app.services.finalization import ENTRY_POINT
from app.services.interview_service import InterviewService
from app.services.openai_service import OpenAIService, get_openai_service
from app.services.resume_service import extract_resume_text
from app.services.transcript_service import SavedMessage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/interviews", tags=["interviews"])


def _list_item(repo: InterviewRepository, item: Interview) -> dict:
    return dict(
        id=item.id,
        user_id=item.user_id,
        role=item.role,
        interview_type=item.interview_type,
        level=item.level,
        techstack=repo.parse_techstack(item),
        finalized=item.finalized,
        cover_image=item.cover_image,
        created_at=item.created_at,
    )


@router.get("", response_model=list[InterviewListItem])
def list_interviews(user_id: str | None = None, db: Session = Depends(get_db)):
    repo = InterviewRepository(db)
    return [InterviewListItem(**_list_item(repo, item)) for item in repo.list_all(user_id=user_id)]


@router.get("/{interview_id}", response_model=InterviewDetail)
def get_interview(interview_id: int, user_id: str | None = None, db: Session = Depends(get_db)):
    repo = InterviewRepository(db)
    interview = repo.get_by_id(interview_id, user_id=user_id)
    if not interview:
        raise HTTPException(status_code=404, detail="Interview not found")

    questions = InterviewService(db, openai_service=None).get_questions(interview)
    return InterviewDetail(**_list_item(repo, interview), questions=questions)


@router.post("/form", response_model=InterviewFormResponse)
async def submit_interview_form(
    role: str = Form(default=""),
    interview_type: str = Form(default="", alias="type"),
    level: str = Form(default=""),
    techstack: str = Form(default=""),
    amount: str = Form(default="5"),
    job_description: str = Form(default="", alias="jobDescription"),
    user_id: str | None = Form(default=None, alias="userid"),
    resume: UploadFile | None = File(default=None),
    db: Session = Depends(get_db),
    openai_service: OpenAIService = Depends(get_openai_service),
):
    errors = {}
    try:
        payload = InterviewFormPayload(
            role=role.strip(),
            interview_type=interview_type,
            level=level,
            techstack=techstack.strip(),
            amount=amount,
            job_description=job_description.strip(),
        )
    except ValidationError as exc:
        for error in exc.errors():
            field = str(error["loc"][0])
            errors[field] = FORM_FIELD_MESSAGES.get(field, error["msg"])
        payload = None

    if resume is None or not resume.filename:
        errors["resume"] = FORM_FIELD_MESSAGES["resume"]
    if errors:
        raise HTTPException(status_code=422, detail={"errors": errors})

    resume_text = await run_in_threadpool(extract_resume_text, await resume.read())

    request = InterviewRequest(
        type=payload.interview_type,
        role=payload.role,
        level=payload.level,
        techstack=payload.techstack,
        amount=payload.amount,
        userid=user_id,
        jobDescription=payload.job_description,
        resumeText=resume_text,
    )
    await run_in_threadpool(InterviewService(db, openai_service).generate, request)
    return InterviewFormResponse(success=True, redirect=settings.absolute_url(ENTRY_POINT))


@router.post("/{interview_id}/feedback", response_model=FeedbackCreateResponse)
def create_feedback(
    interview_id: int,
    body: FeedbackCreateRequest,
    db: Session = Depends(get_db),
    openai_service: OpenAIService = Depends(get_openai_service),
):
    interview = InterviewRepository(db).get_by_id(interview_id, user_id=body.user_id)
    if not interview:
        raise HTTPException(status_code=404, detail="Interview not found")

    transcript = [SavedMessage(role=item.role, content=item.content) for item in body.transcript]
    result = FeedbackService(db, openai_service).create_feedback(
        interview_id, body.user_id, transcript, feedback_id=body.feedback_id
    )
    return FeedbackCreateResponse(success=result.success, feedback_id=result.feedback_id)


@router.get("/{interview_id}/feedback", response_model=FeedbackResponse)
def get_feedback(interview_id: int, user_id: str | None = None, db: Session = Depends(get_db)):
    feedback = FeedbackRepository(db).get_latest_for_interview(interview_id, user_id=user_id)
    if not feedback:
        raise HTTPException(status_code=404, detail="Feedback not found")

    return FeedbackResponse(
        id=feedback.id,
        interview_id=feedback.interview_id,
        user_id=feedback.user_id,
        total_score=feedback.total_score,
        category_scores=json.loads(feedback.category_scores_json),
        strengths=json.loads(feedback.strengths_json),
        areas_for_improvement=json.loads(feedback.areas_for_improvement_json),
        final_assessment=feedback.final_assessment,
        created_at=feedback.created_at,
    )
