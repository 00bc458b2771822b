import json
import logging
import random
from datetime import datetime
from typing import List

from sqlalchemy.orm import Session

from app.core.cache import question_cache
from app.core.errors import ErrorCode, GenerationError
from app.models.interview import Interview
from app.repositories.interview_repository import InterviewRepository
from app.schemas.interview import InterviewRequest
from app.services.openai_service import OpenAIService

logger = logging.getLogger(__name__)

INTERVIEW_COVERS = [
    "/covers/adobe.png",
    "/covers/amazon.png",
    "/covers/facebook.png",
    "/covers/hostinger.png",
    "/covers/pinterest.png",
    "/covers/quora.png",
    "/covers/reddit.png",
    "/covers/skype.png",
    "/covers/spotify.png",
    "/covers/telegram.png",
    "/covers/tiktok.png",
    "/covers/yahoo.png",
]


def get_random_interview_cover() -> str:
    return random.choice(INTERVIEW_COVERS)


def split_techstack(techstack: str) -> List[str]:
    return [item.strip() for item in techstack.split(",") if item.strip()]


def build_question_prompt(request: InterviewRequest) -> str:
    return (
        "You are Nora, an AI interview assistant.\n\n"
        "Your task is to generate a set of thoughtful, role-specific interview questions for a candidate. "
        "Use the following inputs to tailor the questions:\n\n"
        f"- Job Role: {request.role}\n"
        f"- Experience Level: {request.level}\n"
        f"- Tech Stack: {request.techstack}\n"
        f"- Interview Type: {request.interview_type} (focus on technical or behavioral)\n"
        f"- Job Description: {request.job_description}\n"
        f"- Candidate Resume: {request.resume_text}\n"
        f"- Number of Questions: {request.amount}\n\n"
        "Please ensure:\n"
        "- The questions are relevant to the candidate's background and job expectations.\n"
        '- No special characters like "/", "*", or non-speakable symbols are included, '
        "since the questions are read aloud by a voice assistant.\n"
        "- Return the questions formatted like this:\n"
        '["Question 1", "Question 2", "Question 3"]\n\n'
        "Do not include any introductory text, explanations, or closing statements, just the array of questions."
    )


def parse_questions(text: str) -> List[str]:
    cleaned = OpenAIService.strip_json_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise GenerationError(f"Model output is not valid JSON: {exc}", code=ErrorCode.INVALID_MODEL_OUTPUT) from exc

    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        raise GenerationError("Model output is not an array of strings.", code=ErrorCode.INVALID_MODEL_OUTPUT)

    questions = [item.strip() for item in data if item.strip()]
    if not questions:
        raise GenerationError("Model returned no questions.", code=ErrorCode.INVALID_MODEL_OUTPUT)
    return questions


class InterviewService:
    def __init__(self, db: Session, openai_service: OpenAIService):
        self.repo = InterviewRepository(db)
        self.openai_service = openai_service

    def generate(self, request: InterviewRequest) -> Interview:
        try:
            raw = self.openai_service.generate_text(build_question_prompt(request))
        except GenerationError:
            raise
        except Exception as exc:
            raise GenerationError(f"Question generation request failed: {exc}") from exc

        questions = parse_questions(raw)
        if len(questions) != request.amount:
            logger.warning("Requested %d questions, model returned %d", request.amount, len(questions))

        interview = self.repo.create(
            role=request.role,
            interview_type=request.interview_type,
            level=request.level,
            techstack=split_techstack(request.techstack),
            questions=questions,
            cover_image=get_random_interview_cover(),
            user_id=request.user_id,
            finalized=True,
            created_at=datetime.utcnow(),
        )
        question_cache.set(interview.id, questions)
        logger.info("Generated interview %s with %d questions for user %s", interview.id, len(questions), request.user_id)
        return interview

    def get_questions(self, interview: Interview) -> List[str]:
        questions = question_cache.get(interview.id)
        if not questions:
            questions = self.repo.parse_questions(interview)
            question_cache.set(interview.id, questions)
        return questions
