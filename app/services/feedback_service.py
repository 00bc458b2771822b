import json
import logging
from dataclasses import dataclass
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.repositories.feedback_repository import FeedbackRepository
from app.repositories.transcript_repository import TranscriptRepository
from app.schemas.feedback import FeedbackAssessment
from app.services.openai_service import OpenAIService
from app.services.transcript_service import SavedMessage, format_transcript

logger = logging.getLogger(__name__)

FEEDBACK_SYSTEM_PROMPT = (
    "You are a professional interviewer analyzing a mock interview. "
    "Your task is to evaluate the candidate based on structured categories. "
    "You return valid JSON only."
)


@dataclass
class FeedbackResult:
    success: bool
    feedback_id: Optional[int] = None


def build_feedback_prompt(transcript: List[SavedMessage]) -> str:
    return (
        "You are an AI interviewer analyzing a mock interview. Your task is to evaluate the candidate based on "
        "structured categories. Be thorough and detailed in your analysis. Don't be lenient with the candidate. "
        "If there are mistakes or areas for improvement, point them out.\n\n"
        "Transcript:\n"
        f"{format_transcript(transcript)}\n"
        "Please score the candidate from 0 to 100 in the following areas. "
        "Do not add categories other than the ones provided:\n"
        "- Communication Skills: Clarity, articulation, structured responses.\n"
        "- Technical Knowledge: Understanding of key concepts for the role.\n"
        "- Problem Solving: Ability to analyze problems and propose solutions.\n"
        "- Cultural Fit: Alignment with company values and job role.\n"
        "- Confidence and Clarity: Confidence in responses, engagement, and clarity.\n\n"
        "Return JSON only in this format: "
        '{"totalScore": 0, "categoryScores": [{"name": "Communication Skills", "score": 0, "comment": "..."}], '
        '"strengths": ["..."], "areasForImprovement": ["..."], "finalAssessment": "..."}'
    )


class FeedbackService:
    """Finalization collaborators: scoring a transcript and storing it."""

    def __init__(self, db: Session, openai_service: OpenAIService | None = None):
        self.feedback_repo = FeedbackRepository(db)
        self.transcript_repo = TranscriptRepository(db)
        self.openai_service = openai_service

    def create_feedback(
        self,
        interview_id: int,
        user_id: str | None,
        transcript: List[SavedMessage],
        feedback_id: int | None = None,
    ) -> FeedbackResult:
        if self.openai_service is None:
            logger.error("Cannot create feedback for interview %s: no model client", interview_id)
            return FeedbackResult(success=False)

        try:
            raw = self.openai_service.generate_text(
                build_feedback_prompt(transcript),
                system_prompt=FEEDBACK_SYSTEM_PROMPT,
                temperature=0.2,
            )
            assessment = FeedbackAssessment.model_validate(json.loads(OpenAIService.strip_json_fences(raw)))
            feedback = self.feedback_repo.upsert(
                interview_id=interview_id,
                user_id=user_id,
                total_score=assessment.total_score,
                category_scores=[item.model_dump() for item in assessment.category_scores],
                strengths=assessment.strengths,
                areas_for_improvement=assessment.areas_for_improvement,
                final_assessment=assessment.final_assessment,
                feedback_id=feedback_id,
            )
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.error("Model returned malformed feedback for interview %s: %s", interview_id, exc)
            return FeedbackResult(success=False)
        except Exception:
            logger.exception("Error saving feedback for interview %s", interview_id)
            return FeedbackResult(success=False)

        logger.info("Feedback %s saved for interview %s", feedback.id, interview_id)
        return FeedbackResult(success=True, feedback_id=feedback.id)

    def save_transcript(self, interview_id: int, user_id: str | None, transcript: List[SavedMessage]) -> bool:
        try:
            saved = self.transcript_repo.create(
                interview_id=interview_id,
                messages=[message.to_dict() for message in transcript],
                user_id=user_id,
            )
        except Exception:
            logger.exception("Error saving transcript for interview %s", interview_id)
            return False

        logger.info("Transcript %s saved for interview %s (%d messages)", saved.id, interview_id, len(transcript))
        return True
