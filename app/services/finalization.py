import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from app.services.call_session import CallContext
from app.services.feedback_service import FeedbackResult
from app.services.transcript_service import SavedMessage

logger = logging.getLogger(__name__)

ENTRY_POINT = "/"

CreateFeedback = Callable[[int, Optional[str], List[SavedMessage], Optional[int]], Awaitable[FeedbackResult]]
SaveTranscript = Callable[[int, Optional[str], List[SavedMessage]], Awaitable[bool]]


def feedback_path(interview_id: int) -> str:
    return f"/interview/{interview_id}/feedback"


class FinalizationFlow:
    def __init__(self, create_feedback: CreateFeedback, save_transcript: SaveTranscript):
        self.create_feedback = create_feedback
        self.save_transcript = save_transcript

    async def finalize(self, context: CallContext, messages: List[SavedMessage]) -> str:
        """Submit a finished call's transcript and return where to navigate next."""
        if context.is_generate:
            return ENTRY_POINT
        if context.interview_id is None:
            logger.error("Finished interview call has no interview id; skipping feedback")
            return ENTRY_POINT

        transcript = list(messages)
        feedback, transcript_saved = await asyncio.gather(
            self.create_feedback(context.interview_id, context.user_id, transcript, context.feedback_id),
            self.save_transcript(context.interview_id, context.user_id, transcript),
            return_exceptions=True,
        )

        if isinstance(feedback, BaseException):
            logger.error("Feedback creation raised for interview %s: %s", context.interview_id, feedback)
            feedback = FeedbackResult(success=False)
        if isinstance(transcript_saved, BaseException):
            logger.error("Transcript persistence raised for interview %s: %s", context.interview_id, transcript_saved)
            transcript_saved = False

        if feedback.success and feedback.feedback_id is not None and transcript_saved:
            return feedback_path(context.interview_id)

        logger.warning(
            "Finalization failed for interview %s (feedback=%s, transcript=%s)",
            context.interview_id,
            feedback.success,
            transcript_saved,
        )
        return ENTRY_POINT
