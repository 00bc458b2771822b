import json
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.feedback import Feedback


class FeedbackRepository:
    def __init__(self, db: Session):
        self.db = db

    def upsert(
        self,
        interview_id: int,
        user_id: str | None,
        total_score: int,
        category_scores: List[Dict[str, Any]],
        strengths: List[str],
        areas_for_improvement: List[str],
        final_assessment: str,
        feedback_id: int | None = None,
    ) -> Feedback:
        feedback = self.get(feedback_id) if feedback_id is not None else None
        if feedback is None or feedback.interview_id != interview_id or feedback.user_id != user_id:
            feedback = Feedback(interview_id=interview_id)

        feedback.interview_id = interview_id
        feedback.user_id = user_id
        feedback.total_score = total_score
        feedback.category_scores_json = json.dumps(category_scores)
        feedback.strengths_json = json.dumps(strengths)
        feedback.areas_for_improvement_json = json.dumps(areas_for_improvement)
        feedback.final_assessment = final_assessment

        self.db.add(feedback)
        self.db.commit()
        self.db.refresh(feedback)
        return feedback

    def get(self, feedback_id: int) -> Feedback | None:
        return self.db.get(Feedback, feedback_id)

    def get_latest_for_interview(self, interview_id: int, user_id: str | None = None) -> Feedback | None:
        stmt = select(Feedback).where(Feedback.interview_id == interview_id)
        if user_id:
            stmt = stmt.where(Feedback.user_id == user_id)
        stmt = stmt.order_by(Feedback.created_at.desc(), Feedback.id.desc()).limit(1)
        return self.db.scalars(stmt).first()
