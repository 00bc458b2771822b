import json
from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.interview import Interview


class InterviewRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        role: str,
        interview_type: str,
        level: str,
        techstack: List[str],
        questions: List[str],
        cover_image: str,
        user_id: str | None = None,
        finalized: bool = True,
        created_at: datetime | None = None,
    ) -> Interview:
        interview = Interview(
            user_id=user_id,
            role=role,
            interview_type=interview_type,
            level=level,
            techstack_csv=",".join(techstack),
            questions_json=json.dumps(questions),
            finalized=finalized,
            cover_image=cover_image,
            created_at=created_at or datetime.utcnow(),
        )
        self.db.add(interview)
        self.db.commit()
        self.db.refresh(interview)
        return interview

    def list_all(self, user_id: str | None = None) -> List[Interview]:
        stmt = select(Interview)
        if user_id:
            stmt = stmt.where(Interview.user_id == user_id)
        stmt = stmt.order_by(Interview.created_at.desc())
        return list(self.db.scalars(stmt).all())

    def get_by_id(self, interview_id: int, user_id: str | None = None) -> Interview | None:
        interview = self.db.get(Interview, interview_id)
        if not interview:
            return None
        if user_id and interview.user_id and interview.user_id != user_id:
            return None
        return interview

    @staticmethod
    def parse_questions(interview: Interview) -> List[str]:
        return json.loads(interview.questions_json)

    @staticmethod
    def parse_techstack(interview: Interview) -> List[str]:
        return [item.strip() for item in interview.techstack_csv.split(",") if item.strip()]
