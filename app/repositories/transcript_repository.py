import json
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.transcript import Transcript


class TranscriptRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, interview_id: int, messages: List[Dict[str, str]], user_id: str | None = None) -> Transcript:
        transcript = Transcript(
            interview_id=interview_id,
            user_id=user_id,
            messages_json=json.dumps(messages),
        )
        self.db.add(transcript)
        self.db.commit()
        self.db.refresh(transcript)
        return transcript

    def get_latest(self, interview_id: int, user_id: str | None = None) -> Transcript | None:
        stmt = select(Transcript).where(Transcript.interview_id == interview_id)
        if user_id:
            stmt = stmt.where(Transcript.user_id == user_id)
        stmt = stmt.order_by(Transcript.created_at.desc(), Transcript.id.desc()).limit(1)
        return self.db.scalars(stmt).first()

    @staticmethod
    def parse_messages(transcript: Transcript) -> List[Dict[str, str]]:
        return json.loads(transcript.messages_json)
