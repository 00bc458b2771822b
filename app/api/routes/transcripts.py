from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.repositories.transcript_repository import TranscriptRepository
from app.schemas.transcript import TranscriptMessage, TranscriptResponse
from app.services.transcript_service import SavedMessage, aggregate_messages

router = APIRouter(prefix="/transcripts", tags=["transcripts"])


@router.get("/{interview_id}", response_model=TranscriptResponse)
def get_transcript(interview_id: int, user_id: str | None = None, db: Session = Depends(get_db)):
    repo = TranscriptRepository(db)
    transcript = repo.get_latest(interview_id, user_id=user_id)
    if not transcript:
        raise HTTPException(status_code=404, detail="Transcript not found")

    messages = [SavedMessage.from_dict(item) for item in repo.parse_messages(transcript)]
    return TranscriptResponse(
        id=transcript.id,
        interview_id=transcript.interview_id,
        user_id=transcript.user_id,
        messages=[TranscriptMessage(**message.to_dict()) for message in messages],
        grouped_messages=[TranscriptMessage(**message.to_dict()) for message in aggregate_messages(messages)],
        created_at=transcript.created_at,
    )
