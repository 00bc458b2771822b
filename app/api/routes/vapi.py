import json
import logging

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.errors import AppError, ErrorCode
from app.db.session import SessionLocal, get_db
from app.repositories.interview_repository import InterviewRepository
from app.schemas.interview import InterviewRequest
from app.services.call_session import CallContext, CallSession
from app.services.feedback_service import FeedbackResult, FeedbackService
from app.services.finalization import FinalizationFlow
from app.services.interview_service import InterviewService
from app.services.openai_service import OpenAIService, get_openai_service, get_optional_openai_service
from app.services.transcript_service import SavedMessage
from app.services.voice_agent import INTERVIEWER, RelayVoiceAgent

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vapi", tags=["vapi"])


@router.post("/generate")
def generate_interview(
    body: InterviewRequest,
    db: Session = Depends(get_db),
    openai_service: OpenAIService = Depends(get_openai_service),
):
    try:
        InterviewService(db, openai_service).generate(body)
    except AppError as exc:
        logger.error("Interview generation failed: %s", exc)
        return JSONResponse(status_code=500, content={"success": False, "error": exc.code.value})
    except Exception:
        logger.exception("Interview generation failed")
        return JSONResponse(status_code=500, content={"success": False, "error": ErrorCode.GENERATION_FAILED.value})

    return JSONResponse(status_code=200, content={"success": True})


@router.get("/generate")
def generate_ack():
    return {"success": True, "data": "Thank you!"}


def build_finalization_flow(openai_service: OpenAIService | None) -> FinalizationFlow:
    def create_feedback_sync(interview_id, user_id, transcript, feedback_id):
        db = SessionLocal()
        try:
            return FeedbackService(db, openai_service).create_feedback(interview_id, user_id, transcript, feedback_id)
        finally:
            db.close()

    def save_transcript_sync(interview_id, user_id, transcript):
        db = SessionLocal()
        try:
            return FeedbackService(db).save_transcript(interview_id, user_id, transcript)
        finally:
            db.close()

    async def create_feedback(
        interview_id: int, user_id: str | None, transcript: list[SavedMessage], feedback_id: int | None
    ) -> FeedbackResult:
        return await run_in_threadpool(create_feedback_sync, interview_id, user_id, transcript, feedback_id)

    async def save_transcript(interview_id: int, user_id: str | None, transcript: list[SavedMessage]) -> bool:
        return await run_in_threadpool(save_transcript_sync, interview_id, user_id, transcript)

    return FinalizationFlow(create_feedback=create_feedback, save_transcript=save_transcript)


def load_questions(interview_id: int, user_id: str | None) -> list[str] | None:
    db = SessionLocal()
    try:
        interview = InterviewRepository(db).get_by_id(interview_id, user_id=user_id)
        if not interview:
            return None
        return InterviewService(db, openai_service=None).get_questions(interview)
    finally:
        db.close()


@router.websocket("/call")
async def call_socket(
    websocket: WebSocket,
    session_type: str = Query("interview", alias="type"),
    user_id: str | None = None,
    user_name: str = "",
    interview_id: int | None = None,
    feedback_id: int | None = None,
    openai_service: OpenAIService | None = Depends(get_optional_openai_service),
):
    await websocket.accept()

    questions = None
    if session_type != "generate":
        if interview_id is None:
            await websocket.send_json({"type": "error", "message": "interview_id is required"})
            await websocket.close(code=1008)
            return
        questions = load_questions(interview_id, user_id)
        if questions is None:
            await websocket.send_json({"type": "error", "message": "Interview not found"})
            await websocket.close(code=1008)
            return

    context = CallContext(
        session_type=session_type,
        user_name=user_name,
        user_id=user_id,
        interview_id=interview_id,
        feedback_id=feedback_id,
        questions=questions,
    )
    agent = RelayVoiceAgent(websocket)
    session = CallSession(
        agent=agent,
        context=context,
        interviewer=INTERVIEWER,
        workflow_id=settings.vapi_workflow_id,
    )
    flow = build_finalization_flow(openai_service)

    try:
        with session.subscribed():
            await websocket.send_json(session.snapshot())

            while True:
                incoming = await websocket.receive_text()
                try:
                    payload = json.loads(incoming)
                except json.JSONDecodeError:
                    payload = None
                if not isinstance(payload, dict):
                    await websocket.send_json({"type": "error", "message": "Invalid JSON payload"})
                    continue

                frame_type = payload.get("type")
                if frame_type == "ping":
                    await websocket.send_json({"type": "pong"})
                    continue

                if frame_type == "start-call":
                    try:
                        await session.start_call(
                            job_description=str(payload.get("jobDescription") or ""),
                            resume_text=str(payload.get("resumeText") or ""),
                        )
                    except AppError as exc:
                        await websocket.send_json({"type": "error", "message": exc.code.value})
                        continue
                elif frame_type == "disconnect":
                    await session.disconnect()
                elif frame_type == "event":
                    if not agent.dispatch(str(payload.get("event")), payload.get("payload")):
                        await websocket.send_json({"type": "error", "message": "Unsupported event"})
                        continue
                else:
                    await websocket.send_json(
                        {"type": "error", "message": "Unsupported type. Use start-call, disconnect, event, or ping"}
                    )
                    continue

                await websocket.send_json(session.snapshot())

                if session.claim_finalization():
                    target = await flow.finalize(context, session.messages)
                    await websocket.send_json(
                        {"type": "navigate", "path": target, "url": settings.absolute_url(target)}
                    )
                    await websocket.close(code=1000)
                    return

    except WebSocketDisconnect:
        logger.info("Call socket closed by client (status=%s)", session.status.value)
