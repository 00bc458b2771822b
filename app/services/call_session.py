"""Lifecycle of one voice interview call.

A call moves INACTIVE -> CONNECTING -> ACTIVE -> FINISHED. The voice agent
reports progress through events; the session only reacts to them while it
holds a subscription, see ``CallSession.subscribed``.
"""
import logging
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Protocol

from app.core.errors import InvalidTransitionError
from app.services.transcript_service import MESSAGE_ROLES, SavedMessage, aggregate_messages

logger = logging.getLogger(__name__)

GENERATE_SESSION = "generate"

EventHandler = Callable[[Any], None]
Unsubscribe = Callable[[], None]


class CallStatus(str, Enum):
    INACTIVE = "INACTIVE"
    CONNECTING = "CONNECTING"
    ACTIVE = "ACTIVE"
    FINISHED = "FINISHED"


class VoiceEvent(str, Enum):
    CALL_START = "call-start"
    CALL_END = "call-end"
    MESSAGE = "message"
    SPEECH_START = "speech-start"
    SPEECH_END = "speech-end"
    ERROR = "error"


class VoiceAgent(Protocol):
    async def start(self, assistant: Any, variable_values: Dict[str, Any]) -> None: ...

    async def stop(self) -> None: ...

    def subscribe(self, event: VoiceEvent, handler: EventHandler) -> Unsubscribe: ...


@dataclass
class CallContext:
    session_type: str
    user_name: str = ""
    user_id: Optional[str] = None
    interview_id: Optional[int] = None
    feedback_id: Optional[int] = None
    questions: Optional[List[str]] = None

    @property
    def is_generate(self) -> bool:
        return self.session_type == GENERATE_SESSION


def format_questions(questions: List[str]) -> str:
    return "\n".join(f"- {question}" for question in questions)


@dataclass
class CallSession:
    agent: VoiceAgent
    context: CallContext
    interviewer: Any
    workflow_id: Optional[str] = None
    status: CallStatus = CallStatus.INACTIVE
    is_speaking: bool = False
    messages: List[SavedMessage] = field(default_factory=list)
    _finalization_claimed: bool = field(default=False, init=False, repr=False)

    def start_request(self, job_description: str = "", resume_text: str = "") -> tuple[Any, Dict[str, Any]]:
        """Assistant descriptor and variables for ``VoiceAgent.start``."""
        if self.context.is_generate:
            return self.workflow_id, {
                "username": self.context.user_name,
                "userid": self.context.user_id,
                "jobDescription": job_description,
                "resumeText": resume_text,
            }
        questions = format_questions(self.context.questions) if self.context.questions else ""
        return self.interviewer, {"questions": questions}

    async def start_call(self, job_description: str = "", resume_text: str = ""):
        if self.status in (CallStatus.CONNECTING, CallStatus.ACTIVE):
            raise InvalidTransitionError(f"Cannot start a call while {self.status.value}")

        previous = self.status
        self.status = CallStatus.CONNECTING
        self.is_speaking = False
        self.messages = []
        self._finalization_claimed = False

        assistant, variable_values = self.start_request(job_description, resume_text)
        try:
            await self.agent.start(assistant, variable_values)
        except Exception:
            logger.exception("Voice agent failed to start a %s call", self.context.session_type)
            self.status = previous
            raise

    async def disconnect(self):
        if self.status not in (CallStatus.CONNECTING, CallStatus.ACTIVE):
            logger.debug("Ignoring disconnect while %s", self.status.value)
            return
        self.status = CallStatus.FINISHED
        await self.agent.stop()

    def on_call_start(self, _payload: Any = None):
        if self.status is CallStatus.CONNECTING:
            self.status = CallStatus.ACTIVE
        else:
            logger.debug("Ignoring call-start while %s", self.status.value)

    def on_call_end(self, _payload: Any = None):
        if self.status in (CallStatus.CONNECTING, CallStatus.ACTIVE):
            self.status = CallStatus.FINISHED
        else:
            logger.debug("Ignoring call-end while %s", self.status.value)

    def on_message(self, message: Any = None):
        if not isinstance(message, dict):
            return
        if message.get("type") != "transcript" or message.get("transcriptType") != "final":
            return

        role = message.get("role")
        if role not in MESSAGE_ROLES:
            logger.warning("Dropping transcript fragment with unknown role %r", role)
            return
        self.messages.append(SavedMessage(role=role, content=str(message.get("transcript") or "")))

    def on_speech_start(self, _payload: Any = None):
        self.is_speaking = True

    def on_speech_end(self, _payload: Any = None):
        self.is_speaking = False

    def on_error(self, error: Any = None):
        logger.error("Voice agent error: %s", error)

    def handlers(self) -> Dict[VoiceEvent, EventHandler]:
        return {
            VoiceEvent.CALL_START: self.on_call_start,
            VoiceEvent.CALL_END: self.on_call_end,
            VoiceEvent.MESSAGE: self.on_message,
            VoiceEvent.SPEECH_START: self.on_speech_start,
            VoiceEvent.SPEECH_END: self.on_speech_end,
            VoiceEvent.ERROR: self.on_error,
        }

    @contextmanager
    def subscribed(self) -> Iterator["CallSession"]:
        """Hold the agent subscriptions for the duration of the block.

        Every handler registered here is removed on exit, including when the
        block raises or a later registration fails.
        """
        with ExitStack() as stack:
            for event, handler in self.handlers().items():
                stack.callback(self.agent.subscribe(event, handler))
            yield self

    def claim_finalization(self) -> bool:
        """True exactly once per call, after it has finished."""
        if self.status is not CallStatus.FINISHED or self._finalization_claimed:
            return False
        self._finalization_claimed = True
        return True

    def grouped_messages(self) -> List[SavedMessage]:
        return aggregate_messages(self.messages)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "type": "state",
            "status": self.status.value,
            "isSpeaking": self.is_speaking,
            "messages": [message.to_dict() for message in self.grouped_messages()],
        }
