"""Server side of the browser voice SDK.

The browser runs the Vapi web SDK and forwards its events over a WebSocket;
``RelayVoiceAgent`` turns those frames into subscriber callbacks and sends
start/stop requests back to the browser.
"""
import logging
from collections import defaultdict
from typing import Any, Dict, List

from fastapi import WebSocket

from app.services.call_session import EventHandler, Unsubscribe, VoiceEvent

logger = logging.getLogger(__name__)

INTERVIEWER: Dict[str, Any] = {
    "name": "Interviewer",
    "firstMessage": (
        "Hello! Thank you for taking the time to speak with me today. "
        "I'm excited to learn more about you and your experience."
    ),
    "transcriber": {
        "provider": "deepgram",
        "model": "nova-2",
        "language": "en",
    },
    "voice": {
        "provider": "11labs",
        "voiceId": "sarah",
        "stability": 0.4,
        "similarityBoost": 0.8,
        "speed": 0.9,
        "style": 0.5,
        "useSpeakerBoost": True,
    },
    "model": {
        "provider": "openai",
        "model": "gpt-4",
        "messages": [
            {
                "role": "system",
                "content": (
                    "You are a professional job interviewer conducting a real-time voice interview with a candidate. "
                    "Your goal is to assess their qualifications, motivation, and fit for the role.\n\n"
                    "Interview Guidelines:\n"
                    "Follow the structured question flow:\n"
                    "{{questions}}\n\n"
                    "Engage naturally and react appropriately:\n"
                    "Listen actively to responses and acknowledge them before moving forward.\n"
                    "Ask brief follow-up questions if a response is vague or requires more detail.\n"
                    "Keep the conversation flowing smoothly while maintaining control.\n\n"
                    "Conclude the interview properly:\n"
                    "Thank the candidate for their time.\n"
                    "Inform them that the company will reach out soon with feedback.\n"
                    "End the conversation on a polite and positive note.\n\n"
                    "Keep all your responses short and simple. This is a voice conversation, "
                    "so keep your responses short, like in a real conversation."
                ),
            },
        ],
    },
}


class RelayVoiceAgent:
    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self._handlers: Dict[VoiceEvent, List[EventHandler]] = defaultdict(list)

    async def start(self, assistant: Any, variable_values: Dict[str, Any]) -> None:
        await self.websocket.send_json(
            {"type": "vapi-start", "assistant": assistant, "variableValues": variable_values}
        )

    async def stop(self) -> None:
        await self.websocket.send_json({"type": "vapi-stop"})

    def subscribe(self, event: VoiceEvent, handler: EventHandler) -> Unsubscribe:
        self._handlers[event].append(handler)

        def unsubscribe():
            if handler in self._handlers[event]:
                self._handlers[event].remove(handler)

        return unsubscribe

    def handler_count(self, event: VoiceEvent | None = None) -> int:
        if event is not None:
            return len(self._handlers[event])
        return sum(len(handlers) for handlers in self._handlers.values())

    def dispatch(self, event_name: str, payload: Any = None) -> bool:
        """Deliver one relayed SDK event. Returns False for unknown events."""
        try:
            event = VoiceEvent(event_name)
        except ValueError:
            logger.warning("Unknown voice event %r", event_name)
            return False

        for handler in list(self._handlers[event]):
            handler(payload)
        return True
