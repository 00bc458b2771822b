import logging

from openai import OpenAI

from app.core.config import settings
from app.core.errors import ErrorCode, GenerationError

logger = logging.getLogger(__name__)


class OpenAIService:
    def __init__(self, api_key: str | None = None, model: str | None = None):
        api_key = api_key or settings.openai_api_key
        if not api_key:
            raise GenerationError(
                "OPENAI_API_KEY is not configured. Set it in deployment environment variables.",
                code=ErrorCode.MODEL_NOT_CONFIGURED,
            )
        self.client = OpenAI(api_key=api_key)
        self.model = model or settings.openai_model

    def generate_text(self, prompt: str, system_prompt: str | None = None, temperature: float = 0.5) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        response = self.client.chat.completions.create(
            model=self.model,
            temperature=temperature,
            messages=messages,
        )
        return response.choices[0].message.content or ""

    @staticmethod
    def strip_json_fences(text: str) -> str:
        stripped = text.strip()
        if stripped.startswith("```"):
            lines = stripped.splitlines()
            if len(lines) >= 3 and lines[-1].strip() == "```":
                return "\n".join(lines[1:-1]).strip()
        return stripped


_openai_service: OpenAIService | None = None


def init_openai_service() -> OpenAIService | None:
    """Create the process-wide client. Called once from application startup."""
    global _openai_service
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set; question generation and feedback are unavailable")
        return None
    _openai_service = OpenAIService()
    logger.info("OpenAI client initialized (model=%s)", _openai_service.model)
    return _openai_service


def get_openai_service() -> OpenAIService:
    global _openai_service
    if _openai_service is None:
        _openai_service = OpenAIService()
    return _openai_service


def get_optional_openai_service() -> OpenAIService | None:
    try:
        return get_openai_service()
    except GenerationError as exc:
        logger.warning("Model client unavailable: %s", exc)
        return None
