from enum import Enum


class ErrorCode(str, Enum):
    """Error codes returned to clients. Details stay in the server log."""

    GENERATION_FAILED = "GENERATION_FAILED"
    INVALID_MODEL_OUTPUT = "INVALID_MODEL_OUTPUT"
    MODEL_NOT_CONFIGURED = "MODEL_NOT_CONFIGURED"
    RESUME_EXTRACTION_FAILED = "RESUME_EXTRACTION_FAILED"
    INVALID_TRANSITION = "INVALID_TRANSITION"


class AppError(Exception):
    status_code = 500

    def __init__(self, code: ErrorCode, message: str):
        super().__init__(f"[{code.value}] {message}")
        self.code = code
        self.message = message


class GenerationError(AppError):
    def __init__(self, message: str, code: ErrorCode = ErrorCode.GENERATION_FAILED):
        super().__init__(code, message)


class ResumeExtractionError(AppError):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(ErrorCode.RESUME_EXTRACTION_FAILED, message)


class InvalidTransitionError(AppError):
    status_code = 409

    def __init__(self, message: str):
        super().__init__(ErrorCode.INVALID_TRANSITION, message)
