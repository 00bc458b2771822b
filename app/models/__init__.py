from app.models.feedback import Feedback
from app.models.interview import Interview
from app.models.transcript import Transcript

__all__ = [
    "Feedback",
    "Interview",
    "Transcript",
]
