from threading import Lock
from time import time


class QuestionCache:
    def __init__(self, ttl_seconds: int = 7200):
        self.ttl_seconds = ttl_seconds
        self._lock = Lock()
        self._questions: dict[int, tuple[float, list[str]]] = {}

    def get(self, interview_id: int) -> list[str] | None:
        with self._lock:
            item = self._questions.get(interview_id)
            if not item:
                return None
            expires_at, value = item
            if expires_at < time():
                del self._questions[interview_id]
                return None
            return list(value)

    def set(self, interview_id: int, questions: list[str]):
        with self._lock:
            self._questions[interview_id] = (time() + self.ttl_seconds, list(questions))

    def clear(self):
        with self._lock:
            self._questions.clear()


question_cache = QuestionCache()
