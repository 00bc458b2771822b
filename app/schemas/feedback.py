from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.transcript import TranscriptMessage

CategoryName = Literal[
    "Communication Skills",
    "Technical Knowledge",
    "Problem Solving",
    "Cultural Fit",
    "Confidence and Clarity",
]


class CategoryScore(BaseModel):
    name: CategoryName
    score: int = Field(ge=0, le=100)
    comment: str


class FeedbackAssessment(BaseModel):
    """Shape the model must return when scoring a transcript."""

    total_score: int = Field(alias="totalScore", ge=0, le=100)
    category_scores: List[CategoryScore] = Field(alias="categoryScores", min_length=5, max_length=5)
    strengths: List[str]
    areas_for_improvement: List[str] = Field(alias="areasForImprovement")
    final_assessment: str = Field(alias="finalAssessment")


class FeedbackCreateRequest(BaseModel):
    user_id: Optional[str] = None
    transcript: List[TranscriptMessage] = Field(min_length=1)
    feedback_id: Optional[int] = None


class FeedbackCreateResponse(BaseModel):
    success: bool
    feedback_id: Optional[int] = None


class FeedbackResponse(BaseModel):
    id: int
    interview_id: int
    user_id: Optional[str] = None
    total_score: int
    category_scores: List[CategoryScore]
    strengths: List[str]
    areas_for_improvement: List[str]
    final_assessment: str
    created_at: datetime
