from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class InterviewRequest(BaseModel):
    """Body of POST /vapi/generate, as sent by the form and the voice workflow."""

    model_config = ConfigDict(populate_by_name=True)

    interview_type: str = Field(alias="type", min_length=1)
    role: str = Field(min_length=1)
    level: str = Field(min_length=1)
    techstack: str = Field(min_length=1)
    amount: int = Field(ge=1, le=15)
    user_id: Optional[str] = Field(default=None, alias="userid")
    job_description: str = Field(default="", alias="jobDescription")
    resume_text: str = Field(default="", alias="resumeText")


class InterviewFormPayload(BaseModel):
    role: str = Field(min_length=1)
    interview_type: Literal["technical", "behavioral", "mixed"]
    level: Literal["junior", "mid", "senior"]
    techstack: str = Field(min_length=1)
    amount: int = Field(ge=1, le=15)
    job_description: str = Field(min_length=1)


FORM_FIELD_MESSAGES = {
    "role": "Role is required",
    "interview_type": "Select an interview type",
    "level": "Select a job experience level",
    "techstack": "Tech stack is required",
    "amount": "Number of questions must be between 1 and 15",
    "job_description": "Job description is required",
    "resume": "Resume is required",
}


class InterviewFormResponse(BaseModel):
    success: bool
    redirect: str


class InterviewListItem(BaseModel):
    id: int
    user_id: Optional[str] = None
    role: str
    interview_type: str
    level: str
    techstack: List[str]
    finalized: bool
    cover_image: str
    created_at: datetime


class InterviewDetail(InterviewListItem):
    questions: List[str]
