import asyncio
import json
from io import BytesIO

import pytest
from pypdf import PdfWriter

from app.core.errors import ResumeExtractionError
from app.repositories.interview_repository import InterviewRepository
from app.repositories.transcript_repository import TranscriptRepository
from app.services.resume_service import extract_resume_text

FORM = {
    "role": "Frontend Developer",
    "type": "technical",
    "level": "junior",
    "techstack": "React, TypeScript",
    "amount": "3",
    "jobDescription": "Build accessible UI components.",
    "userid": "user-1",
}


def blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def test_list_and_get_interview(client, interview):
    listed = client.get("/api/interviews", params={"user_id": "user-1"})
    assert listed.status_code == 200
    assert [item["id"] for item in listed.json()] == [interview.id]
    assert listed.json()[0]["techstack"] == ["React", "TypeScript"]

    detail = client.get(f"/api/interviews/{interview.id}")
    assert detail.status_code == 200
    assert detail.json()["questions"] == ["What is a React hook?", "How does TypeScript narrow types?"]
    assert detail.json()["finalized"] is True


def test_get_interview_of_other_user_is_not_found(client, interview):
    response = client.get(f"/api/interviews/{interview.id}", params={"user_id": "someone-else"})

    assert response.status_code == 404


def test_form_reports_every_invalid_field(client, fake_openai):
    response = client.post(
        "/api/interviews/form",
        data={"role": "", "type": "casual", "level": "principal", "techstack": "", "amount": "16", "jobDescription": ""},
    )

    assert response.status_code == 422
    errors = response.json()["detail"]["errors"]
    assert errors == {
        "role": "Role is required",
        "interview_type": "Select an interview type",
        "level": "Select a job experience level",
        "techstack": "Tech stack is required",
        "amount": "Number of questions must be between 1 and 15",
        "job_description": "Job description is required",
        "resume": "Resume is required",
    }
    assert fake_openai.prompts == []


def test_form_with_unreadable_resume_fails(client, fake_openai):
    response = client.post(
        "/api/interviews/form",
        data=FORM,
        files={"resume": ("resume.pdf", b"not really a pdf", "application/pdf")},
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "RESUME_EXTRACTION_FAILED"}
    assert fake_openai.prompts == []


def test_form_generates_interview_from_resume(client, fake_openai, db_session, monkeypatch):
    extraction_on_event_loop = []

    def fake_extract(data):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            extraction_on_event_loop.append(False)
        else:
            extraction_on_event_loop.append(True)
        return "Built a design system at Acme."

    monkeypatch.setattr("app.api.routes.interviews.extract_resume_text", fake_extract)
    fake_openai.responses.append(json.dumps(["Q1?", "Q2?", "Q3?"]))

    response = client.post(
        "/api/interviews/form",
        data=FORM,
        files={"resume": ("resume.pdf", b"%PDF-1.4 stub", "application/pdf")},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "redirect": "http://testserver.local/"}
    assert "Built a design system at Acme." in fake_openai.prompts[0]
    assert extraction_on_event_loop == [False]
    assert fake_openai.calls_on_event_loop == [False]
    interview = InterviewRepository(db_session).list_all(user_id="user-1")[0]
    assert InterviewRepository.parse_questions(interview) == ["Q1?", "Q2?", "Q3?"]


def test_resume_without_text_is_rejected():
    with pytest.raises(ResumeExtractionError):
        extract_resume_text(blank_pdf())


def test_empty_resume_is_rejected():
    with pytest.raises(ResumeExtractionError):
        extract_resume_text(b"")


def test_create_and_read_feedback(client, fake_openai, feedback_json, interview):
    fake_openai.responses.append(feedback_json)

    created = client.post(
        f"/api/interviews/{interview.id}/feedback",
        json={
            "user_id": "user-1",
            "transcript": [
                {"role": "assistant", "content": "What is a React hook?"},
                {"role": "user", "content": "A function that lets components use state."},
            ],
        },
    )

    assert created.status_code == 200
    assert created.json()["success"] is True
    assert "- user: A function that lets components use state." in fake_openai.prompts[0]

    feedback = client.get(f"/api/interviews/{interview.id}/feedback", params={"user_id": "user-1"})
    assert feedback.status_code == 200
    body = feedback.json()
    assert body["id"] == created.json()["feedback_id"]
    assert body["total_score"] == 72
    assert [item["name"] for item in body["category_scores"]][0] == "Communication Skills"
    assert body["areas_for_improvement"] == ["Go deeper on testing"]


def test_feedback_with_existing_id_is_overwritten(client, fake_openai, feedback_json, interview):
    fake_openai.responses.append(feedback_json)
    updated = json.loads(feedback_json)
    updated["totalScore"] = 90
    fake_openai.responses.append(json.dumps(updated))
    transcript = [{"role": "user", "content": "Hello"}]

    first = client.post(f"/api/interviews/{interview.id}/feedback", json={"user_id": "user-1", "transcript": transcript})
    feedback_id = first.json()["feedback_id"]
    second = client.post(
        f"/api/interviews/{interview.id}/feedback",
        json={"user_id": "user-1", "transcript": transcript, "feedback_id": feedback_id},
    )

    assert second.json() == {"success": True, "feedback_id": feedback_id}
    assert client.get(f"/api/interviews/{interview.id}/feedback").json()["total_score"] == 90


def test_feedback_id_of_another_user_is_not_overwritten(client, fake_openai, feedback_json, interview, db_session):
    other = InterviewRepository(db_session).create(
        role="Backend Developer",
        interview_type="behavioral",
        level="senior",
        techstack=["Go"],
        questions=["Tell me about an outage you handled."],
        cover_image="/covers/amazon.png",
        user_id="user-2",
    )
    fake_openai.responses.append(feedback_json)
    updated = json.loads(feedback_json)
    updated["totalScore"] = 10
    fake_openai.responses.append(json.dumps(updated))
    transcript = [{"role": "user", "content": "Hello"}]

    owned = client.post(f"/api/interviews/{other.id}/feedback", json={"user_id": "user-2", "transcript": transcript})
    owned_id = owned.json()["feedback_id"]
    foreign = client.post(
        f"/api/interviews/{interview.id}/feedback",
        json={"user_id": "user-1", "transcript": transcript, "feedback_id": owned_id},
    )

    assert foreign.json()["success"] is True
    assert foreign.json()["feedback_id"] != owned_id
    kept = client.get(f"/api/interviews/{other.id}/feedback", params={"user_id": "user-2"}).json()
    assert kept["id"] == owned_id
    assert kept["total_score"] == 72
    assert client.get(f"/api/interviews/{interview.id}/feedback", params={"user_id": "user-1"}).json()["total_score"] == 10


def test_malformed_feedback_reports_failure(client, fake_openai, interview):
    fake_openai.responses.append(json.dumps({"totalScore": 50}))

    response = client.post(
        f"/api/interviews/{interview.id}/feedback",
        json={"user_id": "user-1", "transcript": [{"role": "user", "content": "Hi"}]},
    )

    assert response.json() == {"success": False, "feedback_id": None}
    assert client.get(f"/api/interviews/{interview.id}/feedback").status_code == 404


def test_feedback_for_unknown_interview_is_not_found(client):
    response = client.post("/api/interviews/999/feedback", json={"transcript": [{"role": "user", "content": "Hi"}]})

    assert response.status_code == 404


def test_transcript_is_returned_raw_and_grouped(client, db_session, interview):
    TranscriptRepository(db_session).create(
        interview.id,
        [
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello"},
            {"role": "assistant", "content": "how are you"},
        ],
        user_id="user-1",
    )

    response = client.get(f"/api/transcripts/{interview.id}", params={"user_id": "user-1"})

    assert response.status_code == 200
    assert len(response.json()["messages"]) == 3
    assert response.json()["grouped_messages"] == [
        {"role": "user", "content": "Hi"},
        {"role": "assistant", "content": "Hello how are you"},
    ]


def test_missing_transcript_is_not_found(client, interview):
    assert client.get(f"/api/transcripts/{interview.id}").status_code == 404
