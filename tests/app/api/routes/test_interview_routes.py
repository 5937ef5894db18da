import json

from fastapi import status

JOB = "Engineering manager at Acme."


def prepare(client):
    client.post("/api/ingredients", json={"name": "Leadership"})
    client.post("/api/kitchen/job-description", json={"job_description": JOB})


def test_start_requires_pantry_and_job(client, backend):
    response = client.post("/api/interview/start")

    assert response.status_code == 422
    assert response.json()["detail"] == "Please add ingredients and a job description first!"
    assert backend.requests == []


def test_full_text_round(client, backend):
    prepare(client)
    backend.push(
        "Tell me about a hard decision.",
        json.dumps({"score": 9, "feedback": "Specific and reflective."}),
        "How do you handle conflict?",
    )

    started = client.post("/api/interview/start")
    assert started.json()["state"] == "question_posted"

    response = client.post("/api/interview/answer", json={"answer": "I cut a project."})

    body = response.json()
    assert response.status_code == status.HTTP_200_OK
    assert [t["role"] for t in body["turns"]] == ["interviewer", "candidate", "interviewer"]
    assert body["turns"][1]["score"] == 9
    assert body["evaluation"]["feedback"] == "Specific and reflective."
    assert body["notifications"] == [{"kind": "success", "message": "Answer scored 9/10."}]


def test_audio_answer(client, backend):
    prepare(client)
    backend.push(
        "Why Acme?",
        json.dumps({"transcription": "I love the product.", "score": 5, "feedback": "Add detail."}),
        "What motivates you?",
    )
    client.post("/api/interview/start")

    response = client.post(
        "/api/interview/answer/audio",
        files={"file": ("answer.webm", b"webm-bytes", "audio/webm")},
    )

    body = response.json()
    assert body["turns"][1]["content"] == "I love the product."
    assert backend.requests[1].attachment.mime_type == "audio/webm"


def test_answer_before_start_is_rejected(client):
    response = client.post("/api/interview/answer", json={"answer": "Hi"})

    assert response.status_code == 422


def test_failed_next_question_can_be_refetched(client, backend):
    prepare(client)
    backend.push("Q1?", json.dumps({"score": 6, "feedback": "Ok."}), RuntimeError("hiccup"))
    client.post("/api/interview/start")

    failed = client.post("/api/interview/answer", json={"answer": "A1"})
    assert failed.status_code == status.HTTP_502_BAD_GATEWAY
    assert client.get("/api/interview").json()["state"] == "awaiting_question"

    backend.push("Q2?")
    response = client.post("/api/interview/next-question")

    assert response.json()["state"] == "question_posted"
    assert response.json()["turns"][-1]["content"] == "Q2?"


def test_restart(client, backend):
    prepare(client)
    backend.push("Q1?")
    client.post("/api/interview/start")

    response = client.post("/api/interview/restart")

    body = response.json()
    assert body["state"] == "idle"
    assert body["turns"] == []
    assert body["notifications"] == [{"kind": "info", "message": "Interview restarted."}]
