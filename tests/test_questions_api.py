def create_question(client, **overrides):
    payload = {
        "question": "What does HTTP 204 mean?",
        "options": ["OK", "No Content", "Created"],
        "correct_answer": "No Content",
    }
    payload.update(overrides)
    return client.post("/api/questions", json=payload)


def test_create_question_applies_defaults(client):
    response = create_question(client)

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "NOT_ATTEMPTED"
    assert data["selected_answers"] is None
    assert data["options"] == ["OK", "No Content", "Created"]


def test_create_question_requires_fields(client):
    response = client.post("/api/questions", json={"question": "Incomplete?"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Question, options, and correct_answer are required"


def test_create_question_rejects_unknown_status(client):
    assert create_question(client, status="SKIPPED").status_code == 422


def test_list_questions(client):
    create_question(client)
    create_question(client, question="Second?")

    response = client.get("/api/questions")

    assert response.status_code == 200
    assert [q["question"] for q in response.json()] == ["What does HTTP 204 mean?", "Second?"]


def test_submit_test_updates_answers_and_skips_unknown_ids(client):
    question_id = create_question(client).json()["id"]

    response = client.post("/api/submit-test", json={"questions": [
        {"id": question_id, "status": "ANSWERED", "selected_answers": "No Content"},
        {"id": 99999, "status": "REVIEW"},
    ]})

    assert response.status_code == 200
    assert response.json() == {"message": "Test results saved successfully", "updated": 1}
    saved = client.get("/api/questions").json()[0]
    assert saved["status"] == "ANSWERED"
    assert saved["selected_answers"] == "No Content"


def test_delete_questions(client):
    create_question(client)
    create_question(client)

    response = client.delete("/api/questions")

    assert response.status_code == 200
    assert client.get("/api/questions").json() == []
