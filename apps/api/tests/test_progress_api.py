from conftest import OTHER_USER_ID, SAMPLE_TEXT, auth


def _pack(client) -> dict:
    r = client.post(
        "/api/study-packs/generate",
        data={"textInput": SAMPLE_TEXT, "flashcardCount": "5", "quizCount": "3"},
    )
    assert r.status_code == 201, r.text
    return r.json()


def test_mastery_is_reflected_on_the_pack(client):
    pack = _pack(client)
    first, second = pack["flashcards"][0]["id"], pack["flashcards"][1]["id"]

    r = client.post("/api/flashcards/progress", json={"flashcardId": first, "mastered": True})
    assert r.status_code == 200
    assert r.json()["mastered"] is True
    assert r.json()["lastReviewed"]
    client.post("/api/flashcards/progress", json={"flashcardId": second, "mastered": False})

    body = client.get(f"/api/study-packs/{pack['id']}").json()
    cards = {c["id"]: c for c in body["flashcards"]}
    assert cards[first]["mastered"] is True
    assert cards[second]["mastered"] is False
    assert "mastered" not in cards[pack["flashcards"][2]["id"]]
    assert body["progress"]["masteredCount"] == 1
    assert body["progress"]["totalFlashcards"] == 5


def test_mastery_toggle_and_lookup(client):
    card_id = _pack(client)["flashcards"][0]["id"]

    r = client.get(f"/api/flashcards/{card_id}/progress")
    assert r.json() == {"flashcardId": card_id, "mastered": False, "lastReviewed": None}

    client.post("/api/flashcards/progress", json={"flashcardId": card_id, "mastered": True})
    client.post("/api/flashcards/progress", json={"flashcardId": card_id, "mastered": False})
    assert client.get(f"/api/flashcards/{card_id}/progress").json()["mastered"] is False


def test_mastery_on_unknown_or_foreign_card(client):
    card_id = _pack(client)["flashcards"][0]["id"]
    assert client.post("/api/flashcards/progress", json={"flashcardId": 424242, "mastered": True}).status_code == 404
    r = client.post(
        "/api/flashcards/progress",
        json={"flashcardId": card_id, "mastered": True},
        headers=auth(OTHER_USER_ID),
    )
    assert r.status_code == 401


def test_mastery_body_validation(client):
    r = client.post("/api/flashcards/progress", json={"mastered": True})
    assert r.status_code == 400
    assert r.json()["field"] == "flashcardId"


def test_quiz_attempts_history_and_average(client):
    pack = _pack(client)
    for score, correct in ((33, 1), (67, 2), (100, 3)):
        r = client.post(
            "/api/quiz/attempt",
            json={"studyPackId": pack["id"], "score": score, "totalQuestions": 3, "correctAnswers": correct},
        )
        assert r.status_code == 201
        assert r.json()["score"] == score

    body = client.get(f"/api/study-packs/{pack['id']}").json()
    history = body["progress"]["quizHistory"]
    assert [a["score"] for a in history] == [100, 67, 33]
    assert body["progress"]["lastAttempt"]["score"] == 100
    # (33 + 67 + 100) / 3 = 66.67
    assert body["progress"]["averageQuizScore"] == 67

    listed = client.get(f"/api/study-packs/{pack['id']}/quiz-attempts").json()
    assert [a["id"] for a in listed] == [a["id"] for a in history]


def test_quiz_attempt_rejects_bad_numbers(client):
    pack = _pack(client)
    r = client.post(
        "/api/quiz/attempt",
        json={"studyPackId": pack["id"], "score": 140, "totalQuestions": 3, "correctAnswers": 3},
    )
    assert r.status_code == 400
    r = client.post(
        "/api/quiz/attempt",
        json={"studyPackId": pack["id"], "score": 50, "totalQuestions": 2, "correctAnswers": 3},
    )
    assert r.status_code == 400


def test_quiz_attempt_on_foreign_pack(client):
    pack = _pack(client)
    r = client.post(
        "/api/quiz/attempt",
        json={"studyPackId": pack["id"], "score": 50, "totalQuestions": 2, "correctAnswers": 1},
        headers=auth(OTHER_USER_ID),
    )
    assert r.status_code == 401
    assert client.get(
        f"/api/study-packs/{pack['id']}/quiz-attempts", headers=auth(OTHER_USER_ID)
    ).status_code == 401
