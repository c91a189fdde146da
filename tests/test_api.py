from fastapi.testclient import TestClient

from quizlearn.db import engine
from quizlearn.errors import GenerationServiceError
from quizlearn.main import app
from quizlearn.models import QuizResultRecord

from conftest import completion_for, make_question


def _questions(n, correct=1):
    return [make_question(i, correct=correct) for i in range(n)]


def _submit(client, headers, questions, answers, topic="python", difficulty="intermediate"):
    return client.post(
        "/api/quiz/submit",
        headers=headers,
        json={
            "quizId": "quiz_1_abc",
            "topic": topic,
            "difficulty": difficulty,
            "questions": questions,
            "userAnswers": answers,
            "timeSpent": 30000,
        },
    )


# ---- auth ----

def test_register_and_login(client):
    r = client.post(
        "/api/auth/register",
        json={"fullName": "Alan Turing", "email": "ALAN@example.com", "password": "enigma-1940"},
    )
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["user"]["email"] == "alan@example.com"
    assert body["user"]["fullName"] == "Alan Turing"
    assert body["token"]

    r = client.post("/api/auth/login", json={"email": " alan@example.com ", "password": "enigma-1940"})
    assert r.status_code == 200
    token = r.json()["token"]

    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "alan@example.com"


def test_register_duplicate_email(client, auth_headers):
    r = client.post(
        "/api/auth/register",
        json={"fullName": "Someone Else", "email": "ada@example.com", "password": "password123"},
    )
    assert r.status_code == 409
    assert r.json() == {"success": False, "error": "Account with this email already exists"}


def test_register_validation(client):
    r = client.post("/api/auth/register", json={"fullName": "Bob", "email": "bob@example.com", "password": "short"})
    assert r.status_code == 400
    assert r.json()["success"] is False

    r = client.post("/api/auth/register", json={"fullName": "Bob", "email": "not-an-email", "password": "longenough"})
    assert r.status_code == 400


def test_login_wrong_password(client, auth_headers):
    r = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "wrong-password"})
    assert r.status_code == 401
    assert r.json()["error"] == "Invalid email or password"


def test_oauth2_token_form(client, auth_headers):
    r = client.post("/api/auth/token", data={"username": "ada@example.com", "password": "analytical"})
    assert r.status_code == 200
    assert r.json()["token_type"] == "bearer"


def test_protected_routes_require_token(client):
    assert client.get("/api/user/dashboard").status_code == 401
    r = client.get("/api/user/dashboard", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401
    assert r.json() == {"success": False, "error": "Invalid or expired token"}


# ---- quiz generation ----

def test_generate_quiz(client, auth_headers, fake_llm):
    r = client.post(
        "/api/quiz/generate",
        headers=auth_headers,
        json={"topic": "python", "difficulty": "beginner", "questionCount": 5},
    )
    assert r.status_code == 200, r.text
    quiz = r.json()["quiz"]
    assert quiz["topic"] == "python"
    assert quiz["questionCount"] == 5
    assert quiz["timeLimit"] == 300
    assert quiz["id"].startswith("quiz_")
    assert quiz["createdAt"]
    first = quiz["questions"][0]
    assert set(first) == {"question", "options", "correctAnswer", "explanation", "difficulty", "category"}
    assert first["options"][first["correctAnswer"]] == "q0-a"
    assert len(fake_llm.calls) == 1


def test_generate_defaults(client, auth_headers, fake_llm):
    r = client.post("/api/quiz/generate", headers=auth_headers, json={"topic": "python"})
    assert r.status_code == 200
    assert r.json()["quiz"]["difficulty"] == "intermediate"
    assert r.json()["quiz"]["questionCount"] == 5


def test_generate_unknown_topic(client, auth_headers, fake_llm):
    r = client.post("/api/quiz/generate", headers=auth_headers, json={"topic": "quantum"})
    assert r.status_code == 400
    assert "topic" in r.json()["error"]
    assert fake_llm.calls == []


def test_generate_bad_count(client, auth_headers, fake_llm):
    r = client.post("/api/quiz/generate", headers=auth_headers, json={"topic": "python", "questionCount": 2})
    assert r.status_code == 400
    assert r.json()["error"] == "Question count must be between 3 and 20"
    assert fake_llm.calls == []


def test_generate_hides_upstream_payload(client, auth_headers, fake_llm):
    fake_llm.content = completion_for([make_question(0, options=["x", "y", "z"])] + _questions(4))
    r = client.post("/api/quiz/generate", headers=auth_headers, json={"topic": "python"})
    assert r.status_code == 502
    assert r.json() == {"success": False, "error": "Failed to parse quiz questions from AI response"}


def test_generate_service_down(client, auth_headers, fake_llm):
    fake_llm.error = GenerationServiceError("Completion API error: 503 - secret upstream text")
    r = client.post("/api/quiz/generate", headers=auth_headers, json={"topic": "python"})
    assert r.status_code == 502
    assert r.json()["error"] == "Failed to generate quiz questions"


# ---- submission and progress ----

def test_submit_all_correct(client, auth_headers):
    r = _submit(client, auth_headers, _questions(5), [1] * 5)
    assert r.status_code == 200, r.text
    body = r.json()
    result = body["result"]
    assert result["score"] == 100
    assert result["percentage"] == 100
    assert result["correctAnswers"] == 5
    assert result["totalQuestions"] == 5
    assert result["timeSpent"] == 30000
    assert len(result["detailedResults"]) == 5
    assert body["progress"]["streakCount"] == 1
    assert body["progress"]["topicStats"]["python"] == {
        "attempts": 1, "totalScore": 100, "bestScore": 100, "averageScore": 100,
    }


def test_submit_half_correct_resets_streak(client, auth_headers):
    _submit(client, auth_headers, _questions(5), [1] * 5)
    r = _submit(client, auth_headers, _questions(4), [1, 1, 0, None])
    body = r.json()
    assert body["result"]["score"] == 50
    assert body["result"]["detailedResults"][3]["userAnswer"] is None
    assert body["progress"]["streakCount"] == 0
    assert body["progress"]["bestStreak"] == 1
    assert body["progress"]["averageScore"] == 78
    assert body["progress"]["totalQuizzes"] == 2


def test_submit_answer_count_mismatch(client, auth_headers):
    r = _submit(client, auth_headers, _questions(3), [1, 1])
    assert r.status_code == 400
    assert "Invalid quiz submission data" in r.json()["error"]


def test_submit_unknown_topic(client, auth_headers):
    r = _submit(client, auth_headers, _questions(3), [1, 1, 1], topic="quantum")
    assert r.status_code == 400


def test_dashboard(client, auth_headers):
    _submit(client, auth_headers, _questions(3), [1, 1, 1], topic="python")
    _submit(client, auth_headers, _questions(4), [0, 0, 0, 0], topic="algorithms", difficulty="advanced")

    r = client.get("/api/user/dashboard", headers=auth_headers)
    assert r.status_code == 200
    dash = r.json()["dashboard"]
    assert dash["user"]["name"] == "Ada Lovelace"
    assert dash["user"]["email"] == "ada@example.com"
    assert dash["stats"]["totalQuizzes"] == 2
    assert dash["stats"]["correctAnswers"] == 3
    assert [a["topic"] for a in dash["recentActivity"]] == ["algorithms", "python"]
    assert dash["recentActivity"][0]["score"] == 0
    assert len(dash["availableTopics"]) == 6


def test_dashboard_for_new_user(client, auth_headers):
    dash = client.get("/api/user/dashboard", headers=auth_headers).json()["dashboard"]
    assert dash["recentActivity"] == []
    assert dash["stats"] == {
        "totalQuizzes": 0, "totalQuestions": 0, "correctAnswers": 0, "averageScore": 0,
        "streakCount": 0, "bestStreak": 0, "topicStats": {},
    }


# ---- catalog, tutor, health ----

def test_topics(client):
    topics = client.get("/api/topics").json()["topics"]
    by_id = {t["id"]: t for t in topics}
    assert set(by_id) == {"javascript", "python", "algorithms", "datastructures", "webdevelopment", "machinelearning"}
    assert by_id["machinelearning"]["difficulty"] == ["intermediate", "advanced"]
    assert by_id["python"]["icon"] == "🐍"


def test_tutor_chat(client, auth_headers, fake_llm):
    fake_llm.content = "  A closure captures variables.  "
    r = client.post("/api/tutor/chat", headers=auth_headers, json={"message": "What is a closure?"})
    assert r.status_code == 200
    assert r.json()["response"] == "A closure captures variables."
    call = fake_llm.calls[0]
    assert call["temperature"] == 0.7
    assert call["max_tokens"] == 1000
    assert "General programming questions" in call["messages"][0]["content"]


def test_tutor_requires_message(client, auth_headers, fake_llm):
    r = client.post("/api/tutor/chat", headers=auth_headers, json={"message": "   "})
    assert r.status_code == 400
    assert fake_llm.calls == []


def test_health(client):
    body = client.get("/api/health").json()
    assert body["status"] == "healthy"
    assert body["services"]["database"] == "connected"
    assert body["services"]["llm"] is True


def test_submit_rejects_boolean_answers(client, auth_headers):
    r = _submit(client, auth_headers, _questions(3), [True, True, True])
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_submit_rejects_boolean_correct_answer(client, auth_headers):
    questions = [make_question(i, correct=True) for i in range(3)]
    r = _submit(client, auth_headers, questions, [1, 1, 1])
    assert r.status_code == 400


def test_submit_difficulty_must_belong_to_topic(client, auth_headers):
    r = _submit(client, auth_headers, _questions(3), [1, 1, 1], topic="machinelearning", difficulty="beginner")
    assert r.status_code == 400
    assert "intermediate, advanced" in r.json()["error"]
    dash = client.get("/api/user/dashboard", headers=auth_headers).json()["dashboard"]
    assert dash["stats"]["totalQuizzes"] == 0


def test_database_errors_use_json_error_shape(client, auth_headers):
    QuizResultRecord.__table__.drop(bind=engine)
    # No lifespan here, so startup does not recreate the table
    broken = TestClient(app, raise_server_exceptions=False)
    r = broken.get("/api/user/dashboard", headers=auth_headers)
    assert r.status_code == 500
    assert r.json() == {"success": False, "error": "Internal server error"}
