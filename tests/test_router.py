"""Tests for the quiz pages and JSON API."""
from datetime import datetime, timedelta

import httpx
import pytest
from fastapi.testclient import TestClient

from countryquiz.app import create_app
from countryquiz.config import settings
from countryquiz.countries import CountryProvider
from countryquiz.globals import sessions
from countryquiz.router import get_provider

from conftest import make_record

URL = "https://countries.example/all"


@pytest.fixture
def payload():
    regions = ["Europe", "Asia", "Africa", "Americas"]
    return [
        make_record(f"Country {i}", capital=(f"City {i}",), region=regions[i % 4])
        for i in range(16)
    ]


def _client(handler):
    app = create_app()
    app.dependency_overrides[get_provider] = lambda: CountryProvider(
        URL, transport=httpx.MockTransport(handler)
    )
    return TestClient(app)


@pytest.fixture
def client(payload):
    with _client(lambda request: httpx.Response(200, json=payload)) as test_client:
        yield test_client
    sessions.clear()


@pytest.fixture
def started(client):
    """A client with a freshly started quiz session."""
    response = client.get("/", follow_redirects=False)
    assert response.status_code == 302
    return client


def _state(client):
    return sessions[client.cookies.get(settings.SESSION_COOKIE_NAME)].state


def _answer(client, index, option):
    return client.post("/submit_answer", data={"current_index": index, "option": option})


def _answer_all(client):
    for i, question in enumerate(_state(client).questions):
        response = _answer(client, i, question.correct_answer)
        assert response.status_code == 200
    return response


# ============================================================================
# STARTING A SESSION
# ============================================================================


class TestStart:
    """GET / fetches countries and starts a quiz."""

    def test_start_redirects_to_first_question(self, client):
        response = client.get("/", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/quiz/0"
        assert settings.SESSION_COOKIE_NAME in response.cookies

    def test_session_has_ten_questions(self, started):
        state = _state(started)

        assert state.total_questions == 10
        assert state.current_index == 0
        assert state.completed is False

    def test_first_question_page(self, started):
        response = started.get("/quiz/0")

        assert response.status_code == 200
        assert "Which country does this flag belong to?" in response.text
        assert "0/10 Points" in response.text

    def test_fetch_failure(self):
        with _client(lambda request: httpx.Response(500)) as client:
            response = client.get("/", follow_redirects=False)

        assert response.status_code == 502
        assert "Error fetching countries. Please try again." in response.text
        assert "Try Again" in response.text

    def test_no_eligible_countries(self):
        records = [make_record("No Capital", capital=None)]
        with _client(lambda request: httpx.Response(200, json=records)) as client:
            response = client.get("/", follow_redirects=False)

        assert response.status_code == 503
        assert "No questions available. Please try again." in response.text

    def test_start_replaces_old_session(self, started):
        old_id = started.cookies.get(settings.SESSION_COOKIE_NAME)
        started.get("/", follow_redirects=False)

        assert old_id not in sessions
        assert len(sessions) == 1

    def test_start_drops_expired_sessions(self, started):
        """Abandoned sessions past the timeout are removed when a quiz starts."""
        stale_id = started.cookies.get(settings.SESSION_COOKIE_NAME)
        sessions[stale_id].created_at = datetime.now() - timedelta(
            minutes=settings.SESSION_TIMEOUT_MINUTES + 1
        )
        started.cookies.clear()

        started.get("/", follow_redirects=False)

        assert stale_id not in sessions
        assert len(sessions) == 1

    def test_start_keeps_live_sessions(self, started):
        live_id = started.cookies.get(settings.SESSION_COOKIE_NAME)
        started.cookies.clear()

        started.get("/", follow_redirects=False)

        assert live_id in sessions
        assert len(sessions) == 2


# ============================================================================
# QUESTION PAGES
# ============================================================================


class TestQuestionPage:
    def test_without_session_redirects_home(self, client):
        response = client.get("/quiz/0", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/"

    def test_navigation_moves_pointer(self, started):
        response = started.get("/quiz/3")

        assert response.status_code == 200
        assert _state(started).current_index == 3

    def test_out_of_range_is_clamped(self, started):
        response = started.get("/quiz/42", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/quiz/9"

    def test_api_question(self, started):
        data = started.get("/api/quiz/1").json()

        assert data["current_index"] == 1
        assert data["total_questions"] == 10
        assert data["question"]["kind"] == "capital"
        assert len(data["question"]["options"]) == 4
        assert data["correct_answer"] is None

    def test_api_question_out_of_range(self, started):
        assert started.get("/api/quiz/10").status_code == 404

    def test_api_question_without_session(self, client):
        assert client.get("/api/quiz/0").status_code == 401


# ============================================================================
# ANSWERS
# ============================================================================


class TestSubmitAnswer:
    """POST /submit_answer."""

    def test_correct_answer(self, started):
        question = _state(started).questions[0]
        data = _answer(started, 0, question.correct_answer).json()

        assert data["is_correct"] is True
        assert data["correct_answer"] == question.correct_answer
        assert data["score"] == 1
        assert data["quiz_completed"] is False

    def test_wrong_answer(self, started):
        question = _state(started).questions[0]
        wrong = next(o for o in question.options if o != question.correct_answer)
        data = _answer(started, 0, wrong).json()

        assert data["is_correct"] is False
        assert data["user_answer"] == wrong
        assert data["score"] == 0

    def test_already_answered(self, started):
        question = _state(started).questions[0]
        wrong = next(o for o in question.options if o != question.correct_answer)
        _answer(started, 0, wrong)

        response = _answer(started, 0, question.correct_answer)

        assert response.status_code == 400
        assert _state(started).answers[0].selected_option == wrong

    def test_unknown_option(self, started):
        assert _answer(started, 0, "Atlantis").status_code == 400

    def test_bad_index(self, started):
        assert _answer(started, 10, "Country 1").status_code == 400

    def test_without_session(self, client):
        assert _answer(client, 0, "Country 1").status_code == 401

    def test_last_answer_completes(self, started):
        data = _answer_all(started).json()

        assert data["quiz_completed"] is True
        assert data["score"] == 10
        assert _state(started).completed is True


# ============================================================================
# RESULT, RESTART, RESET
# ============================================================================


class TestResult:
    def test_result_before_completion_redirects(self, started):
        started.get("/quiz/2")
        response = started.get("/result", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/quiz/2"

    def test_result_page(self, started):
        _answer_all(started)
        response = started.get("/result")

        assert response.status_code == 200
        assert "Congrats! You completed the quiz." in response.text
        assert "You answered 10/10 correctly" in response.text
        assert "Play again" in response.text

    def test_completed_quiz_redirects_to_result(self, started):
        _answer_all(started)
        response = started.get("/quiz/0", follow_redirects=False)

        assert response.headers["location"] == "/result"

    def test_api_result(self, started):
        question = _state(started).questions[0]
        _answer(started, 0, question.correct_answer)

        data = started.get("/api/result").json()

        assert data["correct_count"] == 1
        assert data["total_questions"] == 10
        assert data["score_percentage"] == 10
        assert data["completed"] is False
        assert len(data["answers"]) == 10


class TestRestart:
    def test_restart_after_completion(self, started):
        _answer_all(started)
        response = started.post("/restart", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/quiz/0"
        state = _state(started)
        assert state.completed is False
        assert state.current_index == 0
        assert state.total_questions == 10
        assert started.get("/api/result").json()["correct_count"] == 0

    def test_restart_without_session(self, client):
        response = client.post("/restart", follow_redirects=False)

        assert response.headers["location"] == "/"

    def test_reset(self, started):
        session_id = started.cookies.get(settings.SESSION_COOKIE_NAME)
        response = started.post("/api/reset")

        assert response.json() == {"status": "success"}
        assert session_id not in sessions
