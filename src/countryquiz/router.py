import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Form, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from .config import settings
from .countries import CountryProvider
from .exceptions import FetchError, QuizError
from .generator import generate
from .globals import country_provider, sessions, templates
from .models import AnswerRecord, SessionData
from .tracker import navigate, new_session, restart, score, select_option
from .view import build_view, error_view, result_summary

logger = logging.getLogger(__name__)

router = APIRouter()

FETCH_ERROR_MESSAGE = "Error fetching countries. Please try again."
NO_QUESTIONS_MESSAGE = "No questions available. Please try again."


# --- Dependencies ---
def get_provider() -> CountryProvider:
    return country_provider


def get_session_id(
    session_id: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME)
) -> Optional[str]:
    return session_id


def _is_expired(session: SessionData, now: datetime) -> bool:
    return now - session.created_at > timedelta(minutes=settings.SESSION_TIMEOUT_MINUTES)


def drop_expired_sessions() -> int:
    now = datetime.now()
    expired = [sid for sid, session in sessions.items() if _is_expired(session, now)]
    for sid in expired:
        del sessions[sid]
    return len(expired)


def get_active_session(session_id: Optional[str]) -> Optional[SessionData]:
    if not session_id or session_id not in sessions:
        return None
    session = sessions[session_id]
    if _is_expired(session, datetime.now()):
        del sessions[session_id]
        return None
    return session


def _error_page(request: Request, message: str, status_code: int) -> HTMLResponse:
    return templates.TemplateResponse(
        request, "error.html", {"view": error_view(message)}, status_code=status_code
    )


# --- Pages ---
@router.get("/", response_class=HTMLResponse)
async def start_quiz(
    request: Request,
    provider: CountryProvider = Depends(get_provider),
    session_id: Optional[str] = Depends(get_session_id),
):
    """Fetches the countries and starts a fresh quiz session."""
    try:
        countries = await provider.load()
    except FetchError:
        return _error_page(request, FETCH_ERROR_MESSAGE, status_code=502)

    questions, answers = generate(countries)
    if not questions:
        return _error_page(request, NO_QUESTIONS_MESSAGE, status_code=503)

    if session_id in sessions:
        del sessions[session_id]
    expired = drop_expired_sessions()
    if expired:
        logger.info(f"Dropped {expired} expired sessions")

    new_id = str(uuid.uuid4())
    sessions[new_id] = SessionData(
        state=new_session(questions, answers),
        countries=countries,
        created_at=datetime.now(),
    )
    logger.info(f"New session: {new_id} [{len(questions)} questions, {len(countries)} countries]")

    redirect = RedirectResponse(url="/quiz/0", status_code=302)
    redirect.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=new_id,
        httponly=True,
        samesite="Lax",
    )
    return redirect


@router.get("/quiz/{index}", response_class=HTMLResponse)
async def display_question_page(
    request: Request, index: int, session_id: Optional[str] = Depends(get_session_id)
):
    session_data = get_active_session(session_id)
    if not session_data:
        return RedirectResponse(url="/", status_code=302)
    if session_data.state.completed:
        return RedirectResponse(url="/result", status_code=302)

    session_data.state = navigate(session_data.state, index)
    if session_data.state.current_index != index:
        return RedirectResponse(
            url=f"/quiz/{session_data.state.current_index}", status_code=302
        )

    return templates.TemplateResponse(
        request,
        "quiz.html",
        {
            "view": build_view(session_data.state),
            "completion_delay_ms": settings.COMPLETION_DELAY_MS,
        },
    )


@router.get("/result", response_class=HTMLResponse)
async def result_page(request: Request, session_id: Optional[str] = Depends(get_session_id)):
    session_data = get_active_session(session_id)
    if not session_data:
        return RedirectResponse(url="/", status_code=302)
    if not session_data.state.completed:
        return RedirectResponse(
            url=f"/quiz/{session_data.state.current_index}", status_code=302
        )
    return templates.TemplateResponse(
        request, "result.html", {"summary": result_summary(session_data.state)}
    )


@router.post("/restart", response_class=RedirectResponse)
async def restart_quiz(session_id: Optional[str] = Depends(get_session_id)):
    """Starts over with new questions drawn from the already fetched countries."""
    session_data = get_active_session(session_id)
    if not session_data:
        return RedirectResponse(url="/", status_code=302)

    session_data.state = restart(session_data.countries)
    logger.info(f"Restarted session: {session_id}")
    return RedirectResponse(url="/quiz/0", status_code=302)


# --- API ---
@router.post("/submit_answer", response_model=AnswerRecord)
async def submit_answer(
    current_index: int = Form(...),
    option: str = Form(...),
    session_id: Optional[str] = Depends(get_session_id),
):
    session_data = get_active_session(session_id)
    if not session_data:
        return JSONResponse({"error": "Invalid session"}, status_code=401)

    state = session_data.state
    if 0 <= current_index < state.total_questions and state.answers[current_index].is_answered:
        return JSONResponse({"error": "Already answered"}, status_code=400)

    try:
        state = select_option(state, current_index, option)
    except QuizError as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    session_data.state = state

    question = state.questions[current_index]
    answer = state.answers[current_index]
    if state.completed:
        logger.info(f"Session {session_id} completed: {score(state)}/{state.total_questions}")

    return AnswerRecord(
        question_index=current_index,
        user_answer=answer.selected_option,
        correct_answer=question.correct_answer,
        is_correct=answer.is_correct,
        score=score(state),
        quiz_completed=state.completed,
    )


@router.get("/api/quiz/{index}")
async def get_question_data(index: int, session_id: Optional[str] = Depends(get_session_id)):
    session_data = get_active_session(session_id)
    if not session_data:
        return JSONResponse({"error": "Session invalid"}, status_code=401)
    if not (0 <= index < session_data.state.total_questions):
        return JSONResponse({"error": "Index error"}, status_code=404)

    return build_view(navigate(session_data.state, index))


@router.get("/api/result")
async def get_result_data(session_id: Optional[str] = Depends(get_session_id)):
    session_data = get_active_session(session_id)
    if not session_data:
        return JSONResponse({"error": "Session invalid"}, status_code=401)

    summary = result_summary(session_data.state)
    return {
        **summary.model_dump(),
        "completed": session_data.state.completed,
        "answers": [a.model_dump() for a in session_data.state.answers],
    }


@router.post("/api/reset")
async def reset_session(response: Response, session_id: Optional[str] = Depends(get_session_id)):
    if session_id in sessions:
        del sessions[session_id]
        logger.info(f"Reset session: {session_id}")
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"status": "success"}
