"""Session state transitions.

Every function takes a ``QuizState`` and returns a new one; nothing here
mutates the state it is given.
"""

import random
from typing import List, Optional, Sequence

from .exceptions import InvalidOptionError, QuestionIndexError
from .generator import generate
from .models import Answer, Country, Question, QuizState


def new_session(
    questions: List[Question], answers: Optional[List[Answer]] = None
) -> QuizState:
    if answers is None:
        answers = [Answer(question_index=i) for i in range(len(questions))]
    return QuizState(questions=questions, answers=answers)


def is_complete(state: QuizState) -> bool:
    return bool(state.answers) and all(a.is_answered for a in state.answers)


def answered_count(state: QuizState) -> int:
    return sum(1 for a in state.answers if a.is_answered)


def score(state: QuizState) -> int:
    return sum(1 for a in state.answers if a.is_correct)


def select_option(state: QuizState, question_index: int, option: str) -> QuizState:
    """Records ``option`` as the answer to a question.

    The first answer to a question is final; later selections return the
    state unchanged.
    """
    if not 0 <= question_index < state.total_questions:
        raise QuestionIndexError(
            f"Question {question_index} out of range 0..{state.total_questions - 1}"
        )

    current = state.answers[question_index]
    if current.is_answered:
        return state

    question = state.questions[question_index]
    if option not in question.options:
        raise InvalidOptionError(f"{option!r} is not an option of question {question_index}")

    answers = list(state.answers)
    answers[question_index] = current.model_copy(
        update={
            "selected_option": option,
            "is_correct": option == question.correct_answer,
        }
    )
    updated = state.model_copy(update={"answers": answers})
    return updated.model_copy(update={"completed": is_complete(updated)})


def navigate(state: QuizState, index: int) -> QuizState:
    last = max(state.total_questions - 1, 0)
    return state.model_copy(update={"current_index": min(max(index, 0), last)})


def restart(
    countries: Sequence[Country], rng: Optional[random.Random] = None
) -> QuizState:
    questions, answers = generate(countries, rng)
    return new_session(questions, answers)
