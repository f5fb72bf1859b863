from typing import List, Optional

from pydantic import BaseModel

from .models import Answer, Question, QuestionKind, QuizState
from .tracker import answered_count, score

PLACEHOLDER_FLAG = "/static/placeholder.svg"


class OptionView(BaseModel):
    text: str
    state: str  # idle, correct, wrong or muted


class NavigationItem(BaseModel):
    index: int
    number: int
    answered: bool
    correct: bool
    active: bool
    highlighted: bool


class QuestionView(BaseModel):
    kind: QuestionKind
    prompt: str
    options: List[OptionView]
    flag_url: Optional[str] = None
    flag_alt: Optional[str] = None


class QuizView(BaseModel):
    # Pages render after the fetch has finished, so this is always False.
    loading: bool = False
    error: Optional[str] = None
    current_index: int = 0
    total_questions: int = 0
    score: int = 0
    answered: int = 0
    completed: bool = False
    question: Optional[QuestionView] = None
    answer: Optional[Answer] = None
    correct_answer: Optional[str] = None
    navigation: List[NavigationItem] = []

    @property
    def is_first_question(self) -> bool:
        return self.current_index == 0

    @property
    def is_last_question(self) -> bool:
        return self.current_index >= self.total_questions - 1


class ResultSummary(BaseModel):
    correct_count: int
    total_questions: int
    score_percentage: int


def option_state(question: Question, answer: Answer, option: str) -> str:
    if not answer.is_answered:
        return "idle"
    if option == question.correct_answer:
        return "correct"
    if option == answer.selected_option:
        return "wrong"
    return "muted"


def question_view(question: Question, answer: Answer) -> QuestionView:
    flag_url = flag_alt = None
    if question.kind == QuestionKind.flag and question.country is not None:
        flag_url = question.country.flag_url or PLACEHOLDER_FLAG
        flag_alt = question.country.flag_alt or f"Flag of {question.country.name}"
    return QuestionView(
        kind=question.kind,
        prompt=question.prompt,
        options=[
            OptionView(text=o, state=option_state(question, answer, o))
            for o in question.options
        ],
        flag_url=flag_url,
        flag_alt=flag_alt,
    )


def navigation(state: QuizState) -> List[NavigationItem]:
    items = []
    for answer in state.answers:
        active = answer.question_index == state.current_index
        items.append(
            NavigationItem(
                index=answer.question_index,
                number=answer.question_index + 1,
                answered=answer.is_answered,
                correct=answer.is_correct,
                active=active,
                highlighted=active or (answer.is_answered and answer.is_correct),
            )
        )
    return items


def build_view(state: QuizState) -> QuizView:
    """Everything the question page needs to render the current question."""
    view = QuizView(
        current_index=state.current_index,
        total_questions=state.total_questions,
        score=score(state),
        answered=answered_count(state),
        completed=state.completed,
        navigation=navigation(state),
    )
    if not state.questions:
        return view

    question = state.questions[state.current_index]
    answer = state.answers[state.current_index]
    return view.model_copy(
        update={
            "question": question_view(question, answer),
            "answer": answer,
            "correct_answer": question.correct_answer if answer.is_answered else None,
        }
    )


def error_view(message: str) -> QuizView:
    return QuizView(error=message)


def result_summary(state: QuizState) -> ResultSummary:
    correct = score(state)
    total = state.total_questions
    return ResultSummary(
        correct_count=correct,
        total_questions=total,
        score_percentage=round(correct / total * 100) if total else 0,
    )
