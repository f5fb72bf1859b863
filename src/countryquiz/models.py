from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Country(BaseModel):
    """An eligible country: it has a name, a capital and a flag."""

    model_config = ConfigDict(frozen=True)

    name: str
    official_name: Optional[str] = None
    capital: List[str] = Field(min_length=1)
    region: str = ""
    population: int = Field(default=0, ge=0)
    flag_svg: Optional[str] = None
    flag_png: Optional[str] = None
    flag_alt: Optional[str] = None

    @property
    def flag_url(self) -> Optional[str]:
        return self.flag_svg or self.flag_png


class QuestionKind(str, Enum):
    flag = "flag"
    capital = "capital"
    population = "population"
    region = "region"


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: QuestionKind
    prompt: str
    correct_answer: str
    options: List[str]
    country: Optional[Country] = None


class Answer(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_index: int
    selected_option: Optional[str] = None
    is_correct: bool = False

    @property
    def is_answered(self) -> bool:
        return self.selected_option is not None


class QuizState(BaseModel):
    """One quiz attempt. Transitions return a new state."""

    model_config = ConfigDict(frozen=True)

    questions: List[Question] = []
    answers: List[Answer] = []
    current_index: int = 0
    completed: bool = False

    @property
    def total_questions(self) -> int:
        return len(self.questions)


class SessionData(BaseModel):
    state: QuizState
    countries: List[Country]
    created_at: datetime


class AnswerRecord(BaseModel):
    question_index: int
    user_answer: str
    correct_answer: str
    is_correct: bool
    score: int
    quiz_completed: bool
