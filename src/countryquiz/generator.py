import logging
import random
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from .config import settings
from .countries import eligible_countries
from .models import Answer, Country, Question, QuestionKind
from .shuffle import shuffle

logger = logging.getLogger(__name__)

KIND_CYCLE = [
    QuestionKind.flag,
    QuestionKind.capital,
    QuestionKind.population,
    QuestionKind.region,
]


def kind_for_position(position: int) -> QuestionKind:
    return KIND_CYCLE[position % len(KIND_CYCLE)]


def build_prompt(kind: QuestionKind, country: Country) -> str:
    if kind == QuestionKind.flag:
        return "Which country does this flag belong to?"
    if kind == QuestionKind.capital:
        return f"{country.capital[0]} is the capital of which country?"
    if kind == QuestionKind.population:
        # Exact halves of the float round up, as JavaScript toFixed does.
        millions = Decimal(country.population / 1_000_000).quantize(
            Decimal("0.1"), rounding=ROUND_HALF_UP
        )
        return (
            "Which country has a population of about "
            f"{millions} million people?"
        )
    return f"Which of these countries is located in {country.region}?"


def pick_distractors(
    subject: Country,
    kind: QuestionKind,
    pool: Sequence[Country],
    rng: Optional[random.Random] = None,
    count: int = settings.DISTRACTOR_COUNT,
) -> List[Country]:
    """Draws up to ``count`` countries other than ``subject``.

    Region questions only draw from other regions, so the result can be
    shorter than ``count`` when the pool lacks regional variety.
    """
    candidates = [c for c in pool if c.name != subject.name]
    if kind == QuestionKind.region:
        candidates = [c for c in candidates if c.region != subject.region]

    picked: List[Country] = []
    names = set()
    for candidate in shuffle(candidates, rng):
        if candidate.name in names:
            continue
        names.add(candidate.name)
        picked.append(candidate)
        if len(picked) == count:
            break
    return picked


def build_question(
    subject: Country,
    kind: QuestionKind,
    pool: Sequence[Country],
    rng: Optional[random.Random] = None,
) -> Question:
    distractors = pick_distractors(subject, kind, pool, rng)
    if kind == QuestionKind.region and len(distractors) < settings.DISTRACTOR_COUNT:
        logger.warning(
            f"Only {len(distractors)} distractors outside {subject.region!r} "
            f"for {subject.name}"
        )
    options = shuffle([subject.name] + [c.name for c in distractors], rng)
    return Question(
        kind=kind,
        prompt=build_prompt(kind, subject),
        correct_answer=subject.name,
        options=options,
        country=subject,
    )


def generate(
    countries: Sequence[Union[Country, Mapping[str, Any]]],
    rng: Optional[random.Random] = None,
    size: int = settings.QUIZ_SIZE,
) -> Tuple[List[Question], List[Answer]]:
    """Builds up to ``size`` questions plus one unanswered answer each.

    ``countries`` may be the raw fetched payload; ineligible records are
    dropped first. No eligible country means no questions.
    """
    pool = eligible_countries(countries)
    if not pool:
        logger.warning("No eligible countries to build questions from")
        return [], []

    subjects = shuffle(pool, rng)[:size]
    questions = [
        build_question(subject, kind_for_position(i), pool, rng)
        for i, subject in enumerate(subjects)
    ]
    answers = [Answer(question_index=i) for i in range(len(questions))]
    return questions, answers
