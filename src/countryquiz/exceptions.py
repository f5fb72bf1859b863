"""Exceptions raised by the country quiz."""


class CountryQuizError(Exception):
    """Base exception for the country quiz."""
    pass


class FetchError(CountryQuizError):
    """Country data could not be fetched or was not a JSON array."""
    pass


class QuizError(CountryQuizError):
    """An answer or navigation request does not fit the session."""
    pass


class QuestionIndexError(QuizError):
    """Question index outside the session's question range."""
    pass


class InvalidOptionError(QuizError):
    """Selected option is not one of the question's options."""
    pass
