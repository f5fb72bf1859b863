import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


class Settings:
    PROJECT_NAME: str = "countryquiz"
    DEBUG: bool = False
    LOG_DIR: str = "log"
    LOG_FILE: str = "countryquiz.log"
    TEMPLATE_DIR: str = os.path.join(BASE_DIR, "templates")
    STATIC_DIR: str = os.path.join(BASE_DIR, "static")
    COUNTRIES_URL: str = os.environ.get(
        "COUNTRIES_URL",
        "https://restcountries.com/v3.1/all?fields=name,flags,capital,region,population",
    )
    FETCH_TIMEOUT: float = float(os.environ.get("FETCH_TIMEOUT", "30"))
    QUIZ_SIZE: int = 10
    DISTRACTOR_COUNT: int = 3
    SESSION_COOKIE_NAME: str = "quiz_session_id"
    SESSION_TIMEOUT_MINUTES: int = 120
    COMPLETION_DELAY_MS: int = 1000
    ROOT_PATH: str = os.environ.get("ROOT_PATH", "")


settings = Settings()
