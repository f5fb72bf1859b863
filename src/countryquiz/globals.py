from typing import Dict

from fastapi.templating import Jinja2Templates

from .config import settings
from .countries import CountryProvider
from .models import SessionData

templates = Jinja2Templates(directory=settings.TEMPLATE_DIR)
country_provider = CountryProvider(settings.COUNTRIES_URL, timeout=settings.FETCH_TIMEOUT)
sessions: Dict[str, SessionData] = {}
