import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import httpx
import pandas as pd

from .exceptions import FetchError
from .models import Country

logger = logging.getLogger(__name__)

# Flattened payload column -> Country field
FIELDS = {
    "name.common": "name",
    "name.official": "official_name",
    "capital": "capital",
    "region": "region",
    "population": "population",
    "flags.svg": "flag_svg",
    "flags.png": "flag_png",
    "flags.alt": "flag_alt",
}


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _capitals(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [c.strip() for c in value if isinstance(c, str) and c.strip()]


def _population(value: Any) -> int:
    try:
        population = int(value)
    except (TypeError, ValueError):
        return 0
    return max(population, 0)


def normalize_records(records: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """Flattens raw country records into one row per record.

    Missing or malformed fields come out as ``None`` (text), ``[]`` (capital)
    or ``0`` (population) instead of raising.
    """
    rows = [dict(r) for r in records if isinstance(r, Mapping)]
    frame = pd.json_normalize(rows) if rows else pd.DataFrame()
    frame = frame.reindex(columns=list(FIELDS)).rename(columns=FIELDS)

    for column in ("name", "official_name", "region", "flag_svg", "flag_png", "flag_alt"):
        frame[column] = frame[column].map(_text).astype(object)
    frame["capital"] = frame["capital"].map(_capitals).astype(object)
    frame["population"] = frame["population"].map(_population).astype(object)
    return frame


def _to_country(row: Dict[str, Any]) -> Country:
    return Country(
        name=row["name"],
        official_name=_text(row["official_name"]),
        capital=list(row["capital"]),
        region=_text(row["region"]) or "",
        population=int(row["population"]),
        flag_svg=_text(row["flag_svg"]),
        flag_png=_text(row["flag_png"]),
        flag_alt=_text(row["flag_alt"]),
    )


def parse_countries(records: Iterable[Mapping[str, Any]]) -> List[Country]:
    """Keeps the eligible records (name, capital, flag) as ``Country`` objects.

    Records sharing a common name are collapsed to the first one.
    """
    frame = normalize_records(records)
    if frame.empty:
        return []

    eligible = (
        frame["name"].notna()
        & frame["capital"].map(len).gt(0)
        & (frame["flag_svg"].notna() | frame["flag_png"].notna())
    )
    frame = frame[eligible].drop_duplicates(subset="name", keep="first")
    return [_to_country(row) for row in frame.to_dict("records")]


def eligible_countries(
    countries: Sequence[Union[Country, Mapping[str, Any]]]
) -> List[Country]:
    """Accepts raw payload records and/or already validated countries."""
    validated = [c for c in countries if isinstance(c, Country)]
    raw = [c for c in countries if not isinstance(c, Country)]
    if raw:
        validated += parse_countries(raw)

    seen = set()
    unique = []
    for country in validated:
        if country.name not in seen:
            seen.add(country.name)
            unique.append(country)
    return unique


class CountryProvider:
    """Fetches the full country list from the configured endpoint."""

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def fetch(self) -> List[Dict[str, Any]]:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(self.url)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch countries from {self.url}: {e}")
            raise FetchError(f"Failed to fetch countries: {e}") from e
        except ValueError as e:
            logger.error(f"Country payload from {self.url} is not JSON: {e}")
            raise FetchError("Country payload is not valid JSON") from e

        if not isinstance(payload, list):
            logger.error(f"Country payload from {self.url} is not a list")
            raise FetchError("Country payload is not a JSON array")

        logger.info(f"Fetched {len(payload)} country records")
        return payload

    async def load(self) -> List[Country]:
        return eligible_countries(await self.fetch())
