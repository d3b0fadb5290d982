"""Title suggestions from the RAWG video game catalogue."""

import logging

import httpx

from ..config import Settings
from ..models.responses import Suggestion
from ..telemetry import TelemetryEvents, track_event

logger = logging.getLogger(__name__)


class SuggestionError(Exception):
    """Suggestions could not be produced."""


class SuggestionsNotConfigured(SuggestionError):
    """No RAWG API key is configured."""


class SuggestionClient:
    """Searches RAWG for titles matching a free-text query."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://api.rawg.io/api",
        page_size: int = 10,
        timeout_seconds: float = 5.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self._client = http_client or httpx.AsyncClient(timeout=timeout_seconds)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SuggestionClient":
        return cls(
            api_key=settings.rawg_api_key,
            base_url=settings.rawg_base_url,
            page_size=settings.suggestion_page_size,
            timeout_seconds=settings.suggestion_timeout_seconds,
        )

    async def search(self, query: str) -> list[Suggestion]:
        """Return up to page_size suggestions for query.

        Raises:
            SuggestionsNotConfigured: If no API key is set
            SuggestionError: If RAWG cannot be reached or answers with an error
        """
        if not self.api_key:
            raise SuggestionsNotConfigured("RAWG API key not configured")

        try:
            response = await self._client.get(
                f"{self.base_url}/games",
                params={"key": self.api_key, "search": query, "page_size": self.page_size},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"RAWG error status: {e.response.status_code}")
            track_event(
                TelemetryEvents.EXTERNAL_SERVICE_ERROR,
                {"service": "rawg", "status_code": e.response.status_code},
            )
            raise SuggestionError("Failed to fetch suggestions") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"RAWG fetch error: {e}")
            track_event(
                TelemetryEvents.EXTERNAL_SERVICE_ERROR,
                {"service": "rawg", "error_type": type(e).__name__},
            )
            raise SuggestionError("Failed to fetch suggestions") from e

        return [
            Suggestion(title=game["name"], image=game.get("background_image"))
            for game in data.get("results") or []
            if game.get("name")
        ]

    async def close(self) -> None:
        await self._client.aclose()
