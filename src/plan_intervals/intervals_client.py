"""Intervals.icu REST API client.

Authentication: HTTP Basic Auth where username is the literal string "API_KEY"
and password is your API key from intervals.icu → Settings → Developer Settings.

API docs: https://intervals.icu/api/v1/docs/swagger-ui/index.html
"""

import httpx
from loguru import logger
from pydantic import SecretStr

from plan_intervals.models.intervals import IntervalsEvent
from plan_intervals.models.results import Result

_BASE_URL = "https://intervals.icu"


class IntervalsAPIError(Exception):
    """Raised when the Intervals.icu API returns an error response."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {message}")


class IntervalsClient:
    """Thin synchronous wrapper around the Intervals.icu REST API."""

    def __init__(
        self,
        api_key: SecretStr,
        athlete_id: str = "0",
        base_url: str = _BASE_URL,
        timeout: float = 30.0,
    ) -> None:
        self._athlete_id = athlete_id
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            auth=("API_KEY", api_key.get_secret_value()),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            timeout=timeout,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _athlete_url(self) -> str:
        return f"{self._base_url}/api/v1/athlete/{self._athlete_id}"

    def _url(self, path: str) -> str:
        return f"{self._athlete_url()}/{path.lstrip('/')}"

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        try:
            detail = response.json()
            message = detail.get("message") or detail.get("error") or str(detail)
        except Exception:
            message = response.text or response.reason_phrase

        if response.status_code == 401:
            raise IntervalsAPIError(
                401,
                "Unauthorised — check your API key "
                "(Settings → Developer Settings on intervals.icu).",
            )
        if response.status_code == 403:
            raise IntervalsAPIError(403, "Forbidden — your key may lack the required scope.")
        if response.status_code == 404:
            raise IntervalsAPIError(
                404,
                f"Not found — check your athlete ID (current: '{self._athlete_id}'). {message}",
            )
        raise IntervalsAPIError(response.status_code, message)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create_event(self, event: IntervalsEvent) -> dict:  # type: ignore[type-arg]
        """Create one calendar event (planned workout or note).

        Args:
            event: The event to create. Its ``external_id`` lets Intervals.icu
                   recognise repeated uploads of the same workout.

        Returns:
            The created event object from the API, or an empty dict when the
            response has no body.

        Raises:
            IntervalsAPIError: on an error status or an unreadable body.
        """
        response = self._client.post(
            self._url("events"), json=event.model_dump(exclude_none=True)
        )
        self._raise_for_status(response)
        logger.debug("Created event {} on {}", event.name, event.start_date_local)
        if not response.content:
            return {}
        try:
            return response.json()  # type: ignore[no-any-return]
        except ValueError as exc:
            raise IntervalsAPIError(
                response.status_code, f"Unreadable response body: {exc}"
            ) from exc

    def get_events(self, oldest: str, newest: str) -> list[dict]:  # type: ignore[type-arg]
        """Fetch calendar events within a date range.

        Args:
            oldest: Start date in YYYY-MM-DD format.
            newest: End date in YYYY-MM-DD format.

        Returns:
            List of event objects from the API.
        """
        response = self._client.get(
            self._url("events"),
            params={"oldest": oldest, "newest": newest},
        )
        self._raise_for_status(response)
        return response.json()  # type: ignore[no-any-return]

    def get_athlete(self) -> dict:  # type: ignore[type-arg]
        """Fetch the authenticated athlete's profile."""
        response = self._client.get(self._athlete_url())
        self._raise_for_status(response)
        return response.json()  # type: ignore[no-any-return]

    def validate_credentials(self) -> Result[bool]:
        """Probe the API key with a lightweight authenticated read. Never raises."""
        try:
            response = self._client.get(self._athlete_url())
        except httpx.HTTPError as exc:
            logger.warning("Credential check failed: {}", exc)
            return Result.fail(str(exc) or "Unknown error occurred")

        if response.status_code in (401, 403):
            return Result.fail("Invalid API key")
        if not response.is_success:
            return Result.fail(f"API validation failed with status {response.status_code}")
        try:
            response.json()
        except ValueError as exc:
            logger.warning("Credential check returned an unreadable body: {}", exc)
            return Result.fail(str(exc) or "Unknown error occurred")
        return Result.ok(True)

    # ------------------------------------------------------------------
    # Context manager support
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "IntervalsClient":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
