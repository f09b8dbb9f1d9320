"""
HTTP client for the tutoring marketplace availability endpoints.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from ..domain.exceptions import AuthenticationError, GatewayError

logger = logging.getLogger(__name__)


class ApiClient:
    """
    Client for the marketplace REST API.

    Endpoints used:
        GET  /tutors/{id}/availability
        POST /tutors/{id}/availability                  body: {"slots": [...]}
        GET  /tutors/{id}/availability-change-requests
        POST /tutors/{id}/availability-change-request
    """

    DEFAULT_BASE_URL = "http://localhost:3000/api"

    def __init__(
        self,
        access_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the API client.

        Args:
            access_token: Bearer token of the signed-in tutor
            base_url: API root, without trailing slash
            timeout: Per-request timeout in seconds
            session: Optional preconfigured requests session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    def load_records(self, tutor_id: int) -> List[Dict[str, Any]]:
        """
        Fetch the tutor's stored availability.

        Returns:
            List of {day_of_week, start_time, end_time} records

        Raises:
            GatewayError: If the request fails or the payload is not a list
        """
        data = self._request("GET", f"/tutors/{tutor_id}/availability")
        if not isinstance(data, list):
            raise GatewayError(f"Expected a list of availability records, got {type(data).__name__}")
        return data

    def save_records(self, tutor_id: int, records: List[Dict[str, str]]) -> None:
        """Replace the tutor's stored availability with ``records``."""
        self._request("POST", f"/tutors/{tutor_id}/availability", json={"slots": records})

    def list_change_requests(self, tutor_id: int) -> List[Dict[str, Any]]:
        data = self._request("GET", f"/tutors/{tutor_id}/availability-change-requests")
        if not isinstance(data, list):
            raise GatewayError(f"Expected a list of change requests, got {type(data).__name__}")
        return data

    def create_change_request(self, tutor_id: int, payload: Dict[str, str]) -> Dict[str, Any]:
        data = self._request("POST", f"/tutors/{tutor_id}/availability-change-request", json=payload)
        return data if isinstance(data, dict) else {}

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"

        try:
            response = self.session.request(
                method,
                url,
                headers=self.headers,
                json=json,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise GatewayError(f"Request to {url} failed: {exc}") from exc

        if response.status_code == 401:
            raise AuthenticationError("You are not authorized. Please log in again.")

        if not response.ok:
            raise GatewayError(self._error_message(response))

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(f"Invalid JSON from {url}: {exc}") from exc

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        """Prefer the backend's own message, which may be a list of strings."""
        message = None
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            message = body.get("message")
        if isinstance(message, list):
            message = ", ".join(str(item) for item in message)

        if message:
            return str(message)

        logger.warning("API error %s without message from %s", response.status_code, response.url)
        return f"Something went wrong (HTTP {response.status_code}). Please try again."
