"""
Client for the external service the plugin synchronizes with.
"""

import json
from typing import Dict, Any, Optional

import requests

from .config import AppConfig
from .logging_setup import get_logger
from .retry import RetryPolicy, retry_call

logger = get_logger(__name__)


def has_items(result: Any) -> bool:
    """Check that a decoded response carries an 'items' list, which may be empty."""
    return isinstance(result, dict) and isinstance(result.get("items"), list)


class ExternalAPI:
    """Thin JSON-over-HTTP client using bearer token authentication."""

    def __init__(self, config: AppConfig, session: Optional[requests.Session] = None):
        """
        Initialize the API client.

        Args:
            config: Application configuration
            session: Optional requests session (a new one is created otherwise)
        """
        self.config = config
        self.server_url = (config.server_url or "").rstrip("/")
        self.timeout = config.request_timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        if not self.server_url:
            raise ValueError("Server URL is not configured")
        return f"{self.server_url}{path}"

    def _headers(self, with_body: bool = False) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {self.config.api_key}"}
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _decode(self, response: requests.Response, method: str) -> Optional[Any]:
        """
        Check the status and decode the JSON body of a response.

        Raises:
            requests.HTTPError: On a non-2xx status
            json.JSONDecodeError: If the body is not valid JSON
        """
        logger.debug(f"API {method} Response: {response.status_code} {response.text[:200]}")
        response.raise_for_status()
        if not response.text:
            return None
        return json.loads(response.text)

    def get_data(self) -> Optional[Any]:
        """
        Fetch data from the service.

        Returns:
            Decoded JSON payload, or None if the body is empty

        Raises:
            requests.RequestException: On network or HTTP errors
            json.JSONDecodeError: If the response is not valid JSON
        """
        response = self.session.get(self._url("/api/data"), headers=self._headers(), timeout=self.timeout)
        return self._decode(response, "GET")

    def post_data(self, payload: Dict[str, Any]) -> Optional[Any]:
        """
        Create data on the service.

        Args:
            payload: JSON-serializable payload

        Returns:
            Decoded JSON payload, or None if the body is empty
        """
        response = self.session.post(
            self._url("/api/data"),
            data=json.dumps(payload),
            headers=self._headers(with_body=True),
            timeout=self.timeout
        )
        return self._decode(response, "POST")

    def update_data(self, item_id: Any, payload: Dict[str, Any]) -> Optional[Any]:
        """
        Update an existing record on the service.

        Args:
            item_id: Identifier of the record
            payload: JSON-serializable payload

        Returns:
            Decoded JSON payload, or None if the body is empty
        """
        response = self.session.put(
            self._url(f"/api/data/{item_id}"),
            data=json.dumps(payload),
            headers=self._headers(with_body=True),
            timeout=self.timeout
        )
        return self._decode(response, "PUT")

    def test_connection(self) -> bool:
        """
        Check that the service is reachable and healthy.

        Returns:
            True if the health endpoint reports status "ok", False otherwise
        """
        logger.info("Testing connection to external service...")
        try:
            response = self.session.get(self._url("/api/health"), headers=self._headers(), timeout=self.timeout)
            data = self._decode(response, "GET")
        except ValueError as e:
            # Covers both a missing server URL and an undecodable body
            logger.error(f"Connection test failed: {str(e)}")
            return False
        except requests.RequestException as e:
            logger.error(f"Connection test network error: {str(e)}")
            return False

        return isinstance(data, dict) and data.get("status") == "ok"

    def get_data_with_retry(self, policy: Optional[RetryPolicy] = None, cancel_event=None) -> Optional[Any]:
        """
        Fetch data, retrying until the payload contains items.

        Args:
            policy: Retry policy (defaults to the configured one)
            cancel_event: Optional threading.Event that aborts the retries

        Returns:
            Decoded payload, or None when every attempt failed
        """
        return retry_call(
            self.get_data,
            validate=has_items,
            policy=policy or self.config.retry_policy("Get data"),
            cancel_event=cancel_event,
        )
