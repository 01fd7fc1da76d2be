"""
Base HTTP client for Bookshelf Sync.
"""

from typing import Optional, Dict, Any
from dataclasses import dataclass
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


@dataclass
class APIError(Exception):
    """Raised when a remote API call fails."""
    message: str
    status_code: Optional[int] = None
    response_data: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        if self.status_code:
            return f"API Error {self.status_code}: {self.message}"
        return f"API Error: {self.message}"


class BaseClient:
    """
    Base class for JSON API clients.

    Owns a requests session with an optional retry policy mounted on it.
    """

    def __init__(
        self,
        base_url: str,
        timeout: int = 30,
        max_retries: int = 3,
        retry_backoff_factor: float = 0.5,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self.session = requests.Session()

        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=retry_backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def _build_url(self, endpoint: str) -> str:
        """Build full URL from endpoint."""
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Make an HTTP request and decode the JSON body.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint, relative to ``base_url``
            **kwargs: Additional arguments for requests

        Returns:
            Decoded JSON body

        Raises:
            APIError: On transport errors, non-2xx responses or a body
                that is not a JSON object
        """
        url = self._build_url(endpoint)
        kwargs.setdefault("timeout", self.timeout)

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.ConnectionError as e:
            raise APIError(f"Connection error: {str(e)}")
        except requests.exceptions.Timeout as e:
            raise APIError(f"Request timeout: {str(e)}")
        except requests.exceptions.RequestException as e:
            raise APIError(f"Request failed: {str(e)}")

        if not response.ok:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {"error": response.text}
            if not isinstance(error_data, dict):
                error_data = {"error": response.text}

            raise APIError(
                message=str(error_data.get("error", response.text)),
                status_code=response.status_code,
                response_data=error_data,
            )

        try:
            data = response.json()
        except ValueError:
            raise APIError("Malformed JSON body", status_code=response.status_code)

        if not isinstance(data, dict):
            raise APIError("Unexpected response body", status_code=response.status_code)
        return data

    def get(self, endpoint: str, **kwargs) -> Dict[str, Any]:
        """Make a GET request."""
        return self._request("GET", endpoint, **kwargs)

    def close(self) -> None:
        """Close the session."""
        self.session.close()
