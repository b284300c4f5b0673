"""HTTP client for the recurring bills REST API.

The client is configured explicitly with the API base URL and the
user's bearer token; it never reads credentials from the environment.
"""

import logging
from typing import Any, Optional

import requests

from .errors import ApiError, AuthorizationError, BillNotFoundError
from .extractor import BillExtractor
from .models import Bill
from .validation import BillDraft

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "/recurring-bills"
DEFAULT_TIMEOUT = 10.0


class BillsApiClient:
    """Fetches, creates, updates and deletes bills over HTTP.

    Failures are raised, never retried:
      - AuthorizationError when the token is missing or rejected (401/403)
      - BillNotFoundError on 404
      - ApiError for any other failure, including connection errors
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str],
        timeout: float = DEFAULT_TIMEOUT,
        prefix: str = DEFAULT_PREFIX,
        session: Optional[requests.Session] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.prefix = "/" + prefix.strip("/")
        self.session = session or requests.Session()
        self.extractor = BillExtractor()

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }

    def _url(self, bill_id: Optional[str] = None) -> str:
        if bill_id is None:
            return f"{self.base_url}{self.prefix}"
        return f"{self.base_url}{self.prefix}/{bill_id}"

    def _request(
        self,
        method: str,
        bill_id: Optional[str] = None,
        payload: Optional[dict] = None
    ) -> requests.Response:
        if not self.token:
            raise AuthorizationError("Missing bearer token")

        url = self._url(bill_id)
        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise ApiError(f"Request to bills API failed: {e}") from e

        status = response.status_code
        if status in (401, 403):
            logger.warning(f"{method} {url} rejected credentials ({status})")
            raise AuthorizationError("Not authorized to access recurring bills", status)
        if status == 404 and bill_id is not None:
            raise BillNotFoundError(bill_id, status)
        if status >= 400:
            logger.warning(f"{method} {url} returned {status}")
            raise ApiError(f"Bills API returned HTTP {status}", status)
        return response

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"Invalid JSON from bills API: {e}", response.status_code) from e

    def _bill(self, response: requests.Response) -> Bill:
        try:
            return self.extractor.extract_from_dict(self._json(response))
        except ValueError as e:
            raise ApiError(f"Malformed bill from bills API: {e}", response.status_code) from e

    def list_bills(self) -> list[Bill]:
        response = self._request("GET")
        try:
            return self.extractor.extract_many(self._json(response))
        except ValueError as e:
            raise ApiError(f"Malformed bill list from bills API: {e}", response.status_code) from e

    def create_bill(self, draft: BillDraft) -> Bill:
        return self._bill(self._request("POST", payload=draft.to_payload()))

    def update_bill(self, bill_id: str, draft: BillDraft) -> Bill:
        return self._bill(self._request("PUT", bill_id, draft.to_payload()))

    def delete_bill(self, bill_id: str) -> None:
        self._request("DELETE", bill_id)
