"""Client for the remote numbering authority.

The authority issues numbers over HTTP::

    POST {base_url}/api/number-generation/generate-number/{token}

and answers either ``{"success": true, "data": {"number": "..."}}`` or a
bare ``{"number": "..."}``. Every failure (transport error, timeout, non-2xx
status, unreadable body, missing number) is reported as a
:class:`RemoteFailure` value; nothing raises past :meth:`request_number`.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from docnum.domain.errors import RemoteUnavailableError

logger = logging.getLogger(__name__)

GENERATE_PATH = "/api/number-generation/generate-number/{token}"
DEFAULT_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True)
class RemoteIssued:
    number: str


@dataclass(frozen=True)
class RemoteFailure:
    reason: str


RemoteOutcome = RemoteIssued | RemoteFailure


class NumberingAuthority(Protocol):
    """Anything that can be asked for a number by document token."""

    def request_number(self, token: str) -> RemoteOutcome: ...


def extract_number(payload: Any) -> str:
    """Pull the issued number out of an authority response body.

    Raises:
        RemoteUnavailableError: The body reports failure or has no number.
    """
    if not isinstance(payload, dict):
        msg = f"Unexpected response body: {payload!r}"
        raise RemoteUnavailableError(msg)
    if payload.get("success") is False:
        msg = str(payload.get("message") or payload.get("error") or "Authority reported failure")
        raise RemoteUnavailableError(msg)

    data = payload.get("data")
    number = data.get("number") if isinstance(data, dict) else None
    if number is None:
        number = payload.get("number")

    if not isinstance(number, str) or not number:
        msg = "Response did not contain a number"
        raise RemoteUnavailableError(msg)
    return number


class RemoteNumberingClient:
    """HTTP client for the numbering authority.

    Args:
        base_url: Authority root, e.g. ``https://erp.example.com``.
        timeout_seconds: Per-request timeout; expiry counts as a failure.
        api_token: Optional bearer token sent as ``Authorization``.
        urlopen: Opener used for requests; replaceable in tests.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        api_token: str | None = None,
        urlopen: Callable[..., Any] = urllib.request.urlopen,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._api_token = api_token
        self._urlopen = urlopen

    def url_for(self, token: str) -> str:
        return self.base_url + GENERATE_PATH.format(token=urllib.parse.quote(token, safe=""))

    def _post_json(self, url: str) -> Any:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        req = urllib.request.Request(url, data=b"{}", method="POST", headers=headers)
        try:
            with self._urlopen(req, timeout=self.timeout_seconds) as resp:
                body = resp.read().decode("utf-8")
            return json.loads(body)
        except urllib.error.HTTPError as exc:
            msg = f"HTTP {exc.code} from {url}"
            raise RemoteUnavailableError(msg) from exc
        except (OSError, http.client.HTTPException) as exc:
            msg = f"Request to {url} failed: {exc}"
            raise RemoteUnavailableError(msg) from exc
        except ValueError as exc:
            msg = f"Unreadable response from {url}: {exc}"
            raise RemoteUnavailableError(msg) from exc

    def request_number(self, token: str) -> RemoteOutcome:
        url = self.url_for(token)
        try:
            number = extract_number(self._post_json(url))
        except RemoteUnavailableError as exc:
            logger.debug("Remote numbering failed for %s: %s", token, exc)
            return RemoteFailure(str(exc))
        return RemoteIssued(number)
