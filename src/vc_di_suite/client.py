"""
HTTP client for VC-API issuer and verifier endpoints.

Every call yields an EndpointResponse holding exactly one of a successful
result or an error. Transport failures are reported as errors rather than
raised so that a single unreachable implementation never stops a run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from vc_di_suite.errors import TransportError

if TYPE_CHECKING:
    from vc_di_suite.registry import Endpoint


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpResult:
    """A 2xx response from an endpoint."""

    status: int
    data: Any = None


@dataclass(frozen=True)
class EndpointError:
    """A non-2xx response, or a transport failure when status is None."""

    status: int | None
    message: str
    data: Any = None
    transport: bool = False


@dataclass(frozen=True)
class EndpointResponse:
    """Outcome of a single endpoint call."""

    result: HttpResult | None = None
    error: EndpointError | None = None

    @property
    def data(self) -> Any:
        """Response body of whichever side is populated."""
        if self.result is not None:
            return self.result.data
        if self.error is not None:
            return self.error.data
        return None

    def raise_for_error(self) -> HttpResult:
        """Return the result, or raise TransportError if the call failed."""
        if self.error is not None:
            status = self.error.status if self.error.status is not None else "no response"
            raise TransportError(f"{self.error.message} ({status})")
        if self.result is None:
            raise TransportError("Endpoint returned neither result nor error")
        return self.result


class EndpointClient:
    """Posts JSON bodies to implementation endpoints."""

    def __init__(
        self,
        timeout: float = 30.0,
        verify_ssl: bool = True,
    ) -> None:
        """Initialize the client.

        Args:
            timeout: HTTP request timeout in seconds.
            verify_ssl: Whether to verify SSL certificates.
        """
        self.timeout = timeout
        self.verify_ssl = verify_ssl

    def issue(self, endpoint: Endpoint, body: dict[str, Any]) -> EndpointResponse:
        """Ask an issuer endpoint to issue the credential in ``body``."""
        return self.post(endpoint, body)

    def verify(self, endpoint: Endpoint, body: dict[str, Any]) -> EndpointResponse:
        """Ask a verifier endpoint to verify the credential in ``body``."""
        return self.post(endpoint, body)

    def post(self, endpoint: Endpoint, body: dict[str, Any]) -> EndpointResponse:
        """POST ``body`` to the endpoint and capture the outcome.

        Args:
            endpoint: The endpoint to call.
            body: JSON-serialisable request body.

        Returns:
            EndpointResponse with exactly one side populated.
        """
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            **endpoint.headers,
        }
        logger.debug("POST %s (%s)", endpoint.url, endpoint.name)

        try:
            with httpx.Client(timeout=self.timeout, verify=self.verify_ssl) as client:
                response = client.post(endpoint.url, json=body, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning("Timeout calling %s: %s", endpoint.url, e)
            return EndpointResponse(
                error=EndpointError(
                    status=None,
                    message=f"Timeout after {self.timeout}s calling {endpoint.url}",
                    transport=True,
                )
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Network error calling %s: %s", endpoint.url, e)
            return EndpointResponse(
                error=EndpointError(
                    status=None,
                    message=f"Network error calling {endpoint.url}: {e}",
                    transport=True,
                )
            )

        data = _parse_body(response)
        if response.is_success:
            return EndpointResponse(result=HttpResult(status=response.status_code, data=data))

        return EndpointResponse(
            error=EndpointError(
                status=response.status_code,
                message=f"HTTP {response.status_code} from {endpoint.url}",
                data=data,
            )
        )


def _parse_body(response: httpx.Response) -> Any:
    """Decode a JSON body, falling back to text."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
