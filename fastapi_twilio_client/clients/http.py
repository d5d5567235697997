"""httpx-backed transport for the Twilio SDK."""

import logging

import httpx
from twilio.http import HttpClient
from twilio.http.response import Response

TRANSPORT_LOGGER_NAME = "twilio.http_client"


def create_default_http_client() -> httpx.Client:
    """Shared default transport. Redirects are not followed, matching the SDK's own client."""
    return httpx.Client(
        follow_redirects=False,
        timeout=httpx.Timeout(60.0, connect=10.0),
    )


class TransportLogger(logging.Logger):
    """Logger owned by a single transport.

    It is not registered with the logging manager, so its level can be set per
    client. Records still propagate to the handlers of ``twilio.http_client``.
    """

    def setLevel(self, level) -> None:
        super().setLevel(level)
        # The manager only clears caches of registered loggers
        self._cache.clear()


def create_transport_logger() -> TransportLogger:
    logger = TransportLogger(TRANSPORT_LOGGER_NAME)
    logger.parent = logging.getLogger(TRANSPORT_LOGGER_NAME)
    return logger


class HttpxTwilioHttpClient(HttpClient):
    """Sends Twilio SDK requests through a caller-owned ``httpx.Client``.

    The wrapped client is not closed here; whoever created it owns it.
    """

    def __init__(self, client: httpx.Client, timeout: float | None = None, logger: logging.Logger | None = None):
        super().__init__(logger or create_transport_logger(), False, timeout)
        self.client = client

    def request(
        self,
        method: str,
        url: str,
        params: dict | None = None,
        data: dict | None = None,
        headers: dict | None = None,
        auth: tuple[str, str] | None = None,
        timeout: float | None = None,
        allow_redirects: bool = False,
    ) -> Response:
        if timeout is None:
            timeout = self.timeout
        elif timeout <= 0:
            raise ValueError(timeout)

        kwargs = {
            "method": method.upper(),
            "url": url,
            "params": params,
            "headers": headers,
            "auth": auth,
            "follow_redirects": allow_redirects,
            "timeout": timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
        }
        if headers and headers.get("Content-Type") == "application/json":
            kwargs["json"] = data
        else:
            kwargs["data"] = data

        self.log_request(kwargs)
        response = self.client.request(**kwargs)

        twilio_response = Response(response.status_code, response.text, dict(response.headers))
        self.log_response(response.status_code, twilio_response)
        return twilio_response
