"""Registers the Twilio client factory on a FastAPI app.

``add_twilio_client`` stores a registration on ``app.state``; endpoints then
declare ``Depends(get_twilio_client)`` and receive a client built for that
request. FastAPI caches dependencies per request, so each request gets one
client while all of them share the registration's transport.
"""

import threading
from collections.abc import Callable

import httpx
from fastapi import FastAPI, Request

from fastapi_twilio_client.clients.factory import (
    ConfigureOptions,
    TwilioRestClient,
    create_rest_client,
    resolve_options,
)
from fastapi_twilio_client.clients.http import HttpxTwilioHttpClient, create_default_http_client
from fastapi_twilio_client.config.configuration import Configuration, load_configuration
from fastapi_twilio_client.config.settings import get_settings

ProvideHttpClient = Callable[[Request], httpx.Client]

REGISTRATION_STATE_KEY = "twilio_client_registration"
CONFIGURATION_STATE_KEY = "configuration"


class TwilioClientRegistration:
    """Options callback and transport provider for one app."""

    def __init__(
        self,
        configure_options: ConfigureOptions | None = None,
        provide_http_client: ProvideHttpClient | None = None,
    ):
        self.configure_options = configure_options
        self.provide_http_client = provide_http_client
        self._default_http_client: httpx.Client | None = None
        self._lock = threading.Lock()

    def get_http_client(self, request: Request) -> httpx.Client:
        if self.provide_http_client is not None:
            return self.provide_http_client(request)
        client = self._default_http_client
        if client is not None and not client.is_closed:
            return client
        # Dependencies run in the threadpool; only one thread may create the shared client
        with self._lock:
            if self._default_http_client is None or self._default_http_client.is_closed:
                self._default_http_client = create_default_http_client()
            return self._default_http_client

    def create_client(self, configuration: Configuration, request: Request) -> TwilioRestClient:
        options = resolve_options(configuration, self.configure_options)
        transport = HttpxTwilioHttpClient(self.get_http_client(request))
        return create_rest_client(options, transport)

    def close(self) -> None:
        """Close the default transport. Caller-provided clients are left to their owner."""
        with self._lock:
            if self._default_http_client is not None and not self._default_http_client.is_closed:
                self._default_http_client.close()
            self._default_http_client = None


def add_twilio_client(
    app: FastAPI,
    configure_options: ConfigureOptions | None = None,
    provide_http_client: ProvideHttpClient | None = None,
) -> FastAPI:
    """Register the Twilio client factory on ``app``.

    Args:
        app: The application to register on.
        configure_options: Replaces the default ``Twilio:Client`` binding.
            Receives the configuration and a blank options object.
        provide_http_client: Returns the ``httpx.Client`` to send requests
            through. Defaults to one shared client per app with redirects off.

    Returns:
        The same app, for chaining.
    """
    registration = TwilioClientRegistration(configure_options, provide_http_client)
    setattr(app.state, REGISTRATION_STATE_KEY, registration)
    return app


def get_app_configuration(app: FastAPI) -> Configuration:
    """Return the app's configuration, loading it from settings on first use."""
    configuration = getattr(app.state, CONFIGURATION_STATE_KEY, None)
    if configuration is None:
        configuration = load_configuration(get_settings().config_path)
        setattr(app.state, CONFIGURATION_STATE_KEY, configuration)
    return configuration


def get_twilio_client(request: Request) -> TwilioRestClient:
    """FastAPI dependency yielding a client resolved for this request."""
    registration = getattr(request.app.state, REGISTRATION_STATE_KEY, None)
    if registration is None:
        raise RuntimeError("Twilio client not registered. Call add_twilio_client(app) at startup.")
    return registration.create_client(get_app_configuration(request.app), request)


def close_twilio_client(app: FastAPI) -> None:
    registration = getattr(app.state, REGISTRATION_STATE_KEY, None)
    if registration is not None:
        registration.close()
