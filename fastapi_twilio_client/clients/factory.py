"""Factory for Twilio REST clients built from layered configuration."""

import logging
from collections.abc import Callable

import httpx
from twilio.http import HttpClient
from twilio.rest import Client

from fastapi_twilio_client.clients.exceptions import ConfigurationMissingError, UnreachableStateError
from fastapi_twilio_client.clients.http import HttpxTwilioHttpClient, create_default_http_client
from fastapi_twilio_client.clients.models import CredentialType, TwilioClientOptions, sanitize_options
from fastapi_twilio_client.config.configuration import Configuration
from fastapi_twilio_client.logging.audit import get_audit_logger

ConfigureOptions = Callable[[Configuration, TwilioClientOptions], None]

CLIENT_SECTION = "Twilio:Client"
FALLBACK_AUTH_TOKEN_KEY = "Twilio:AuthToken"


class TwilioRestClient(Client):
    """SDK client with a ``log_level`` setting applied to its own transport logger."""

    _log_level: str | None = None

    @property
    def log_level(self) -> str | None:
        return self._log_level

    @log_level.setter
    def log_level(self, value: str | None) -> None:
        self._log_level = value
        if value is None:
            return
        level = logging.getLevelName(value.upper())
        if not isinstance(level, int):
            get_audit_logger().warning(
                "Unknown Twilio log level ignored",
                extra={"audit_data": {"log_level": value}},
            )
            return
        self.http_client.logger.setLevel(level)


def configure_default_options(configuration: Configuration, options: TwilioClientOptions) -> None:
    """Bind ``Twilio:Client`` onto ``options``, falling back to ``Twilio:AuthToken``.

    Custom ``configure_options`` callbacks may call this first and then adjust fields.
    """
    section = configuration.get_section(CLIENT_SECTION)
    if not section.exists():
        raise ConfigurationMissingError(f"{CLIENT_SECTION} not configured.", keys=(CLIENT_SECTION,))

    options.bind(section)

    if not options.auth_token:
        options.auth_token = configuration.get(FALLBACK_AUTH_TOKEN_KEY)


def resolve_options(
    configuration: Configuration,
    configure_options: ConfigureOptions | None = None,
) -> TwilioClientOptions:
    """Build, populate and sanitize a fresh options object."""
    if configure_options is None:
        configure_options = configure_default_options

    options = TwilioClientOptions()
    configure_options(configuration, options)
    return sanitize_options(options)


def create_rest_client(options: TwilioClientOptions, http_client: HttpClient) -> TwilioRestClient:
    """Construct the client for already-sanitized options."""
    if options.credential_type == CredentialType.API_KEY:
        username, password = options.api_key_sid, options.api_key_secret
    elif options.credential_type == CredentialType.AUTH_TOKEN:
        username, password = options.account_sid, options.auth_token
    else:
        raise UnreachableStateError(
            f"Unresolved credential type {options.credential_type!r} reached client construction."
        )

    client = TwilioRestClient(
        username=username,
        password=password,
        account_sid=options.account_sid,
        region=options.region,
        http_client=http_client,
        edge=options.edge,
    )

    if options.log_level is not None:
        client.log_level = options.log_level

    get_audit_logger().info(
        "Twilio client resolved",
        extra={"audit_data": {
            "credential_type": options.credential_type.value,
            "account_sid": _mask(options.account_sid),
            "username": _mask(username),
            "region": options.region,
            "edge": options.edge,
        }},
    )
    return client


def create_twilio_client(
    configuration: Configuration,
    configure_options: ConfigureOptions | None = None,
    http_client: httpx.Client | None = None,
) -> TwilioRestClient:
    """Resolve options from ``configuration`` and build a client.

    When ``http_client`` is omitted a new default transport is created and
    owned by the returned client.
    """
    options = resolve_options(configuration, configure_options)
    if http_client is None:
        http_client = create_default_http_client()
    return create_rest_client(options, HttpxTwilioHttpClient(http_client))


def _mask(s: str | None, keep: int = 6) -> str:
    if not s:
        return ""
    if len(s) <= keep:
        return "*" * len(s)
    return f"{s[:keep]}***"
