"""Twilio client options and credential-type resolution."""

from dataclasses import dataclass, fields
from enum import Enum

from fastapi_twilio_client.clients.exceptions import (
    CredentialIndeterminateError,
    InvalidCredentialTypeError,
    MissingApiKeyFieldsError,
    MissingAuthTokenFieldsError,
)
from fastapi_twilio_client.config.configuration import ConfigurationSection


class CredentialType(str, Enum):
    UNSPECIFIED = "Unspecified"
    API_KEY = "ApiKey"
    AUTH_TOKEN = "AuthToken"

    @classmethod
    def parse(cls, value: str | None) -> "CredentialType":
        """Parse a configuration value case-insensitively. Blank means Unspecified."""
        if value is None or not value.strip():
            return cls.UNSPECIFIED
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        raise InvalidCredentialTypeError(
            f"Twilio:Client:CredentialType '{value}' is not valid. Configure as ApiKey or AuthToken.",
            keys=("Twilio:Client:CredentialType",),
        )


# Option field -> configuration key under Twilio:Client
CONFIG_KEYS = {
    "account_sid": "AccountSid",
    "auth_token": "AuthToken",
    "api_key_sid": "ApiKeySid",
    "api_key_secret": "ApiKeySecret",
    "region": "Region",
    "edge": "Edge",
    "log_level": "LogLevel",
}


@dataclass
class TwilioClientOptions:
    account_sid: str | None = None
    auth_token: str | None = None
    api_key_sid: str | None = None
    api_key_secret: str | None = None
    region: str | None = None
    edge: str | None = None
    log_level: str | None = None
    credential_type: CredentialType = CredentialType.UNSPECIFIED

    def bind(self, section: ConfigurationSection) -> None:
        """Populate fields from the keys present in ``section``. Absent keys are left alone."""
        for name, key in CONFIG_KEYS.items():
            value = section.get(key)
            if value is not None:
                setattr(self, name, value)

        credential_type = section.get("CredentialType")
        if credential_type is not None:
            self.credential_type = CredentialType.parse(credential_type)

    @property
    def is_api_key_configured(self) -> bool:
        return (
            self.account_sid is not None
            and self.api_key_sid is not None
            and self.api_key_secret is not None
        )

    @property
    def is_auth_token_configured(self) -> bool:
        return self.account_sid is not None and self.auth_token is not None


def sanitize_options(options: TwilioClientOptions) -> TwilioClientOptions:
    """Normalize empty strings to None and settle the credential type.

    Raises:
        CredentialIndeterminateError: Type unspecified and neither field set is complete.
        MissingApiKeyFieldsError: Type is ApiKey but its fields are incomplete.
        MissingAuthTokenFieldsError: Type is AuthToken but its fields are incomplete.
    """
    for f in fields(options):
        if f.name in CONFIG_KEYS and getattr(options, f.name) == "":
            setattr(options, f.name, None)

    # Callbacks may assign plain strings
    if not isinstance(options.credential_type, CredentialType):
        options.credential_type = CredentialType.parse(options.credential_type)

    if options.credential_type == CredentialType.UNSPECIFIED:
        # Partial API key fields fall through to the auth token check
        if options.is_api_key_configured:
            options.credential_type = CredentialType.API_KEY
        elif options.is_auth_token_configured:
            options.credential_type = CredentialType.AUTH_TOKEN
        else:
            raise CredentialIndeterminateError(
                "Twilio:Client:CredentialType could not be determined. Configure as ApiKey or AuthToken.",
                keys=("Twilio:Client:CredentialType",),
            )
    elif options.credential_type == CredentialType.API_KEY and not options.is_api_key_configured:
        raise MissingApiKeyFieldsError(
            "Twilio:Client:{AccountSid|ApiKeySid|ApiKeySecret} configuration required for CredentialType.ApiKey.",
            keys=("Twilio:Client:AccountSid", "Twilio:Client:ApiKeySid", "Twilio:Client:ApiKeySecret"),
        )
    elif options.credential_type == CredentialType.AUTH_TOKEN and not options.is_auth_token_configured:
        raise MissingAuthTokenFieldsError(
            "Twilio:Client:{AccountSid|AuthToken} configuration required for CredentialType.AuthToken.",
            keys=("Twilio:Client:AccountSid", "Twilio:Client:AuthToken"),
        )

    return options
