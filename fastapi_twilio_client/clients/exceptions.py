"""Errors raised while resolving Twilio client configuration.

All of these describe operator misconfiguration. They are raised at
resolution time and are never retried.
"""


class TwilioClientConfigurationError(Exception):
    """Base class for Twilio client configuration errors.

    Attributes:
        keys: Configuration keys involved in the failure.
    """

    def __init__(self, message: str, keys: tuple[str, ...] = ()):
        super().__init__(message)
        self.keys = keys


class ConfigurationMissingError(TwilioClientConfigurationError):
    """A required configuration section is absent."""


class InvalidCredentialTypeError(TwilioClientConfigurationError):
    """Twilio:Client:CredentialType holds a value that is not a known mode."""


class CredentialIndeterminateError(TwilioClientConfigurationError):
    """No credential mode could be inferred from the configured fields."""


class MissingApiKeyFieldsError(TwilioClientConfigurationError):
    """CredentialType is ApiKey but AccountSid, ApiKeySid or ApiKeySecret is missing."""


class MissingAuthTokenFieldsError(TwilioClientConfigurationError):
    """CredentialType is AuthToken but AccountSid or AuthToken is missing."""


class UnreachableStateError(TwilioClientConfigurationError):
    """Options reached client construction with an unresolved credential type."""


class RequestValidationConfigError(TwilioClientConfigurationError):
    """Webhook signature validation is enabled but no auth token is configured."""
