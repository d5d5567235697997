"""Twilio webhook signature validation.

Checks the X-Twilio-Signature header with the SDK's RequestValidator.
Settings come from the Twilio:RequestValidation section:

    AuthToken        falls back to Twilio:AuthToken
    AllowLocal       skip validation for loopback requests (default true)
    BaseUrlOverride  public base URL when behind a tunnel or proxy
"""

import ipaddress

from fastapi import HTTPException, Request
from twilio.request_validator import RequestValidator

from fastapi_twilio_client.clients.exceptions import RequestValidationConfigError
from fastapi_twilio_client.clients.registration import get_app_configuration
from fastapi_twilio_client.logging.audit import get_audit_logger

SIGNATURE_HEADER = "X-Twilio-Signature"


async def validate_twilio_request(request: Request) -> None:
    """FastAPI dependency that rejects webhook requests not signed by Twilio."""
    configuration = get_app_configuration(request.app)
    section = configuration.get_section("Twilio:RequestValidation")

    auth_token = section.get("AuthToken") or configuration.get("Twilio:AuthToken")
    if not auth_token:
        raise RequestValidationConfigError(
            "Twilio:RequestValidation:AuthToken or Twilio:AuthToken is required to validate requests.",
            keys=("Twilio:RequestValidation:AuthToken", "Twilio:AuthToken"),
        )

    if _parse_bool(section.get("AllowLocal"), default=True) and _is_local(request):
        return

    signature = request.headers.get(SIGNATURE_HEADER)
    if signature is None:
        raise HTTPException(status_code=403, detail="Missing Twilio signature")

    url = _signed_url(request, section.get("BaseUrlOverride"))
    # FormData keeps repeated fields; the validator reads them with getlist
    params = await request.form() if request.method == "POST" else {}

    if not RequestValidator(auth_token).validate(url, params, signature):
        get_audit_logger().warning(
            "Twilio signature rejected",
            extra={"audit_data": {"path": request.url.path, "url": url}},
        )
        raise HTTPException(status_code=403, detail="Invalid Twilio signature")


def _signed_url(request: Request, base_url_override: str | None) -> str:
    if not base_url_override:
        return str(request.url)
    url = base_url_override.rstrip("/") + request.url.path
    if request.url.query:
        url += "?" + request.url.query
    return url


def _is_local(request: Request) -> bool:
    # Forwarded requests came through a proxy and are never local
    if "x-forwarded-for" in request.headers or request.client is None:
        return False
    try:
        return ipaddress.ip_address(request.client.host).is_loopback
    except ValueError:
        return request.client.host == "localhost"


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")
