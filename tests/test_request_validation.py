"""Tests for fastapi_twilio_client/security/request_validation.py: webhook signatures."""

import httpx
import pytest
from fastapi import FastAPI
from starlette.datastructures import ImmutableMultiDict
from twilio.request_validator import RequestValidator

from fastapi_twilio_client.clients.exceptions import RequestValidationConfigError
from fastapi_twilio_client.config.configuration import Configuration
from fastapi_twilio_client.controllers import sms

FORM = {"From": "+15550001111", "Body": "hello"}


def make_app(values: dict) -> FastAPI:
    app = FastAPI()
    app.state.configuration = Configuration(values)
    app.include_router(sms.router)
    return app


async def _send(app: FastAPI, method: str = "POST", url: str = "/sms", headers: dict | None = None, data=None):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.request(method, url, headers=headers, data=data)


def _signature(token: str, url: str, params) -> str:
    return RequestValidator(token).compute_signature(url, params)


class TestValidateTwilioRequest:

    async def test_local_request_allowed(self):
        app = make_app({"Twilio:AuthToken": "tok1"})
        resp = await _send(app, data=FORM)
        assert resp.status_code == 200

    async def test_forwarded_request_needs_signature(self):
        app = make_app({"Twilio:AuthToken": "tok1"})
        resp = await _send(app, headers={"X-Forwarded-For": "203.0.113.5"}, data=FORM)
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Missing Twilio signature"

    async def test_valid_signature(self):
        app = make_app({"Twilio:AuthToken": "tok1", "Twilio:RequestValidation:AllowLocal": "false"})
        headers = {"X-Twilio-Signature": _signature("tok1", "http://test/sms", FORM)}
        resp = await _send(app, headers=headers, data=FORM)
        assert resp.status_code == 200

    async def test_repeated_form_fields_signed(self):
        app = make_app({"Twilio:AuthToken": "tok1", "Twilio:RequestValidation:AllowLocal": "false"})
        fields = [("From", "+15550001111"), ("MediaUrl", "https://a.example/1"), ("MediaUrl", "https://a.example/2")]
        signature = _signature("tok1", "http://test/sms", ImmutableMultiDict(fields))
        data = {"From": "+15550001111", "MediaUrl": ["https://a.example/1", "https://a.example/2"]}
        resp = await _send(app, headers={"X-Twilio-Signature": signature}, data=data)
        assert resp.status_code == 200

    async def test_invalid_signature(self):
        app = make_app({"Twilio:AuthToken": "tok1", "Twilio:RequestValidation:AllowLocal": "false"})
        headers = {"X-Twilio-Signature": _signature("wrong-token", "http://test/sms", FORM)}
        resp = await _send(app, headers=headers, data=FORM)
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Invalid Twilio signature"

    async def test_request_validation_token_preferred(self):
        app = make_app({
            "Twilio:AuthToken": "top",
            "Twilio:RequestValidation:AuthToken": "validation-token",
            "Twilio:RequestValidation:AllowLocal": "false",
        })
        headers = {"X-Twilio-Signature": _signature("validation-token", "http://test/sms", FORM)}
        resp = await _send(app, headers=headers, data=FORM)
        assert resp.status_code == 200

    async def test_base_url_override(self):
        app = make_app({
            "Twilio:AuthToken": "tok1",
            "Twilio:RequestValidation:AllowLocal": "false",
            "Twilio:RequestValidation:BaseUrlOverride": "https://example.ngrok.io/",
        })
        url = "https://example.ngrok.io/sms?Attempt=1"
        headers = {"X-Twilio-Signature": _signature("tok1", url, {})}
        resp = await _send(app, method="GET", url="/sms?Attempt=1", headers=headers)
        assert resp.status_code == 200

    async def test_missing_auth_token(self):
        app = make_app({"Twilio:Client:AccountSid": "AC1"})
        with pytest.raises(RequestValidationConfigError):
            await _send(app, data=FORM)
