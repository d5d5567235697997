"""Twilio client example app: FastAPI application entry point.

Registers a per-request Twilio REST client resolved from layered
configuration and serves an example SMS webhook.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fastapi_twilio_client.clients.exceptions import TwilioClientConfigurationError
from fastapi_twilio_client.clients.registration import (
    add_twilio_client,
    close_twilio_client,
    get_app_configuration,
)
from fastapi_twilio_client.controllers import sms
from fastapi_twilio_client.logging.audit import generate_request_id, get_audit_logger, request_id_var, setup_logging

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle hooks."""
    setup_logging()
    get_app_configuration(app)
    get_audit_logger().info("App started")
    yield
    close_twilio_client(app)
    get_audit_logger().info("App stopped")


app = FastAPI(
    title="Twilio Client Example",
    description="Per-request Twilio REST client and example SMS webhook",
    version=VERSION,
    lifespan=lifespan,
)
add_twilio_client(app)
app.include_router(sms.router)


@app.middleware("http")
async def assign_request_id(request: Request, call_next):
    rid = generate_request_id()
    token = request_id_var.set(rid)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)
    response.headers["X-Request-Id"] = rid
    return response


@app.exception_handler(TwilioClientConfigurationError)
async def twilio_configuration_error(request: Request, exc: TwilioClientConfigurationError):
    get_audit_logger().error(
        "Twilio configuration error",
        extra={"audit_data": {"error": str(exc), "keys": list(exc.keys), "path": request.url.path}},
    )
    return JSONResponse(status_code=500, content={"error": "Twilio client is not configured correctly"})


@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION}
