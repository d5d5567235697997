"""AWS Lambda entry point.

Mangum translates API Gateway HTTP API (v2) events into ASGI,
letting the FastAPI app run unchanged on Lambda. Configuration is
loaded on first request since lifespan hooks are off.
"""

from mangum import Mangum

from fastapi_twilio_client.main import app

handler = Mangum(app, lifespan="off")
