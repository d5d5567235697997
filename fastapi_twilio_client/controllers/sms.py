"""Example SMS webhook answering with TwiML."""

from fastapi import APIRouter, Depends, Response
from twilio.twiml.messaging_response import MessagingResponse

from fastapi_twilio_client.security.request_validation import validate_twilio_request

router = APIRouter(prefix="/sms", tags=["sms"])

REPLY = "The Robots are coming! Head for the hills!!"


@router.api_route("", methods=["GET", "POST"], dependencies=[Depends(validate_twilio_request)])
async def index() -> Response:
    messaging_response = MessagingResponse()
    messaging_response.message(REPLY)
    return Response(content=str(messaging_response), media_type="application/xml")
