import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.modules.assistant_mock.service import mock_assistant_service
from src.modules.relay.dependencies import read_chat_request
from src.modules.relay.schemas import ChatRequest, ErrorEnvelope, ReplyEnvelope

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/assistant")
async def assistant(body: ChatRequest = Depends(read_chat_request)) -> JSONResponse:
    try:
        reply = mock_assistant_service.reply(body)
    except Exception as exc:
        logger.exception("Mock assistant failed")
        envelope = ErrorEnvelope(error=str(exc) or type(exc).__name__)
        return JSONResponse(status_code=500, content=envelope.model_dump())
    return JSONResponse(content=ReplyEnvelope(reply=reply, raw={}).model_dump())
