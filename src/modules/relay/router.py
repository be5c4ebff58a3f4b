from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from src.modules.relay.dependencies import read_chat_request
from src.modules.relay.schemas import ChatRequest
from src.modules.relay.service import RelayService

router = APIRouter()


def get_relay_service(request: Request) -> RelayService:
    return request.app.state.relay_service


@router.post("/assistant")
async def assistant(
    body: ChatRequest = Depends(read_chat_request),
    service: RelayService = Depends(get_relay_service),
) -> JSONResponse:
    status_code, envelope = await service.relay(body)
    return JSONResponse(status_code=status_code, content=envelope.model_dump())
