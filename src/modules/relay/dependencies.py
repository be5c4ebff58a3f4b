from fastapi import Request

from src.modules.relay.schemas import ChatRequest


async def read_chat_request(request: Request) -> ChatRequest:
    """Parse the body leniently: a missing or malformed body is an empty request."""
    try:
        data = await request.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}
    return ChatRequest.model_validate(data)
