"""Chat endpoint streaming answers with citations."""

import json
import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from .....core.domain import ChatResponse, StreamEventKind
from .....core.services.chat_service import ChatService
from ..deps import get_chat
from ..models import ChatRequest, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["chat"])

NDJSON_MEDIA_TYPE = "application/x-ndjson"


def _line(payload: dict) -> str:
    return json.dumps(payload) + "\n"


async def render_ndjson(response: ChatResponse) -> AsyncIterator[str]:
    """Render a chat response as newline-delimited JSON.

    The citations line comes first, then one line per token, then a single
    terminal ``done`` or ``error`` line.
    """
    citations = [c.to_dict() for c in response.citations]
    yield _line({"type": "citations", "citations": citations})

    async for event in response.stream.events():
        if event.kind is StreamEventKind.TOKEN:
            yield _line({"type": "token", "text": event.text})
        elif event.kind is StreamEventKind.DONE:
            yield _line({"type": "done"})
        else:
            yield _line(
                {"type": "error", "state": response.state.value, "message": event.text}
            )


@router.post(
    "/chat",
    responses={
        200: {"content": {NDJSON_MEDIA_TYPE: {}}, "description": "Streamed answer"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)
async def chat(request: ChatRequest, service: ChatService = Depends(get_chat)) -> StreamingResponse:
    """Answer the last message using retrieved documents.

    Failures inside the chat pipeline are reported on the stream itself, so
    this endpoint responds 200 with a terminal ``error`` line.
    """
    response = await service.chat([m.to_domain() for m in request.messages])
    logger.info(
        "Chat response started (state=%s, citations=%d)",
        response.state.value,
        len(response.citations),
    )
    return StreamingResponse(render_ndjson(response), media_type=NDJSON_MEDIA_TYPE)
