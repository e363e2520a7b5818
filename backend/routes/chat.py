from __future__ import annotations

import uuid
from pathlib import Path

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from backend.application import get_chat_service

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("")
async def send_message(
    message: str = Form(default=""),
    session_id: str | None = Form(default=None, alias="sessionId"),
    files: list[UploadFile] | None = File(default=None),
) -> JSONResponse:
    """Forward one user turn to the CFO agent.

    A session id is minted when the caller does not send one; it is echoed in
    the body and in the ``X-Session-Id`` header so the client can continue
    the conversation.
    """
    session_id = (session_id or "").strip() or str(uuid.uuid4())

    file_names: list[str] = []
    for upload in files or []:
        try:
            if upload.filename:
                file_names.append(Path(upload.filename).name)
        finally:
            await upload.close()

    service = get_chat_service()
    try:
        reply = await service.send_message(session_id, message, file_names)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return JSONResponse(
        {"sessionId": session_id, "message": reply.to_payload()},
        headers={"X-Session-Id": session_id},
    )


@router.get("/sessions")
async def list_sessions() -> dict:
    return {"items": get_chat_service().list_sessions()}


@router.get("/{session_id}/messages")
async def get_messages(session_id: str) -> dict:
    messages = get_chat_service().get_messages(session_id)
    if messages is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return {"sessionId": session_id, "items": messages}
