"""
FastAPI backend for Eliza.

One responder engine per conversation. The rule database is loaded once
at startup and shared read-only by every session.
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, field_validator

from eliza.config.constants import MAX_MESSAGE_LENGTH
from eliza.config.settings import settings
from eliza.container import ElizaContainer
from eliza.conversation.sessions import SessionNotFound

logger = logging.getLogger(__name__)

app = FastAPI(title="Eliza", version="0.1.0")

# CORS - restricted to local chat front-ends
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:8080",
    ],
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["Content-Type"],
)

container = ElizaContainer.from_settings(settings)
registry = container.create_session_registry(ttl=settings.session_ttl)


# --- Input Validation ---

class ChatRequest(BaseModel):
    message: str

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Message cannot be empty")
        if len(v) > MAX_MESSAGE_LENGTH:
            raise ValueError(f"Message too long (max {MAX_MESSAGE_LENGTH} chars)")
        return v


class ChatResponse(BaseModel):
    session_id: str
    reply: str
    ended: bool = False
    timestamp: str


class SessionResponse(BaseModel):
    session_id: str
    greeting: str


# --- Endpoints ---

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "sessions": len(registry),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.post("/api/sessions", response_model=SessionResponse)
async def open_session():
    """Open a conversation and return its greeting."""
    session = registry.open()
    return SessionResponse(session_id=session.session_id, greeting=session.engine.greeting())


@app.post("/api/chat/{session_id}", response_model=ChatResponse)
async def chat(session_id: str, chat_request: ChatRequest):
    """Reply to one message. Quit words end the conversation."""
    try:
        session = registry.get(session_id)
        engine = session.engine
        if engine.is_quit(chat_request.message):
            reply = engine.farewell()
            registry.close(session_id)
            ended = True
        else:
            reply = registry.respond(session_id, chat_request.message)
            ended = False
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Unknown or expired session")

    return ChatResponse(
        session_id=session_id,
        reply=reply,
        ended=ended,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@app.get("/api/sessions/{session_id}/stats")
async def get_stats(session_id: str):
    """Get conversation statistics."""
    try:
        session = registry.get(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Unknown or expired session")
    return {"session_id": session_id, "stats": session.engine.stats()}


@app.delete("/api/sessions/{session_id}", status_code=204)
async def close_session(session_id: str):
    """End a conversation."""
    try:
        registry.close(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Unknown or expired session")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
