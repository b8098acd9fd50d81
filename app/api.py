from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from chemsearch.config import load_app_config
from chemsearch.logger import setup_logging
from chemsearch.session import SearchSession
from chemsearch.types import QueryText, SessionCreated, SessionSnapshot, SubmitRequest

setup_logging()
logger = logging.getLogger(__name__)

sessions: Dict[str, SearchSession] = {}


async def close_all_sessions() -> None:
    """Tear down every session a client left open."""

    open_sessions = list(sessions.values())
    sessions.clear()
    for session in open_sessions:
        await session.close()
    if open_sessions:
        logger.info("Closed %s abandoned search sessions", len(open_sessions))


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    yield
    await close_all_sessions()


app = FastAPI(title="ChemSearch", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def build_session() -> SearchSession:
    return SearchSession.from_config(load_app_config())


def _get_session(session_id: str) -> SearchSession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    return session


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.post("/sessions", response_model=SessionCreated, status_code=201)
async def create_session() -> SessionCreated:
    session_id = uuid.uuid4().hex
    sessions[session_id] = build_session()
    logger.info("Opened search session %s", session_id)
    return SessionCreated(session_id=session_id)


@app.get("/sessions/{session_id}", response_model=SessionSnapshot)
async def get_session(session_id: str) -> SessionSnapshot:
    return _get_session(session_id).snapshot()


@app.put("/sessions/{session_id}/query", response_model=SessionSnapshot)
async def update_query(session_id: str, body: QueryText) -> SessionSnapshot:
    session = _get_session(session_id)
    session.update_query(body.text)
    return session.snapshot()


@app.post("/sessions/{session_id}/select", response_model=SessionSnapshot)
async def select_suggestion(session_id: str, body: QueryText) -> SessionSnapshot:
    session = _get_session(session_id)
    await session.select_suggestion(body.text)
    return session.snapshot()


@app.post("/sessions/{session_id}/submit", response_model=SessionSnapshot)
async def submit_query(session_id: str, body: SubmitRequest) -> SessionSnapshot:
    session = _get_session(session_id)
    await session.submit_query(body.text)
    return session.snapshot()


@app.delete("/sessions/{session_id}", status_code=204)
async def close_session(session_id: str) -> None:
    session = sessions.pop(session_id, None)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    await session.close()
    logger.info("Closed search session %s", session_id)
