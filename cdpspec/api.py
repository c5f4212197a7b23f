"""api.py — session endpoints for the CDP spec lookup app.

A mobile client opens a session, then drives it with text queries, photo
uploads, voice clips, manual AI searches and refreshes.  Each response
carries the session's pending notices (success/error toasts) so the client
never has to poll for them.

Operational failures (store down, AI miss) come back as 200 responses with
an error notice.  HTTP errors are reserved for protocol problems: an
unknown session, an empty upload, or an AI action while AI is unavailable.
"""

import logging
import time
from typing import Callable, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, File, HTTPException, Query, UploadFile

from .catalog_source import CatalogSource, build_catalog_source
from .config import Settings
from .gemini import GeminiClient
from .models import AISearchRequest, ActionResponse, CatalogRecord, RecordOut, SearchResponse, SessionSnapshot
from .session import AIClient, SessionOrchestrator

logger = logging.getLogger("cdpspec-api")

router = APIRouter()


# ---------- SESSION REGISTRY ----------
class SessionRegistry:
    """In-memory sessions; nothing outlives the process.

    A session not touched for ``session_ttl_seconds`` is dropped on the next
    create or lookup, unless it is still busy or refreshing.
    """

    def __init__(
        self,
        settings: Settings,
        source_factory: Callable[[Settings], CatalogSource] = build_catalog_source,
        ai_factory: Callable[[Settings], AIClient] = GeminiClient.from_settings,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self.source_factory = source_factory
        self.ai_factory = ai_factory
        self._source: Optional[CatalogSource] = None
        self._ai: Optional[AIClient] = None
        self.sessions: Dict[str, SessionOrchestrator] = {}
        self.clock = clock
        self._last_seen: Dict[str, float] = {}

    def _shared_clients(self):
        if self._source is None:
            self._source = self.source_factory(self.settings)
        if self._ai is None:
            self._ai = self.ai_factory(self.settings)
        return self._source, self._ai

    async def create(self) -> SessionOrchestrator:
        self._sweep()
        source, ai = self._shared_clients()
        session = SessionOrchestrator(self.settings, source, ai)
        self.sessions[session.session_id] = session
        self._last_seen[session.session_id] = self.clock()
        await session.refresh()
        return session

    def get(self, session_id: str) -> SessionOrchestrator:
        self._sweep()
        session = self.sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Unknown session")
        self._last_seen[session_id] = self.clock()
        return session

    def close(self, session_id: str) -> None:
        self._last_seen.pop(session_id, None)
        if self.sessions.pop(session_id, None) is None:
            raise HTTPException(status_code=404, detail="Unknown session")

    def _sweep(self) -> None:
        cutoff = self.clock() - self.settings.session_ttl_seconds
        for sid, seen in list(self._last_seen.items()):
            session = self.sessions.get(sid)
            if seen >= cutoff or (session is not None and (session.busy or session.refreshing)):
                continue
            self._last_seen.pop(sid, None)
            self.sessions.pop(sid, None)
            logger.info("Session expired", extra={"session_id": sid})


_registry: Optional[SessionRegistry] = None


def get_registry() -> SessionRegistry:
    global _registry
    if _registry is None:
        _registry = SessionRegistry(Settings.from_env())
    return _registry


# ---------- HELPERS ----------
def _records_out(records: List[CatalogRecord]) -> List[RecordOut]:
    return [RecordOut.from_record(r) for r in records]


def _action(session: SessionOrchestrator, label: Optional[str] = None,
            record: Optional[CatalogRecord] = None) -> ActionResponse:
    return ActionResponse(
        ok=label is not None or record is not None,
        query=session.query,
        label=label,
        record=RecordOut.from_record(record) if record else None,
        results=_records_out(session.results()),
        notices=session.drain_notices(),
    )


async def _read_upload(file: UploadFile) -> bytes:
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Empty upload")
    return data


# ---------- API ROUTES ----------
@router.post("/api/sessions", response_model=SessionSnapshot)
async def create_session(registry: SessionRegistry = Depends(get_registry)) -> SessionSnapshot:
    session = await registry.create()
    return session.snapshot()


@router.get("/api/sessions/{session_id}", response_model=SessionSnapshot)
async def session_status(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> SessionSnapshot:
    return registry.get(session_id).snapshot()


@router.delete("/api/sessions/{session_id}")
async def end_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    registry.close(session_id)
    return {"closed": session_id}


@router.get("/api/sessions/{session_id}/search", response_model=SearchResponse)
async def search(
    session_id: str,
    q: str = Query("", description="Free-text model query"),
    registry: SessionRegistry = Depends(get_registry),
) -> SearchResponse:
    session = registry.get(session_id)
    session.set_query(q)
    return SearchResponse(
        query=session.query,
        results=_records_out(session.results()),
        can_search_ai=session.can_search_ai(),
        notices=session.drain_notices(),
    )


@router.post("/api/sessions/{session_id}/identify", response_model=ActionResponse)
async def identify(
    session_id: str,
    file: UploadFile = File(...),
    registry: SessionRegistry = Depends(get_registry),
) -> ActionResponse:
    session = registry.get(session_id)
    image_bytes = await _read_upload(file)
    label = await session.process_image(image_bytes)
    return _action(session, label=label)


@router.post("/api/sessions/{session_id}/ai-search", response_model=ActionResponse)
async def ai_search(
    session_id: str,
    body: Optional[AISearchRequest] = Body(None),
    registry: SessionRegistry = Depends(get_registry),
) -> ActionResponse:
    session = registry.get(session_id)
    if not session.ai_available:
        raise HTTPException(status_code=409, detail="AI search is not available")
    record = await session.search_with_ai(body.query if body else None)
    return _action(session, record=record)


@router.post("/api/sessions/{session_id}/voice", response_model=ActionResponse)
async def voice(
    session_id: str,
    file: UploadFile = File(...),
    registry: SessionRegistry = Depends(get_registry),
) -> ActionResponse:
    session = registry.get(session_id)
    if not session.ai_available:
        raise HTTPException(status_code=409, detail="Voice search is not available")
    audio = await _read_upload(file)
    text = await session.process_voice(audio, file.content_type or "audio/webm")
    return _action(session, label=text)


@router.post("/api/sessions/{session_id}/refresh", response_model=SessionSnapshot)
async def refresh(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> SessionSnapshot:
    session = registry.get(session_id)
    await session.refresh()
    return session.snapshot()
