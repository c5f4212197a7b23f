"""session.py — one lookup session.

The orchestrator sequences capture → identification → catalog check →
(optional) AI specification lookup, and owns the two catalog collections.
Only one identification, transcription or specification lookup runs at a
time; a second trigger while one is in flight is dropped.  A refresh has
its own guard so overlapping reloads never stack.

Every adapter failure is caught here, logged, and queued as a transient
notice.  The busy flag and the device stream are released on every exit
path.

The HTTP routes hand over bytes that the client already captured
(``process_image``, ``process_voice``).  ``capture_and_identify`` and
``listen_and_search`` are the entry points for a host that owns the camera
or microphone itself, such as a kiosk process; it supplies an object
satisfying ``capture.CaptureDevice`` and the orchestrator drives it from
open to release.
"""

import asyncio
import logging
import uuid
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, List, Optional, Protocol, Union

from .capture import CaptureDevice, grab_frame
from .catalog import CatalogState
from .catalog_source import CatalogSource
from .config import Settings
from .errors import CatalogConnectionError, DeviceAccessError, IdentificationMiss, SpecificationMiss
from .models import CatalogRecord, Notice, SessionSnapshot, SpecPair
from .resolver import filter_records, has_match

logger = logging.getLogger("cdpspec-api")


class SessionState(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    IDENTIFYING = "identifying"
    CHECKING = "checking"
    ESCALATING = "escalating"
    TRANSCRIBING = "transcribing"


class AIClient(Protocol):
    def identify_model(self, image: Union[bytes, str]) -> str: ...

    def fetch_specs(self, label: str) -> SpecPair: ...

    def transcribe_query(self, audio: bytes, mime_type: str = ...) -> str: ...


class SessionOrchestrator:
    def __init__(
        self,
        settings: Settings,
        source: CatalogSource,
        ai: AIClient,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.settings = settings
        self.source = source
        self.ai = ai
        # Computed once; a present-but-invalid key shows up later as ordinary misses.
        self.ai_available = settings.ai_available
        self.catalog = CatalogState(dedupe=settings.catalog_dedupe)
        self.state = SessionState.IDLE
        self.query = ""
        self._busy = False
        self._refreshing = False
        self._notices: List[Notice] = []

    # ---------- STATE ----------
    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def refreshing(self) -> bool:
        return self._refreshing

    def _log(self, level: int, msg: str) -> None:
        logger.log(level, msg, extra={"session_id": self.session_id})

    def _log_exception(self, msg: str) -> None:
        logger.exception(msg, extra={"session_id": self.session_id})

    def notify(self, kind: str, message: str) -> None:
        self._notices.append(Notice(kind=kind, message=message))

    def drain_notices(self) -> List[Notice]:
        out, self._notices = self._notices, []
        return out

    @contextmanager
    def _busy_scope(self, state: SessionState) -> Iterator[None]:
        self._busy = True
        self.state = state
        try:
            yield
        finally:
            self._busy = False
            self.state = SessionState.IDLE

    def _reject_if_busy(self, action: str) -> bool:
        if self._busy:
            self._log(logging.INFO, f"{action} ignored: {self.state.value} in progress")
            return True
        return False

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.session_id,
            state=self.state.value,
            busy=self._busy,
            refreshing=self._refreshing,
            query=self.query,
            ai_available=self.ai_available,
            authoritative_count=len(self.catalog.authoritative),
            generated_count=len(self.catalog.generated),
            notices=self.drain_notices(),
        )

    # ---------- QUERY ----------
    def set_query(self, text: Optional[str]) -> None:
        self.query = text or ""

    def results(self) -> List[CatalogRecord]:
        return filter_records(self.catalog.view, self.query, self.settings.match_spec_fields)

    def can_search_ai(self) -> bool:
        """The manual "search with AI" control is offered only on a miss with AI available."""
        return bool(self.query.strip()) and self.ai_available and not self.results()

    # ---------- CATALOG ----------
    async def refresh(self) -> bool:
        """Reload the authoritative catalog; a failed load keeps the previous one."""
        if self._refreshing:
            self._log(logging.INFO, "Refresh ignored: a reload is already running")
            return False
        self._refreshing = True
        try:
            records = await asyncio.to_thread(self.source.load_all)
        except CatalogConnectionError as exc:
            self._log(logging.WARNING, f"Catalog load failed: {exc}")
            self.notify("error", "Cloud connection failed")
            return False
        except Exception:
            self._log_exception("Catalog load failed")
            self.notify("error", "Cloud connection failed")
            return False
        finally:
            self._refreshing = False
        self.catalog.replace_authoritative(records)
        self._log(logging.INFO, f"Catalog ready: {len(records)} models")
        return True

    # ---------- IMAGE FLOW ----------
    async def process_image(self, image: Union[bytes, str]) -> Optional[str]:
        """Identify an uploaded or selected image.  Returns the identified label."""
        if self._reject_if_busy("Identification"):
            return None
        with self._busy_scope(SessionState.IDENTIFYING):
            return await self._identify_and_check(image)

    async def capture_and_identify(self, device: CaptureDevice) -> Optional[str]:
        """Take one shot from ``device`` and run it through identification."""
        if self._reject_if_busy("Capture"):
            return None
        with self._busy_scope(SessionState.CAPTURING):
            try:
                frame = await asyncio.to_thread(grab_frame, device)
            except DeviceAccessError as exc:
                self._log(logging.WARNING, str(exc))
                self.notify("error", "Cannot access camera")
                return None
            if frame is None:
                self._log(logging.INFO, "Capture cancelled")
                return None
            self.state = SessionState.IDENTIFYING
            return await self._identify_and_check(frame)

    async def _identify_and_check(self, image: Union[bytes, str]) -> Optional[str]:
        try:
            label = await asyncio.to_thread(self.ai.identify_model, image)
        except IdentificationMiss as exc:
            self._log(logging.INFO, f"Identification miss: {exc}")
            self.notify("error", "No model detected in image")
            return None
        except Exception:
            self._log_exception("Identification failed")
            self.notify("error", "Vision Error")
            return None

        self.state = SessionState.CHECKING
        self.query = label
        self.notify("success", f"Identified: {label}")
        # Existence check runs against store records only, never generated ones.
        if has_match(self.catalog.authoritative, label):
            return label
        if not self.ai_available:
            return label
        self.state = SessionState.ESCALATING
        await self._lookup_specs(label)
        return label

    # ---------- AI SEARCH ----------
    async def search_with_ai(self, query: Optional[str] = None) -> Optional[CatalogRecord]:
        """Manual escalation for ``query`` (default: the active query)."""
        label = (query if query is not None else self.query).strip()
        if not label or not self.ai_available:
            return None
        if self._reject_if_busy("AI search"):
            return None
        with self._busy_scope(SessionState.ESCALATING):
            return await self._lookup_specs(label)

    async def _lookup_specs(self, label: str) -> Optional[CatalogRecord]:
        try:
            specs = await asyncio.to_thread(self.ai.fetch_specs, label)
        except SpecificationMiss as exc:
            self._log(logging.INFO, f"Specification miss for {label}: {exc}")
            self.notify("error", "AI could not find specs")
            return None
        except Exception:
            self._log_exception(f"Specification lookup failed for {label}")
            self.notify("error", "AI Search Error")
            return None
        record = self.catalog.add_generated(label.upper(), specs.dac, specs.laser)
        self.query = label
        self.notify("success", f"AI found specs for {label}")
        self._log(logging.INFO, f"Generated record for {record.label}")
        return record

    # ---------- VOICE ----------
    async def process_voice(self, audio: bytes, mime_type: str = "audio/webm") -> Optional[str]:
        """Transcribe a spoken model name into the active query."""
        if not self.ai_available:
            self.notify("error", "Voice search needs AI")
            return None
        if self._reject_if_busy("Voice search"):
            return None
        with self._busy_scope(SessionState.TRANSCRIBING):
            return await self._transcribe(audio, mime_type)

    async def listen_and_search(self, device: CaptureDevice, mime_type: str = "audio/webm") -> Optional[str]:
        """Record one clip from a microphone device and transcribe it."""
        if not self.ai_available:
            self.notify("error", "Voice search needs AI")
            return None
        if self._reject_if_busy("Voice capture"):
            return None
        with self._busy_scope(SessionState.CAPTURING):
            try:
                clip = await asyncio.to_thread(grab_frame, device)
            except DeviceAccessError as exc:
                self._log(logging.WARNING, str(exc))
                self.notify("error", "Cannot access microphone")
                return None
            if clip is None:
                return None
            self.state = SessionState.TRANSCRIBING
            return await self._transcribe(clip, mime_type)

    async def _transcribe(self, audio: bytes, mime_type: str) -> Optional[str]:
        try:
            text = await asyncio.to_thread(self.ai.transcribe_query, audio, mime_type)
        except IdentificationMiss as exc:
            self._log(logging.INFO, f"Transcription miss: {exc}")
            self.notify("error", "No model name heard")
            return None
        except Exception:
            self._log_exception("Transcription failed")
            self.notify("error", "Voice Search Error")
            return None
        self.query = text
        self.notify("success", f"Heard: {text}")
        return text
