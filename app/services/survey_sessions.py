"""In-memory survey sessions: one form instance per client"""
import time
import uuid
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Callable, Dict, Optional
import logging

from app.config import get_settings
from app.services.form_state import FormStateStore
from app.services.question_client import QuestionEnrichmentClient, get_question_client
from app.services.submission import SubmissionController, SubmitOutcome

logger = logging.getLogger(__name__)


class SessionNotFoundError(KeyError):
    """No survey session with the requested id"""


class SurveySession:
    """A single survey form: its state store plus its submission controller"""

    def __init__(self, question_client: QuestionEnrichmentClient, reset_on_close: bool = True):
        self.session_id = str(uuid.uuid4())
        self.created_at = datetime.now(timezone.utc)
        self.reset_on_close = reset_on_close
        self.store = FormStateStore()
        self.controller = SubmissionController(self.store, question_client)

    def update_field(self, name: str, value: str) -> None:
        self.store.update_field(name, value)

    def submit(self) -> SubmitOutcome:
        """Submit whatever the form currently holds"""
        return self.controller.submit(self.store.current_values())

    def close_popup(self) -> None:
        self.controller.close_popup()
        if self.reset_on_close:
            self.store.reset()


class SessionRegistry:
    """
    Keeps survey sessions by id in process memory

    Sessions idle for longer than idle_ttl seconds are dropped, and once
    max_sessions is reached the least recently used session is evicted to
    make room for a new one.
    """

    def __init__(
        self,
        client_factory: Callable[[], QuestionEnrichmentClient] = get_question_client,
        reset_on_close: Optional[bool] = None,
        idle_ttl: Optional[float] = None,
        max_sessions: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._sessions: "OrderedDict[str, SurveySession]" = OrderedDict()
        self._last_active: Dict[str, float] = {}
        self._client_factory = client_factory
        self._reset_on_close = reset_on_close
        self._idle_ttl = idle_ttl
        self._max_sessions = max_sessions
        self._clock = clock

    @property
    def idle_ttl(self) -> float:
        if self._idle_ttl is None:
            return get_settings().session_idle_ttl
        return self._idle_ttl

    @property
    def max_sessions(self) -> int:
        if self._max_sessions is None:
            return get_settings().max_sessions
        return self._max_sessions

    def create(self) -> SurveySession:
        reset_on_close = self._reset_on_close
        if reset_on_close is None:
            reset_on_close = get_settings().reset_form_on_close

        self.sweep()
        while self._sessions and len(self._sessions) >= self.max_sessions:
            oldest_id = next(iter(self._sessions))
            self._remove(oldest_id)
            logger.warning(f"Session limit reached, evicted survey session {oldest_id}")

        session = SurveySession(self._client_factory(), reset_on_close=reset_on_close)
        self._sessions[session.session_id] = session
        self._last_active[session.session_id] = self._clock()
        logger.info(f"Created survey session {session.session_id}")
        return session

    def get(self, session_id: str) -> SurveySession:
        self.sweep()
        try:
            session = self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None
        self._sessions.move_to_end(session_id)
        self._last_active[session_id] = self._clock()
        return session

    def delete(self, session_id: str) -> None:
        if session_id not in self._sessions:
            raise SessionNotFoundError(session_id)
        self._remove(session_id)
        logger.info(f"Deleted survey session {session_id}")

    def sweep(self) -> int:
        """Drop idle sessions, returns how many were removed"""
        cutoff = self._clock() - self.idle_ttl
        expired = [sid for sid, seen in self._last_active.items() if seen <= cutoff]
        for session_id in expired:
            self._remove(session_id)
        if expired:
            logger.info(f"Expired {len(expired)} idle survey sessions")
        return len(expired)

    def _remove(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        self._last_active.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)


# Process-wide registry used by the API
session_registry = SessionRegistry()


def get_session_registry() -> SessionRegistry:
    return session_registry
