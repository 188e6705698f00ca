"""
Submission lifecycle

submit() validates the values and, when they are clean, freezes a snapshot
and starts the question fetch in the background. The popup becomes visible
once questions (possibly none) are known for the snapshot that is still
current. A result that arrives after a newer submission or after the popup
was closed is dropped.
"""
import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping, Optional, Set, Tuple, Union
import logging

from app.services.form_state import FormStateStore
from app.services.question_client import EnrichmentFetchError, QuestionEnrichmentClient
from app.services.validation import validate

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class SubmittedSnapshot:
    """Read-only copy of the form values taken when validation passed"""
    values: Mapping[str, str]
    submission_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def capture(cls, values: Mapping[str, str]) -> "SubmittedSnapshot":
        return cls(values=MappingProxyType(dict(values)))

    @property
    def survey_topic(self) -> str:
        return self.values.get("surveyTopic", "")


@dataclass(frozen=True)
class Rejected:
    errors: Mapping[str, str]


@dataclass(frozen=True)
class Accepted:
    snapshot: SubmittedSnapshot


SubmitOutcome = Union[Rejected, Accepted]


class SubmissionController:
    """Drives validation, snapshotting, question enrichment and the popup state"""

    def __init__(self, store: FormStateStore, question_client: QuestionEnrichmentClient):
        self.store = store
        self.question_client = question_client
        self._snapshot: Optional[SubmittedSnapshot] = None
        self._questions: Optional[Tuple[str, ...]] = None
        self._fetch_task: Optional[asyncio.Task] = None
        self._running_fetches: Set[asyncio.Task] = set()

    @property
    def snapshot(self) -> Optional[SubmittedSnapshot]:
        return self._snapshot

    @property
    def questions(self) -> Tuple[str, ...]:
        return self._questions or ()

    @property
    def popup_visible(self) -> bool:
        return self._snapshot is not None and self._questions is not None

    @property
    def fetch_pending(self) -> bool:
        return self._fetch_task is not None and not self._fetch_task.done()

    def submit(self, values: Mapping[str, str]) -> SubmitOutcome:
        """
        Validate values and start enrichment when they pass

        Must be called from a running event loop, the fetch is scheduled on it.

        Returns:
            Rejected with the full error mapping, or Accepted with the snapshot
        """
        errors = validate(values)
        self.store.publish_errors(errors)

        if errors:
            logger.info(f"Submission rejected: {sorted(errors)}")
            return Rejected(errors=MappingProxyType(errors))

        snapshot = SubmittedSnapshot.capture(values)
        self._snapshot = snapshot
        self._questions = None
        self._fetch_task = asyncio.get_running_loop().create_task(self._enrich(snapshot))
        self._running_fetches.add(self._fetch_task)
        self._fetch_task.add_done_callback(self._running_fetches.discard)

        logger.info(
            f"Submission {snapshot.submission_id} accepted for topic '{snapshot.survey_topic}'"
        )
        return Accepted(snapshot=snapshot)

    async def _enrich(self, snapshot: SubmittedSnapshot) -> None:
        try:
            questions = await self.question_client.fetch(snapshot.survey_topic)
        except EnrichmentFetchError as e:
            logger.warning(f"Question fetch failed for submission {snapshot.submission_id}: {e}")
            questions = ()
        except Exception:
            logger.exception(f"Unexpected question fetch error for submission {snapshot.submission_id}")
            questions = ()

        if snapshot is not self._snapshot:
            logger.info(f"Discarding questions for stale submission {snapshot.submission_id}")
            return

        self._questions = tuple(questions)

    async def wait_for_enrichment(self) -> None:
        """Wait until the outstanding question fetch, if any, has finished"""
        task = self._fetch_task
        if task is not None:
            await asyncio.shield(task)

    def close_popup(self) -> None:
        """Hide the popup and forget the submission; a late fetch result is ignored"""
        if self._snapshot is not None:
            logger.info(f"Closing confirmation for submission {self._snapshot.submission_id}")
        self._snapshot = None
        self._questions = None
