"""Survey form endpoints"""
from fastapi import APIRouter, HTTPException, Depends, status
from fastapi.responses import JSONResponse, Response
import logging

from app.models.survey import (
    FIELD_CHOICES,
    FIELD_LABELS,
    TOPIC_FIELDS,
    TOPICS,
    FieldSchema,
    FieldUpdateRequest,
    FormSchemaResponse,
    SessionStateResponse,
    SubmissionView,
    SubmitRejectedResponse,
    SurveyFormValues,
    ValidationResponse,
    confirmation_rows,
)
from app.services.form_state import UnknownFieldError
from app.services.submission import Rejected
from app.services.survey_sessions import (
    SessionNotFoundError,
    SessionRegistry,
    SurveySession,
    get_session_registry,
)
from app.services.validation import validate

logger = logging.getLogger(__name__)
router = APIRouter()


def _session_state(session: SurveySession) -> SessionStateResponse:
    controller = session.controller
    submission = None
    snapshot = controller.snapshot
    if snapshot is not None:
        submission = SubmissionView(
            submission_id=snapshot.submission_id,
            submitted_at=snapshot.submitted_at,
            rows=confirmation_rows(snapshot.values),
            questions=list(controller.questions),
        )

    return SessionStateResponse(
        session_id=session.session_id,
        values=session.store.current_values(),
        errors=session.store.current_errors(),
        popup_visible=controller.popup_visible,
        fetch_pending=controller.fetch_pending,
        submission=submission,
    )


def _get_session(registry: SessionRegistry, session_id: str) -> SurveySession:
    try:
        return registry.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Survey session not found")


@router.get("/schema", response_model=FormSchemaResponse)
async def get_form_schema():
    """Describe the form fields, topics and select options"""
    topic_by_field = {
        name: topic for topic, names in TOPIC_FIELDS.items() for name in names
    }
    fields = [
        FieldSchema(
            name=name,
            label=label,
            topic=topic_by_field.get(name),
            choices=FIELD_CHOICES.get(name),
        )
        for name, label in FIELD_LABELS.items()
    ]
    return FormSchemaResponse(topics=list(TOPICS), fields=fields)


@router.post("/validate", response_model=ValidationResponse)
async def validate_values(values: SurveyFormValues):
    """Validate a complete set of values without touching any session"""
    errors = validate(values.as_form_values())
    return ValidationResponse(valid=not errors, errors=errors)


@router.post("/sessions", response_model=SessionStateResponse, status_code=status.HTTP_201_CREATED)
async def create_session(registry: SessionRegistry = Depends(get_session_registry)):
    """Start a new, empty survey form"""
    session = registry.create()
    return _session_state(session)


@router.get("/sessions/{session_id}", response_model=SessionStateResponse)
async def get_session(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    """Current values, errors and confirmation popup state"""
    return _session_state(_get_session(registry, session_id))


@router.patch("/sessions/{session_id}/fields", response_model=SessionStateResponse)
async def update_field(
    session_id: str,
    update: FieldUpdateRequest,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Apply one field edit. Errors are left as they were until the next submit."""
    session = _get_session(registry, session_id)
    try:
        session.update_field(update.name, update.value)
    except UnknownFieldError:
        raise HTTPException(status_code=400, detail=f"Unknown form field: {update.name}")
    return _session_state(session)


@router.post("/sessions/{session_id}/submit")
async def submit_session(
    session_id: str,
    wait: bool = False,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """
    Validate and submit the session's form

    Rejected submissions answer 422 with the per-field errors. Accepted ones
    answer 202 while questions are still being fetched; with wait=true the
    call returns once the fetch has finished.
    """
    session = _get_session(registry, session_id)
    outcome = session.submit()

    if isinstance(outcome, Rejected):
        body = SubmitRejectedResponse(session_id=session_id, errors=dict(outcome.errors))
        return JSONResponse(
            status_code=422,
            content=body.model_dump()
        )

    if wait:
        await session.controller.wait_for_enrichment()

    state = _session_state(session)
    status_code = status.HTTP_202_ACCEPTED if state.fetch_pending else status.HTTP_200_OK
    return JSONResponse(status_code=status_code, content=state.model_dump(mode="json"))


@router.post("/sessions/{session_id}/close", response_model=SessionStateResponse)
async def close_popup(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    """Dismiss the confirmation popup"""
    session = _get_session(registry, session_id)
    session.close_popup()
    return _session_state(session)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    """Drop a survey session"""
    try:
        registry.delete(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Survey session not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
