"""Form state container: current values and current errors"""
from typing import Dict, Mapping, Optional
import logging

from app.models.survey import FIELD_NAMES, default_values

logger = logging.getLogger(__name__)


class UnknownFieldError(KeyError):
    """Raised when an edit targets a field the form does not have"""


class FormStateStore:
    """
    Holds the values and errors of one survey form

    Edits never trigger validation; errors only change when a submission
    publishes a freshly computed error mapping.
    """

    def __init__(self, initial_values: Optional[Mapping[str, str]] = None):
        self._values: Dict[str, str] = default_values()
        self._errors: Dict[str, str] = {}
        if initial_values:
            for name, value in initial_values.items():
                self.update_field(name, value)

    def update_field(self, name: str, value: str) -> None:
        """Set a single field, leaving every other field and all errors untouched"""
        if name not in FIELD_NAMES:
            raise UnknownFieldError(name)
        self._values[name] = value

    def current_values(self) -> Dict[str, str]:
        return dict(self._values)

    def current_errors(self) -> Dict[str, str]:
        return dict(self._errors)

    def publish_errors(self, errors: Mapping[str, str]) -> None:
        """Replace the error mapping with the result of a full validation run"""
        self._errors = dict(errors)

    def reset(self) -> None:
        """Back to an empty form"""
        self._values = default_values()
        self._errors = {}
        logger.debug("Form state reset to defaults")
