"""Survey form schema and Pydantic models"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional
from datetime import datetime

# Field name -> label, in form order
FIELD_LABELS: Dict[str, str] = {
    "fullName": "Full Name",
    "email": "Email",
    "surveyTopic": "Survey Topic",
    "favoriteLanguage": "Favorite Programming Language",
    "yearsOfExperience": "Years of Experience",
    "exerciseFrequency": "Exercise Frequency",
    "dietPreference": "Diet Preference",
    "highestQualification": "Highest Qualification",
    "fieldOfStudy": "Field of Study",
    "feedback": "Feedback",
}

FIELD_NAMES = tuple(FIELD_LABELS)

TOPICS = ("Technology", "Health", "Education")

# Fields shown (and required) only for a given topic
TOPIC_FIELDS: Dict[str, tuple] = {
    "Technology": ("favoriteLanguage", "yearsOfExperience"),
    "Health": ("exerciseFrequency", "dietPreference"),
    "Education": ("highestQualification", "fieldOfStudy"),
}

# Options offered by select inputs. Informational only, not enforced.
FIELD_CHOICES: Dict[str, List[str]] = {
    "surveyTopic": list(TOPICS),
    "favoriteLanguage": ["JavaScript", "Python", "Java", "C#"],
    "exerciseFrequency": ["Daily", "Weekly", "Monthly", "Rarely"],
    "dietPreference": ["Vegetarian", "Vegan", "Non-Vegetarian"],
    "highestQualification": ["High School", "Bachelor's", "Master's", "PhD"],
}


def default_values() -> Dict[str, str]:
    """Empty form values, as created when a form is mounted"""
    return {name: "" for name in FIELD_NAMES}


def confirmation_rows(values: Dict[str, str]) -> List[Dict[str, str]]:
    """
    Rows listed by the confirmation view for submitted values

    Universal fields come first, then the active topic's fields, then feedback.
    """
    names = ["fullName", "email", "surveyTopic"]
    names.extend(TOPIC_FIELDS.get(values.get("surveyTopic", ""), ()))
    names.append("feedback")
    return [
        {"field": name, "label": FIELD_LABELS[name], "value": values.get(name, "")}
        for name in names
    ]


class SurveyFormValues(BaseModel):
    """Full set of form values, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    full_name: str = ""
    email: str = ""
    survey_topic: str = ""
    favorite_language: str = ""
    years_of_experience: str = ""
    exercise_frequency: str = ""
    diet_preference: str = ""
    highest_qualification: str = ""
    field_of_study: str = ""
    feedback: str = ""

    def as_form_values(self) -> Dict[str, str]:
        """Values keyed by form field name"""
        return self.model_dump(by_alias=True)


class FieldUpdateRequest(BaseModel):
    """Single field edit coming from the UI"""
    name: str = Field(..., description="Form field name, e.g. fullName")
    value: str = Field("", description="New field value")


class ValidationResponse(BaseModel):
    """Result of a stand-alone validation run"""
    valid: bool
    errors: Dict[str, str]


class FieldSchema(BaseModel):
    """One form field as described to a UI"""
    name: str
    label: str
    topic: Optional[str] = None
    choices: Optional[List[str]] = None


class FormSchemaResponse(BaseModel):
    """Form layout consumed by the UI"""
    topics: List[str]
    fields: List[FieldSchema]


class ConfirmationRow(BaseModel):
    """Label/value pair listed by the confirmation popup"""
    field: str
    label: str
    value: str


class SubmissionView(BaseModel):
    """Accepted submission as shown in the confirmation popup"""
    submission_id: str
    submitted_at: datetime
    rows: List[ConfirmationRow]
    questions: List[str] = []


class SessionStateResponse(BaseModel):
    """Current state of a survey session"""
    session_id: str
    values: Dict[str, str]
    errors: Dict[str, str]
    popup_visible: bool
    fetch_pending: bool
    submission: Optional[SubmissionView] = None


class SubmitRejectedResponse(BaseModel):
    """Submission that failed validation"""
    session_id: str
    status: str = "rejected"
    errors: Dict[str, str]
