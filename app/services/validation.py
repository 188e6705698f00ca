"""
Survey validation rules

validate() is pure: it rebuilds the complete error mapping from the given
values every time. Universal fields are always checked; the fields of the
selected survey topic come from TOPIC_FIELDS and are checked with the rule
registered for each field in FIELD_RULES.
"""
import math
import re
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Tuple

from app.models.survey import TOPIC_FIELDS

# Lax on purpose: something@something.something anywhere in the text
EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")

# Numeric string grammar browsers use when turning form input into a number
DECIMAL_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
RADIX_PATTERNS = (
    (re.compile(r"0[xX]([0-9a-fA-F]+)"), 16),
    (re.compile(r"0[oO]([0-7]+)"), 8),
    (re.compile(r"0[bB]([01]+)"), 2),
)
INFINITIES = {"Infinity": math.inf, "+Infinity": math.inf, "-Infinity": -math.inf}

FEEDBACK_MIN_LENGTH = 10

FormValues = Mapping[str, str]
FormErrors = Dict[str, str]

# Returns an error message, or None when the (non-empty) value is acceptable
FormatCheck = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class FieldRule:
    """A required field with an optional format check run when it is filled in"""
    name: str
    required_message: str
    check: Optional[FormatCheck] = None

    def apply(self, values: FormValues) -> Optional[str]:
        value = values.get(self.name) or ""
        if not value:
            return self.required_message
        if self.check is not None:
            return self.check(value)
        return None


def parse_number(value: str) -> float:
    """
    Convert form text to a number the way a browser does

    Blank text is 0, "Infinity" and 0x/0o/0b literals are understood, and
    anything else that is not a plain decimal (digit separators, "inf",
    "nan", trailing junk) is NaN.
    """
    text = value.strip()
    if not text:
        return 0.0
    if text in INFINITIES:
        return INFINITIES[text]
    for pattern, base in RADIX_PATTERNS:
        match = pattern.fullmatch(text)
        if match:
            return float(int(match.group(1), base))
    if DECIMAL_PATTERN.fullmatch(text):
        return float(text)
    return math.nan


def utf16_length(value: str) -> int:
    """Length in UTF-16 code units, as browsers count characters"""
    return len(value.encode("utf-16-le")) // 2


def _check_email(value: str) -> Optional[str]:
    if not EMAIL_PATTERN.search(value):
        return "Email is invalid"
    return None


def _check_positive_number(value: str) -> Optional[str]:
    number = parse_number(value)
    if math.isnan(number) or number <= 0:
        return "Years of Experience must be a positive number"
    return None


def _check_feedback_length(value: str) -> Optional[str]:
    if utf16_length(value) < FEEDBACK_MIN_LENGTH:
        return f"Feedback must be at least {FEEDBACK_MIN_LENGTH} characters long"
    return None


LEADING_RULES: Tuple[FieldRule, ...] = (
    FieldRule("fullName", "Full Name is required"),
    FieldRule("email", "Email is required", _check_email),
    FieldRule("surveyTopic", "Survey Topic is required"),
)

# Rules for fields that are only required under some topic
FIELD_RULES: Dict[str, FieldRule] = {
    rule.name: rule
    for rule in (
        FieldRule("favoriteLanguage", "Favorite Programming Language is required"),
        FieldRule("yearsOfExperience", "Years of Experience is required", _check_positive_number),
        FieldRule("exerciseFrequency", "Exercise Frequency is required"),
        FieldRule("dietPreference", "Diet Preference is required"),
        FieldRule("highestQualification", "Highest Qualification is required"),
        FieldRule("fieldOfStudy", "Field of Study is required"),
    )
}

TOPIC_RULES: Dict[str, Tuple[FieldRule, ...]] = {
    topic: tuple(FIELD_RULES[name] for name in names)
    for topic, names in TOPIC_FIELDS.items()
}

TRAILING_RULES: Tuple[FieldRule, ...] = (
    FieldRule("feedback", "Feedback is required", _check_feedback_length),
)


def active_rules(topic: str) -> Tuple[FieldRule, ...]:
    """Rules that apply for the given survey topic, in check order"""
    return LEADING_RULES + TOPIC_RULES.get(topic, ()) + TRAILING_RULES


def validate(values: FormValues) -> FormErrors:
    """
    Validate survey form values

    Args:
        values: Form values keyed by field name

    Returns:
        Field name -> error message for every invalid field (empty when valid)
    """
    errors: FormErrors = {}
    for rule in active_rules(values.get("surveyTopic") or ""):
        message = rule.apply(values)
        if message is not None:
            errors[rule.name] = message
    return errors
