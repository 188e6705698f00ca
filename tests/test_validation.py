import math

import pytest

from app.models.survey import TOPIC_FIELDS, default_values
from app.services.validation import FIELD_RULES, TOPIC_RULES, parse_number, utf16_length, validate


def form(**overrides):
    values = default_values()
    values.update(overrides)
    return values


def test_empty_form_reports_universal_fields_only():
    errors = validate(default_values())

    assert errors == {
        "fullName": "Full Name is required",
        "email": "Email is required",
        "surveyTopic": "Survey Topic is required",
        "feedback": "Feedback is required",
    }


def test_clean_health_form_with_exactly_ten_char_feedback(health_values):
    assert validate(form(**health_values)) == {}


def test_short_feedback_is_rejected(health_values):
    health_values["feedback"] = "short"

    assert validate(form(**health_values)) == {
        "feedback": "Feedback must be at least 10 characters long"
    }


def test_empty_email_reports_required_not_invalid(health_values):
    health_values["email"] = ""

    errors = validate(form(**health_values))

    assert errors["email"] == "Email is required"


@pytest.mark.parametrize("email", ["plainaddress", "a@b", "@b.com", "a b@c d.e", "a@.com"])
def test_malformed_email(email, health_values):
    health_values["email"] = email

    assert validate(form(**health_values))["email"] == "Email is invalid"


@pytest.mark.parametrize("email", ["a@b.c", "first.last@sub.example.org", "contact: x@y.z"])
def test_lax_email_shape_is_accepted(email, health_values):
    health_values["email"] = email

    assert "email" not in validate(form(**health_values))


def test_whitespace_only_name_counts_as_filled_in(health_values):
    health_values["fullName"] = "   "

    assert "fullName" not in validate(form(**health_values))


@pytest.mark.parametrize("years", [
    "0", "-1", "abc", "nan", "  ", "-0.5",
    "inf", "-inf", "1_000", "-Infinity", "0x", "-0x10", "12px", "0b0",
])
def test_years_of_experience_must_be_positive(years, technology_values):
    technology_values["yearsOfExperience"] = years

    errors = validate(form(**technology_values))

    assert errors == {"yearsOfExperience": "Years of Experience must be a positive number"}


@pytest.mark.parametrize("years", [
    "1", "0.5", " 3 ", "1e2", ".5", "+7", "0x10", "0o17", "0B101", "Infinity",
])
def test_positive_years_of_experience(years, technology_values):
    technology_values["yearsOfExperience"] = years

    assert validate(form(**technology_values)) == {}


def test_technology_fields_required(technology_values):
    technology_values.update(favoriteLanguage="", yearsOfExperience="")

    assert validate(form(**technology_values)) == {
        "favoriteLanguage": "Favorite Programming Language is required",
        "yearsOfExperience": "Years of Experience is required",
    }


def test_education_fields_required():
    values = form(
        fullName="Grace",
        email="grace@navy.mil",
        surveyTopic="Education",
        feedback="Very thorough form",
    )

    assert validate(values) == {
        "highestQualification": "Highest Qualification is required",
        "fieldOfStudy": "Field of Study is required",
    }


def test_inactive_topic_fields_are_exempt(technology_values):
    values = form(**technology_values)
    values.update(
        surveyTopic="Health",
        favoriteLanguage="",
        yearsOfExperience="0",
        exerciseFrequency="Weekly",
        dietPreference="Vegetarian",
    )

    errors = validate(values)

    assert "favoriteLanguage" not in errors
    assert "yearsOfExperience" not in errors
    assert errors == {}


def test_unrecognized_topic_runs_universal_rules_only():
    values = form(
        fullName="Linus",
        email="linus@example.com",
        surveyTopic="Sports",
        feedback="Nothing else to add",
    )

    assert validate(values) == {}


def test_missing_keys_are_treated_as_empty():
    errors = validate({"surveyTopic": "Health"})

    assert errors["exerciseFrequency"] == "Exercise Frequency is required"
    assert errors["fullName"] == "Full Name is required"


def test_validate_does_not_modify_values(technology_values):
    before = dict(technology_values)

    validate(technology_values)

    assert technology_values == before


def test_topic_rules_follow_form_layout():
    assert {topic: tuple(rule.name for rule in rules) for topic, rules in TOPIC_RULES.items()} == TOPIC_FIELDS
    assert all(name in FIELD_RULES for names in TOPIC_FIELDS.values() for name in names)


@pytest.mark.parametrize("text, expected", [
    ("", 0.0),
    ("   ", 0.0),
    ("42", 42.0),
    (" -2.5e1 ", -25.0),
    ("0x1F", 31.0),
    ("0o10", 8.0),
    ("0b11", 3.0),
    ("Infinity", float("inf")),
])
def test_parse_number(text, expected):
    assert parse_number(text) == expected


@pytest.mark.parametrize("text", ["inf", "nan", "1_000", "1,000", "0x1g", "١٢", "Infinityx"])
def test_parse_number_rejects_non_numeric_text(text):
    assert math.isnan(parse_number(text))


def test_feedback_length_counts_utf16_units(health_values):
    health_values["feedback"] = "\U0001F600" * 5

    assert utf16_length(health_values["feedback"]) == 10
    assert validate(form(**health_values)) == {}


def test_feedback_of_four_emoji_is_too_short(health_values):
    health_values["feedback"] = "\U0001F600" * 4 + "a"

    assert validate(form(**health_values)) == {
        "feedback": "Feedback must be at least 10 characters long"
    }
