from decimal import Decimal

import pytest

from survey_models import (
    EvaluationSubmission,
    NewSurvey,
    ValidationError,
    average_grade,
    new_id,
)


def _submission(**overrides):
    payload = {
        "teamMember": "ana",
        "surveyId": "s1",
        "quarter": "Q3",
        "year": 2026,
        "evaluations": [{"question": "q1", "grade": 4}],
    }
    payload.update(overrides)
    return payload


def test_average_grade_skips_entries_without_grade():
    evals = [{"grade": 2}, {"grade": 4}, {"notGrade": 9}]
    assert average_grade(evals) == 3


def test_average_grade_empty_is_zero():
    assert average_grade([]) == 0


def test_average_grade_ignores_non_objects_and_bad_grades():
    evals = ["x", 5, None, {"grade": "7"}, {"grade": True}, {"grade": Decimal("1.5")}]
    assert average_grade(evals) == Decimal("1.5")


def test_new_id_is_unique():
    assert new_id() != new_id()


def test_new_survey_requires_fields_in_order():
    with pytest.raises(ValidationError) as exc:
        NewSurvey.from_payload({"year": 2026, "evaluator": "bo"})
    assert str(exc.value) == "Missing field: quarter"

    with pytest.raises(ValidationError) as exc:
        NewSurvey.from_payload({"quarter": "Q1", "year": 2026, "evaluator": "bo", "questions": []})
    assert str(exc.value) == "Missing field: teamMembers"


def test_new_survey_only_checks_presence():
    survey = NewSurvey.from_payload(
        {"quarter": None, "year": "soon", "evaluator": 1, "questions": {}, "teamMembers": ""}
    )
    item = survey.to_item("abc", "2026-01-01T00:00:00+00:00")
    assert item["pk"] == "abc"
    assert item["createdAt"] == "2026-01-01T00:00:00+00:00"
    assert item["year"] == "soon"


def test_new_survey_null_reports_first_missing_field():
    with pytest.raises(ValidationError) as exc:
        NewSurvey.from_payload(None)
    assert str(exc.value) == "Missing field: quarter"


def test_new_survey_rejects_non_object():
    with pytest.raises(ValidationError) as exc:
        NewSurvey.from_payload([1, 2])
    assert str(exc.value) == "Invalid JSON payload"


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"teamMember": ""}, "Missing teamMember field"),
        ({"teamMember": 3}, "Missing teamMember field"),
        ({"surveyId": None}, "Missing surveyId field"),
        ({"quarter": ""}, "Missing quarter field"),
        ({"year": "2026"}, "Missing year field"),
        ({"year": True}, "Missing year field"),
        ({"year": 2025}, "Missing year field"),
        ({"evaluations": {"grade": 1}}, "Invalid evaluations field"),
    ],
)
def test_submission_validation_messages(overrides, message):
    with pytest.raises(ValidationError) as exc:
        EvaluationSubmission.from_payload(_submission(**overrides), current_year=2026)
    assert str(exc.value) == message


def test_submission_checks_team_member_first():
    with pytest.raises(ValidationError) as exc:
        EvaluationSubmission.from_payload({"year": 1999}, current_year=2026)
    assert str(exc.value) == "Missing teamMember field"


def test_submission_null_element_fails_on_team_member():
    with pytest.raises(ValidationError) as exc:
        EvaluationSubmission.from_payload(None, current_year=2026)
    assert str(exc.value) == "Missing teamMember field"


def test_submission_accepts_future_and_decimal_years():
    sub = EvaluationSubmission.from_payload(_submission(year=Decimal("2027.0")), current_year=2026)
    assert sub.year == Decimal("2027.0")


def test_submission_item_shape():
    evals = [{"grade": 2}, {"grade": 4}, {"notGrade": 9}]
    sub = EvaluationSubmission.from_payload(_submission(evaluations=evals), current_year=2026)
    item = sub.to_item("e1", "2026-03-01T00:00:00+00:00")
    assert item == {
        "pk": "e1",
        "surveyId": "s1",
        "year": 2026,
        "quarter": "Q3",
        "teamMember": "ana",
        "evaluations": evals,
        "averageGrade": Decimal(3),
        "submittedAt": "2026-03-01T00:00:00+00:00",
    }
