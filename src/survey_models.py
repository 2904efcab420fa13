"""
Data models for the team survey API.

This module defines lightweight data classes for the two request bodies the API accepts: a new
survey and a single team member's evaluation submission.  Each class validates a decoded JSON
value when it is built and provides a helper for generating the DynamoDB item to store.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from numbers import Number
from typing import Dict, Any, List
import uuid


SURVEY_REQUIRED_FIELDS = ("quarter", "year", "evaluator", "questions", "teamMembers")


class ValidationError(Exception):
    """Raised when a request body is missing a field or has the wrong shape."""


def new_id() -> str:
    """Return an opaque identifier for a new document."""
    return uuid.uuid4().hex


def is_number(value: Any) -> bool:
    # bool is an int subclass but never a number in JSON
    return isinstance(value, Number) and not isinstance(value, bool)


def average_grade(evaluations: List[Any]) -> Decimal:
    """
    Mean of the numeric ``grade`` values in a list of per-question entries.

    Entries that are not objects, or have no numeric grade, are skipped.  Returns 0 when no
    entry carries a grade.
    """
    total = Decimal(0)
    count = 0
    for entry in evaluations:
        if not isinstance(entry, dict):
            continue
        grade = entry.get("grade")
        if is_number(grade):
            total += Decimal(str(grade))
            count += 1
    if count == 0:
        return Decimal(0)
    return total / count


@dataclass
class NewSurvey:
    """
    A survey as posted by a client.

    Attributes:
        fields: The survey body as sent; free form apart from the required keys.
    """

    fields: Dict[str, Any]

    @classmethod
    def from_payload(cls, payload: Any) -> "NewSurvey":
        # null decodes to an empty survey
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ValidationError("Invalid JSON payload")
        for field in SURVEY_REQUIRED_FIELDS:
            if field not in payload:
                raise ValidationError(f"Missing field: {field}")
        return cls(fields=payload)

    def to_item(self, survey_id: str, created_at: str) -> Dict[str, Any]:
        """Convert the survey into a DynamoDB item keyed by ``survey_id``."""
        item: Dict[str, Any] = dict(self.fields)
        item["createdAt"] = created_at
        item["pk"] = survey_id
        return item


@dataclass
class EvaluationSubmission:
    """
    One team member's answers to a survey.

    Attributes:
        teamMember: Name of the person being evaluated.
        surveyId: Identifier of the survey the answers belong to.  Not checked against the
            surveys table.
        quarter: Quarter label, e.g. ``Q1``.
        year: Survey year; must not be earlier than the current calendar year.
        evaluations: Per-question entries, stored exactly as received.
    """

    teamMember: str
    surveyId: str
    quarter: str
    year: Any
    evaluations: List[Any]

    @classmethod
    def from_payload(cls, payload: Any, current_year: int) -> "EvaluationSubmission":
        """
        Validate one element of an evaluations batch.

        Fields are checked in a fixed order and the first failure is raised.  A null element is
        treated as an empty object.

        Raises:
            ValidationError: With the message to return to the client.
        """
        if not isinstance(payload, dict):
            payload = {}

        for field in ("teamMember", "surveyId", "quarter"):
            value = payload.get(field)
            if not isinstance(value, str) or not value:
                raise ValidationError(f"Missing {field} field")

        year = payload.get("year")
        if not is_number(year) or year < current_year:
            raise ValidationError("Missing year field")

        evaluations = payload.get("evaluations")
        if not isinstance(evaluations, list):
            raise ValidationError("Invalid evaluations field")

        return cls(
            teamMember=payload["teamMember"],
            surveyId=payload["surveyId"],
            quarter=payload["quarter"],
            year=year,
            evaluations=evaluations,
        )

    @property
    def averageGrade(self) -> Decimal:
        return average_grade(self.evaluations)

    def to_item(self, evaluation_id: str, submitted_at: str) -> Dict[str, Any]:
        """Convert the submission into a DynamoDB item (dictionary)."""
        return {
            "pk": evaluation_id,
            "surveyId": self.surveyId,
            "year": self.year,
            "quarter": self.quarter,
            "teamMember": self.teamMember,
            "evaluations": self.evaluations,
            "averageGrade": self.averageGrade,
            "submittedAt": submitted_at,
        }
