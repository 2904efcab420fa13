import os
import re
import json
import base64
import logging
from decimal import Decimal, DecimalException
from datetime import datetime, timezone

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from evaluation_repo import EvaluationRepo
from survey_config import load_config
from survey_models import EvaluationSubmission, NewSurvey, ValidationError, new_id
from survey_repo import SurveyRepo

# ========= ENV =========
# Fails the cold start when SURVEY_TABLE_PREFIX is missing or invalid
CONFIG = load_config(os.environ)

logger = logging.getLogger()
logger.setLevel(CONFIG.log_level)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

SURVEY_PATH_RE = re.compile(r"^/surveys/([^/]+)$")

# DecimalException: numbers outside DynamoDB's range fail in boto3's serializer
STORE_ERRORS = (ClientError, BotoCoreError, DecimalException)


def _json_default(o):
    # DynamoDB hands numbers back as Decimal
    if isinstance(o, Decimal):
        return int(o) if o == o.to_integral_value() else float(o)
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def _resp(status: int, body=None):
    headers = dict(CORS_HEADERS)
    if body is None:
        return {"statusCode": status, "headers": headers, "body": ""}
    headers["Content-Type"] = "application/json"
    return {
        "statusCode": status,
        "headers": headers,
        "body": json.dumps(body, default=_json_default),
    }


def _error(status: int, message: str):
    return _resp(status, {"error": message})


def _method(event) -> str:
    return (
        event.get("requestContext", {}).get("http", {}).get("method")
        or event.get("httpMethod")
        or ""
    ).upper()


def _path(event) -> str:
    path = event.get("rawPath") or event.get("path") or "/"
    return path.rstrip("/") or "/"


def _json_body(event):
    """Decode the request body; numbers come back as int or Decimal so DynamoDB accepts them."""
    raw_body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        raw_body = base64.b64decode(raw_body).decode("utf-8")
    return json.loads(raw_body, parse_float=Decimal, parse_constant=_reject_constant)


class SurveyApi:
    """Routes API Gateway events to the survey and evaluation handlers."""

    def __init__(self, surveys: SurveyRepo, evaluations: EvaluationRepo, clock=None):
        self.surveys = surveys
        self.evaluations = evaluations
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def handle(self, event):
        method = _method(event)

        # CORS preflight, any path
        if method == "OPTIONS":
            return _resp(200)

        path = _path(event)
        if path == "/surveys":
            if method == "POST":
                return self.create_survey(event)
            return _error(405, "Method not allowed")

        if path == "/evaluations":
            if method == "POST":
                return self.store_evaluations(event)
            return _error(405, "Method not allowed")

        m = SURVEY_PATH_RE.match(path)
        if m:
            if method == "GET":
                return self.get_survey(m.group(1))
            return _error(405, "Method not allowed")

        return _error(404, "Not found")

    def create_survey(self, event):
        try:
            payload = _json_body(event)
        except ValueError:
            return _error(400, "Invalid JSON payload")

        try:
            survey = NewSurvey.from_payload(payload)
        except ValidationError as e:
            logger.warning("Rejected survey: %s", e)
            return _error(400, str(e))

        survey_id = new_id()
        try:
            self.surveys.put_survey(survey.to_item(survey_id, self.clock().isoformat()))
        except STORE_ERRORS:
            logger.exception("Error storing survey")
            return _error(500, "Error storing survey")

        logger.info("Stored survey %s", survey_id)
        return _resp(200, {"surveyId": survey_id})

    def get_survey(self, survey_id: str):
        try:
            survey = self.surveys.get_survey(survey_id)
        except STORE_ERRORS:
            logger.exception("Error fetching survey %s", survey_id)
            survey = None

        if survey is None:
            return _error(404, "Survey not found")

        survey["surveyId"] = survey_id
        return _resp(200, survey)

    def store_evaluations(self, event):
        try:
            payload = _json_body(event)
        except ValueError:
            return _error(400, "Invalid JSON payload")
        # JSON null is an empty batch
        if payload is None:
            payload = []
        if not isinstance(payload, list) or not all(e is None or isinstance(e, dict) for e in payload):
            return _error(400, "Invalid JSON payload")

        current_year = self.clock().year
        # Validate and store one element at a time; earlier writes are kept if a later one fails
        for entry in payload:
            try:
                submission = EvaluationSubmission.from_payload(entry, current_year=current_year)
            except ValidationError as e:
                logger.warning("Rejected evaluation: %s", e)
                return _error(400, str(e))

            try:
                self.evaluations.put_evaluation(
                    submission.to_item(new_id(), self.clock().isoformat())
                )
            except STORE_ERRORS:
                logger.exception(
                    "Error storing evaluation for %s (survey %s)",
                    submission.teamMember,
                    submission.surveyId,
                )
                return _error(500, "Error storing evaluation")

            logger.info(
                "Stored evaluation: surveyId=%s teamMember=%s averageGrade=%s",
                submission.surveyId,
                submission.teamMember,
                submission.averageGrade,
            )

        return _resp(200, {"message": "Evaluations stored successfully"})


def build_api(dynamodb, clock=None) -> SurveyApi:
    """Wire both repositories to one DynamoDB resource."""
    return SurveyApi(
        surveys=SurveyRepo(CONFIG.surveys_table, dynamodb=dynamodb),
        evaluations=EvaluationRepo(CONFIG.evaluations_table, dynamodb=dynamodb),
        clock=clock,
    )


_api = None


def _get_api() -> SurveyApi:
    """Build the API once per container and reuse it for warm invocations."""
    global _api
    if _api is None:
        _api = build_api(
            boto3.resource(
                "dynamodb",
                region_name=CONFIG.region,
                endpoint_url=CONFIG.endpoint_url,
            )
        )
    return _api


def lambda_handler(event, context):
    return _get_api().handle(event)
