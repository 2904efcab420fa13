"""
DynamoDB repository for surveys.

Surveys are stored one per item in the surveys table, keyed by a generated identifier in the
``pk`` attribute.  The rest of the item is the survey body exactly as the client sent it, plus
the ``createdAt`` timestamp.
"""

from __future__ import annotations

import boto3
from typing import Dict, Any, Optional


class SurveyRepo:
    """Repository for storing and fetching surveys in DynamoDB."""

    def __init__(self, table_name: str, dynamodb=None) -> None:
        self.table_name = table_name
        self.table = (dynamodb or boto3.resource("dynamodb")).Table(table_name)

    def put_survey(self, item: Dict[str, Any]) -> None:
        """Put a survey into the table."""
        self.table.put_item(Item=item)

    def get_survey(self, survey_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve a survey by identifier.

        Returns:
            The survey fields without the key attribute, or None if no such survey exists.
        Raises:
            ClientError: For DynamoDB errors.
        """
        resp = self.table.get_item(Key={"pk": survey_id})
        item = resp.get("Item")
        if item is None:
            return None
        item.pop("pk", None)
        return item
