"""
DynamoDB repository for evaluation submissions.

Each team member's submission is its own item in the evaluations table.  Items carry the
``surveyId`` they answer but nothing enforces that the survey exists.
"""

from __future__ import annotations

import boto3
from typing import Dict, Any


class EvaluationRepo:
    """Repository for storing evaluation submissions in DynamoDB."""

    def __init__(self, table_name: str, dynamodb=None) -> None:
        self.table_name = table_name
        self.table = (dynamodb or boto3.resource("dynamodb")).Table(table_name)

    def put_evaluation(self, item: Dict[str, Any]) -> None:
        """
        Insert an evaluation submission.

        The write is conditional on the generated key being unused so an identifier collision
        fails loudly instead of overwriting another member's record.

        Raises:
            ClientError: For any DynamoDB error, including a failed condition.
        """
        self.table.put_item(
            Item=item,
            ConditionExpression="attribute_not_exists(pk)",
        )
