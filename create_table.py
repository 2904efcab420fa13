import os

import boto3
from botocore.exceptions import ClientError

from survey_config import load_config


# Both tables are keyed by a generated string id in "pk"; no sort key, no indexes
def table_definitions(config):
    return [
        {
            "TableName": name,
            "KeySchema": [{"AttributeName": "pk", "KeyType": "HASH"}],
            "AttributeDefinitions": [{"AttributeName": "pk", "AttributeType": "S"}],
            "BillingMode": "PAY_PER_REQUEST",
        }
        for name in (config.surveys_table, config.evaluations_table)
    ]


def create_tables(client, config):
    """
    Create the surveys and evaluations tables if they do not exist yet.
    Returns the names of the tables that were created.
    """
    created = []
    for definition in table_definitions(config):
        name = definition["TableName"]
        try:
            client.create_table(**definition)
        except ClientError as e:
            if e.response["Error"]["Code"] != "ResourceInUseException":
                raise
            print(f"{name}: already exists")
            continue
        client.get_waiter("table_exists").wait(TableName=name)
        print(f"{name}: created")
        created.append(name)
    return created


def main():
    config = load_config(os.environ)
    client = boto3.client("dynamodb", region_name=config.region, endpoint_url=config.endpoint_url)
    create_tables(client, config)


if __name__ == "__main__":
    main()
