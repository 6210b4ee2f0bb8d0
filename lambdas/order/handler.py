"""
Order function
Reads a user from the users table by partition key
"""
import json
import os

import boto3

# USER_TABLE for the handle-based stack, USER_TABLE_NAME for the name-based one
TABLE_NAME = os.environ.get("USER_TABLE") or os.environ.get("USER_TABLE_NAME")

table = boto3.resource("dynamodb").Table(TABLE_NAME)


def handler(event, context):
    user_id = (event.get("pathParameters") or {}).get("userId") or event.get("userId")
    if not user_id:
        return {"statusCode": 400, "body": json.dumps({"message": "userId is required"})}

    item = table.get_item(Key={"PK": user_id}).get("Item")
    if item is None:
        return {"statusCode": 404, "body": json.dumps({"message": f"User {user_id} not found"})}

    return {"statusCode": 200, "body": json.dumps(item, default=str)}
