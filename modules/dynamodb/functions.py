"""
DynamoDB Module Functions
Creates the users table, re-resolves it by name and grants read access to it
"""

import json
import pulumi
import pulumi_aws as aws
from typing import Dict, List

# Actions granted for read access to a table and its indexes
READ_DATA_ACTIONS = [
    "dynamodb:BatchGetItem",
    "dynamodb:GetRecords",
    "dynamodb:GetShardIterator",
    "dynamodb:Query",
    "dynamodb:GetItem",
    "dynamodb:Scan",
    "dynamodb:ConditionCheckItem",
    "dynamodb:DescribeTable",
]


def create_table(name: str, table_name: str, partition_key: str = "PK",
                 partition_key_type: str = "S", tags: Dict[str, str] = None) -> Dict[str, any]:
    """
    Create a DynamoDB table keyed by a single partition key

    Args:
        name: Resource name
        table_name: Physical table name
        partition_key: Partition key attribute name
        partition_key_type: Partition key attribute type (S, N or B)
        tags: Additional tags

    Returns:
        Dict with table resource and outputs
    """
    tags = tags or {}

    table = aws.dynamodb.Table(
        name,
        name=table_name,
        billing_mode="PAY_PER_REQUEST",
        hash_key=partition_key,
        attributes=[
            aws.dynamodb.TableAttributeArgs(
                name=partition_key,
                type=partition_key_type
            )
        ],
        tags={
            **tags,
            "Name": table_name,
            "Module": "dynamodb"
        }
    )

    return {
        "table": table,
        "table_name": table.name,
        "table_arn": table.arn
    }


def import_table_by_attributes(table_name: 'pulumi.Input[str]', aws_region: str,
                               global_indexes: List[str] = None) -> Dict[str, any]:
    """
    Re-resolve a table from its name without reading it from AWS

    The ARN is built from the name, so nothing checks that the table exists.
    Only the indexes listed here end up in index ARNs.

    Args:
        table_name: Physical table name
        aws_region: Region the table lives in
        global_indexes: Names of global secondary indexes to include in grants

    Returns:
        Dict with table name, table ARN and index ARNs
    """
    global_indexes = global_indexes or []
    account_id = aws.get_caller_identity_output().account_id
    partition = aws.get_partition_output().partition

    table_arn = pulumi.Output.concat(
        "arn:", partition, ":dynamodb:", aws_region, ":", account_id, ":table/", table_name
    )

    return {
        "table_name": table_name,
        "table_arn": table_arn,
        "index_arns": index_arns(table_arn, global_indexes)
    }


def index_arns(table_arn: 'pulumi.Input[str]', global_indexes: List[str]) -> List['pulumi.Output[str]']:
    """ARNs of the named global secondary indexes of a table"""
    return [pulumi.Output.concat(table_arn, "/index/", index) for index in global_indexes]


def lookup_table(table_name: 'pulumi.Input[str]') -> Dict[str, any]:
    """
    Re-resolve a table by reading it from AWS

    Fails during preview when no table has this name.

    Args:
        table_name: Physical table name

    Returns:
        Dict with table name, table ARN and index ARNs
    """
    table = aws.dynamodb.get_table_output(name=table_name)

    index_arns = pulumi.Output.all(table.arn, table.global_secondary_indexes).apply(
        lambda args: [f"{args[0]}/index/{index.name}" for index in (args[1] or [])]
    )

    return {
        "table_name": table.name,
        "table_arn": table.arn,
        "index_arns": index_arns
    }


def read_data_policy_document(table_arn: str, index_arns: List[str] = None) -> Dict[str, any]:
    """Build the IAM policy document granting read access to a table"""
    resources = [table_arn]
    resources.extend(index_arns or [])

    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Action": READ_DATA_ACTIONS,
                "Resource": resources
            }
        ]
    }


def grant_read_data(name: str, role_name: 'pulumi.Input[str]', table_arn: 'pulumi.Input[str]',
                    index_arns: 'pulumi.Input[List[str]]' = None) -> Dict[str, any]:
    """
    Grant a role read access to a table

    Args:
        name: Resource name
        role_name: Name of the role receiving the grant
        table_arn: Table ARN
        index_arns: Index ARNs covered by the grant

    Returns:
        Dict with the inline policy resource
    """
    policy_document = pulumi.Output.all(table_arn, index_arns or []).apply(
        lambda args: json.dumps(read_data_policy_document(args[0], args[1]))
    )

    policy = aws.iam.RolePolicy(
        name,
        role=role_name,
        policy=policy_document
    )

    return {
        "policy": policy,
        "actions": READ_DATA_ACTIONS
    }
