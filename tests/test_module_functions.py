"""
Unit tests for the resource modules
Tests the function-based approach for creating resources
"""

import json
import unittest
from types import SimpleNamespace
from unittest.mock import Mock, patch
import sys
import os

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from modules.dynamodb.functions import (
    READ_DATA_ACTIONS,
    create_table,
    grant_read_data,
    import_table_by_attributes,
    lookup_table,
    read_data_policy_document,
)
from modules.function.functions import (
    LAMBDA_BASIC_EXECUTION_POLICY_ARN,
    create_function,
    create_function_role,
)

TABLE_ARN = "arn:aws:dynamodb:us-east-1:123456789012:table/Users"


class TestDynamoDBFunctions(unittest.TestCase):
    """Test the users table functions"""

    def test_create_table_structure(self):
        """Test that the table is keyed by a string partition key"""
        with patch('modules.dynamodb.functions.aws') as mock_aws:
            mock_table = Mock()
            mock_table.name = "Users"
            mock_table.arn = TABLE_ARN
            mock_aws.dynamodb.Table.return_value = mock_table

            result = create_table("users-table", "Users", tags={"Project": "test"})

            self.assertIn("table", result)
            self.assertEqual(result["table_name"], "Users")
            self.assertEqual(result["table_arn"], TABLE_ARN)

            kwargs = mock_aws.dynamodb.Table.call_args.kwargs
            self.assertEqual(kwargs["name"], "Users")
            self.assertEqual(kwargs["hash_key"], "PK")
            self.assertEqual(kwargs["billing_mode"], "PAY_PER_REQUEST")
            self.assertEqual(kwargs["tags"]["Project"], "test")
            mock_aws.dynamodb.TableAttributeArgs.assert_called_once_with(name="PK", type="S")

    def test_read_data_policy_document(self):
        """Test that the policy covers the table and the listed indexes"""
        document = read_data_policy_document(TABLE_ARN, [f"{TABLE_ARN}/index/byEmail"])

        statement = document["Statement"][0]
        self.assertEqual(statement["Effect"], "Allow")
        self.assertEqual(statement["Action"], READ_DATA_ACTIONS)
        self.assertEqual(statement["Resource"], [TABLE_ARN, f"{TABLE_ARN}/index/byEmail"])

    def test_read_data_policy_document_without_indexes(self):
        document = read_data_policy_document(TABLE_ARN)
        self.assertEqual(document["Statement"][0]["Resource"], [TABLE_ARN])
        self.assertIn("dynamodb:GetItem", document["Statement"][0]["Action"])
        self.assertNotIn("dynamodb:PutItem", document["Statement"][0]["Action"])

    def test_grant_read_data(self):
        """Test that the grant is an inline policy on the function role"""
        with patch('modules.dynamodb.functions.aws') as mock_aws, \
             patch('modules.dynamodb.functions.pulumi') as mock_pulumi:
            result = grant_read_data("read-users", "order-role", TABLE_ARN)

            policy_output = mock_pulumi.Output.all.return_value.apply.return_value
            mock_aws.iam.RolePolicy.assert_called_once_with(
                "read-users",
                role="order-role",
                policy=policy_output
            )
            self.assertEqual(result["actions"], READ_DATA_ACTIONS)

            # The applied callback renders the policy document
            render = mock_pulumi.Output.all.return_value.apply.call_args.args[0]
            document = json.loads(render([TABLE_ARN, []]))
            self.assertEqual(document["Statement"][0]["Resource"], [TABLE_ARN])

    def test_import_table_by_attributes(self):
        """Test that the ARN is built from the name without reading the table"""
        with patch('modules.dynamodb.functions.aws') as mock_aws, \
             patch('modules.dynamodb.functions.pulumi') as mock_pulumi:
            account_id = mock_aws.get_caller_identity_output.return_value.account_id
            partition = mock_aws.get_partition_output.return_value.partition

            result = import_table_by_attributes("Users", "eu-west-1", ["byEmail"])

            self.assertEqual(result["table_name"], "Users")
            mock_pulumi.Output.concat.assert_any_call(
                "arn:", partition, ":dynamodb:", "eu-west-1", ":", account_id, ":table/", "Users"
            )
            self.assertEqual(len(result["index_arns"]), 1)
            mock_aws.dynamodb.get_table_output.assert_not_called()

    def test_import_table_by_attributes_without_indexes(self):
        with patch('modules.dynamodb.functions.aws'), \
             patch('modules.dynamodb.functions.pulumi'):
            result = import_table_by_attributes("Users", "us-east-1")
            self.assertEqual(result["index_arns"], [])

    def test_lookup_table(self):
        """Test that lookup mode reads the table from AWS"""
        with patch('modules.dynamodb.functions.aws') as mock_aws, \
             patch('modules.dynamodb.functions.pulumi') as mock_pulumi:
            result = lookup_table("Users")

            mock_aws.dynamodb.get_table_output.assert_called_once_with(name="Users")
            looked_up = mock_aws.dynamodb.get_table_output.return_value
            self.assertIs(result["table_arn"], looked_up.arn)

            to_index_arns = mock_pulumi.Output.all.return_value.apply.call_args.args[0]
            self.assertEqual(
                to_index_arns([TABLE_ARN, [SimpleNamespace(name="byEmail")]]),
                [f"{TABLE_ARN}/index/byEmail"]
            )
            self.assertEqual(to_index_arns([TABLE_ARN, None]), [])


class TestFunctionFunctions(unittest.TestCase):
    """Test the Lambda function functions"""

    def test_create_function_role(self):
        with patch('modules.function.functions.aws') as mock_aws:
            mock_role = Mock()
            mock_role.arn = "arn:aws:iam::123456789012:role/order-function-role"
            mock_role.name = "order-function-role"
            mock_aws.iam.Role.return_value = mock_role

            result = create_function_role("order-function")

            self.assertEqual(result["role_arn"], mock_role.arn)
            self.assertEqual(result["role_name"], mock_role.name)
            assume_role_policy = json.loads(mock_aws.iam.Role.call_args.kwargs["assume_role_policy"])
            self.assertEqual(
                assume_role_policy["Statement"][0]["Principal"]["Service"],
                "lambda.amazonaws.com"
            )
            mock_aws.iam.RolePolicyAttachment.assert_called_once_with(
                "order-function-basic-execution",
                policy_arn=LAMBDA_BASIC_EXECUTION_POLICY_ARN,
                role=mock_role.name
            )

    def test_create_function(self):
        with patch('modules.function.functions.aws') as mock_aws, \
             patch('modules.function.functions.pulumi') as mock_pulumi:
            result = create_function(
                "order-function",
                role_arn="arn:aws:iam::123456789012:role/order-function-role",
                environment={"USER_TABLE_NAME": "Users"},
                code_path="./lambdas/order",
                timeout=5
            )

            self.assertIn("function_arn", result)
            self.assertEqual(result["environment"], {"USER_TABLE_NAME": "Users"})
            mock_pulumi.FileArchive.assert_called_once_with("./lambdas/order")
            mock_aws.lambda_.FunctionEnvironmentArgs.assert_called_once_with(
                variables={"USER_TABLE_NAME": "Users"}
            )

            kwargs = mock_aws.lambda_.Function.call_args.kwargs
            self.assertEqual(kwargs["runtime"], "python3.12")
            self.assertEqual(kwargs["handler"], "handler.handler")
            self.assertEqual(kwargs["timeout"], 5)
            self.assertEqual(kwargs["code"], mock_pulumi.FileArchive.return_value)


if __name__ == "__main__":
    unittest.main(verbosity=2)
