"""
Function Module Functions
Creates the Lambda execution role and the Lambda function
"""

import pulumi
import pulumi_aws as aws
from typing import Dict

LAMBDA_BASIC_EXECUTION_POLICY_ARN = "arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"


def create_function_role(name: str, tags: Dict[str, str] = None) -> Dict[str, any]:
    """
    Create IAM execution role for a Lambda function

    Args:
        name: Role name prefix
        tags: Additional tags

    Returns:
        Dict with role resource and outputs
    """
    tags = tags or {}

    role = aws.iam.Role(
        f"{name}-role",
        assume_role_policy="""{
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Action": "sts:AssumeRole",
                    "Effect": "Allow",
                    "Principal": {
                        "Service": "lambda.amazonaws.com"
                    }
                }
            ]
        }""",
        tags={
            **tags,
            "Name": f"{name}-role",
            "Module": "function"
        }
    )

    # CloudWatch Logs access
    policy_attachment = aws.iam.RolePolicyAttachment(
        f"{name}-basic-execution",
        policy_arn=LAMBDA_BASIC_EXECUTION_POLICY_ARN,
        role=role.name
    )

    return {
        "role": role,
        "policy_attachment": policy_attachment,
        "role_arn": role.arn,
        "role_name": role.name
    }


def create_function(name: str,
                    role_arn: 'pulumi.Input[str]',
                    environment: Dict[str, 'pulumi.Input[str]'],
                    runtime: str = "python3.12",
                    handler: str = "handler.handler",
                    code_path: str = "./lambdas/order",
                    memory_size: int = 128,
                    timeout: int = 10,
                    tags: Dict[str, str] = None) -> Dict[str, any]:
    """
    Create a Lambda function from a local code directory

    Args:
        name: Resource name
        role_arn: Execution role ARN
        environment: Environment variables
        runtime: Lambda runtime
        handler: Handler entry point
        code_path: Directory packaged as the function code
        memory_size: Memory in MB
        timeout: Timeout in seconds
        tags: Additional tags

    Returns:
        Dict with function resource and outputs
    """
    tags = tags or {}

    function = aws.lambda_.Function(
        name,
        role=role_arn,
        runtime=runtime,
        handler=handler,
        code=pulumi.FileArchive(code_path),
        memory_size=memory_size,
        timeout=timeout,
        environment=aws.lambda_.FunctionEnvironmentArgs(
            variables=environment
        ),
        tags={
            **tags,
            "Name": name,
            "Module": "function"
        }
    )

    return {
        "function": function,
        "function_name": function.name,
        "function_arn": function.arn,
        "environment": environment
    }
