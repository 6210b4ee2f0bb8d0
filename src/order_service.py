"""
Order Service
Consuming units: a Lambda function that reads the users table
"""
from typing import Dict, Union

from modules.dynamodb.functions import READ_DATA_ACTIONS, grant_read_data
from modules.function.functions import create_function, create_function_role
from src.app import App, Attribute, Unit
from src.references import ByHandle, ByName

ORDER_FUNCTION_ROLE = "OrderFunctionRole"
ORDER_FUNCTION = "OrderFunction"
READ_USERS_TABLE = "OrderFunctionReadUsersTable"

DEFAULT_FUNCTION_SETTINGS = {
    "runtime": "python3.12",
    "handler": "handler.handler",
    "code_path": "./lambdas/order",
    "memory_size": 128,
    "timeout": 10,
}


def define_order_service(app: App, unit_id: str, users_table: Union[ByHandle, ByName],
                         function_settings: Dict[str, object] = None,
                         environment_key: str = None,
                         tags: Dict[str, str] = None) -> Dict[str, any]:
    """
    Define the order function and its read grant on the users table

    Args:
        app: App the unit belongs to
        unit_id: Unit (and stack) name
        users_table: ByHandle couples this unit to the producer, ByName does not
        function_settings: Runtime, handler, code path, memory size and timeout
        environment_key: Variable holding the table name; defaults per variant
        tags: Additional tags

    Returns:
        Dict with the unit and the environment variable name
    """
    settings = {**DEFAULT_FUNCTION_SETTINGS, **(function_settings or {})}
    environment_key = environment_key or users_table.environment_key
    tags = tags or {}

    unit = Unit(app, unit_id, description="Order function reading the users table")
    table = users_table.bind(unit)

    unit.add_resource(
        ORDER_FUNCTION_ROLE,
        "aws:iam/role:Role",
        assume_role_service="lambda.amazonaws.com",
    )
    unit.add_resource(
        ORDER_FUNCTION,
        "aws:lambda/function:Function",
        role=Attribute(ORDER_FUNCTION_ROLE, "role_arn"),
        runtime=settings["runtime"],
        handler=settings["handler"],
        environment={environment_key: table["name"]},
    )
    unit.add_resource(
        READ_USERS_TABLE,
        "aws:iam/rolePolicy:RolePolicy",
        role=Attribute(ORDER_FUNCTION_ROLE, "role_name"),
        actions=list(READ_DATA_ACTIONS),
        table=table["arn"],
        global_indexes=table["global_indexes"],
    )

    def program(unit: Unit) -> Dict[str, Dict[str, any]]:
        resolved = users_table.resolve(unit)

        role = create_function_role("order-function", tags=tags)
        function = create_function(
            "order-function",
            role_arn=role["role_arn"],
            environment={environment_key: resolved["table_name"]},
            runtime=settings["runtime"],
            handler=settings["handler"],
            code_path=settings["code_path"],
            memory_size=settings["memory_size"],
            timeout=settings["timeout"],
            tags=tags,
        )
        grant = grant_read_data(
            "order-function-read-users-table",
            role_name=role["role_name"],
            table_arn=resolved["table_arn"],
            index_arns=resolved["index_arns"],
        )

        created = {
            ORDER_FUNCTION_ROLE: role,
            ORDER_FUNCTION: function,
            READ_USERS_TABLE: grant,
        }
        if isinstance(users_table, ByName):
            created[ByName.logical_id] = resolved
        return created

    unit.set_program(program)

    return {
        "unit": unit,
        "environment_key": environment_key,
    }
