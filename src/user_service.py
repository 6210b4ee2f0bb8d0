"""
User Service
Producing units: each defines the users table
"""
from typing import Dict

from modules.dynamodb.functions import create_table
from src.app import App, Unit
from src.references import TableHandle

USERS_TABLE = "UsersTable"


def _declare_users_table(unit: Unit, table_name: str, partition_key: str,
                         tags: Dict[str, str]) -> None:
    unit.add_resource(
        USERS_TABLE,
        "aws:dynamodb/table:Table",
        name=table_name,
        billing_mode="PAY_PER_REQUEST",
        hash_key=partition_key,
        attributes=[{"name": partition_key, "type": "S"}],
    )

    def program(unit: Unit) -> Dict[str, Dict[str, any]]:
        return {USERS_TABLE: create_table("users-table", table_name, partition_key, tags=tags)}

    unit.set_program(program)


def define_user_service(app: App, unit_id: str = "UserService", table_name: str = "Users",
                        partition_key: str = "PK",
                        tags: Dict[str, str] = None) -> Dict[str, any]:
    """
    Define the users table and hand out a handle to it

    Any unit that receives the handle ends up importing from this unit's stack.
    """
    unit = Unit(app, unit_id, description="Users table, shared by handle")
    _declare_users_table(unit, table_name, partition_key, tags or {})

    return {
        "unit": unit,
        "users_table": TableHandle(unit, USERS_TABLE, table_name),
    }


def define_config_based_user_service(app: App, unit_id: str = "ConfigBasedUserService",
                                     table_name: str = "Users", partition_key: str = "PK",
                                     tags: Dict[str, str] = None) -> Dict[str, any]:
    """Define the users table under a caller-chosen name; only the name is known outside"""
    unit = Unit(app, unit_id, description="Users table, shared by name")
    _declare_users_table(unit, table_name, partition_key, tags or {})

    return {
        "unit": unit,
        "users_table_name": table_name,
    }
