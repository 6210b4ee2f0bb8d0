"""
Pulumi modules for the users table and the order function
Simple function-based approach following Pulumi best practices
"""

from .dynamodb import create_table, grant_read_data, import_table_by_attributes, lookup_table
from .function import create_function, create_function_role

__all__ = [
    "create_table",
    "grant_read_data",
    "import_table_by_attributes",
    "lookup_table",
    "create_function",
    "create_function_role"
]
