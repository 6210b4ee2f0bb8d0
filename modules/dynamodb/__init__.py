"""
DynamoDB Module
Users table definition, name-based re-resolution and read grants
"""

from .functions import (
    READ_DATA_ACTIONS,
    create_table,
    grant_read_data,
    import_table_by_attributes,
    index_arns,
    lookup_table,
    read_data_policy_document,
)

__all__ = [
    "READ_DATA_ACTIONS",
    "create_table",
    "grant_read_data",
    "import_table_by_attributes",
    "index_arns",
    "lookup_table",
    "read_data_policy_document",
]
