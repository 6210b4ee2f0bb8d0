"""
Table References
How a consuming unit gets hold of the users table: through the producer's
handle (couples the two stacks) or by re-resolving the table from its name.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from modules.dynamodb.functions import import_table_by_attributes, index_arns, lookup_table
from src.app import Attribute, Export, Import, Unit


@dataclass(frozen=True)
class TableHandle:
    """Typed reference to a table, only obtainable from the unit that defines it"""
    unit: Unit
    logical_id: str
    table_name: str
    global_indexes: Tuple[str, ...] = ()
    export_name: str = "users_table"

    @property
    def value(self) -> Dict[str, Attribute]:
        return {
            "name": Attribute(self.logical_id, "table_name", known=self.table_name),
            "arn": Attribute(self.logical_id, "table_arn"),
        }

    @property
    def dummy_export_name(self) -> str:
        return f"{self.export_name}_dummy"

    def export(self, name: Optional[str] = None) -> Export:
        return self.unit.export_value(name or self.export_name, self.value)


class ByHandle:
    """Consume the table through the producer's handle"""

    environment_key = "USER_TABLE"

    def __init__(self, handle: TableHandle):
        self.handle = handle

    def bind(self, unit: Unit) -> Dict[str, Any]:
        export = self.handle.export()
        return {
            "name": unit.import_value(self.handle.unit, export.name, key="name"),
            "arn": unit.import_value(self.handle.unit, export.name, key="arn"),
            "global_indexes": list(self.handle.global_indexes),
        }

    def resolve(self, unit: Unit) -> Dict[str, Any]:
        producer = self.handle.unit.unit_id
        table_arn = unit.resolve(Import(producer, self.handle.export_name, key="arn"))
        return {
            "table_name": unit.resolve(Import(producer, self.handle.export_name, key="name")),
            "table_arn": table_arn,
            "index_arns": index_arns(table_arn, self.handle.global_indexes),
        }


class ByName:
    """Consume the table by re-resolving it from its name"""

    environment_key = "USER_TABLE_NAME"
    logical_id = "ImportedUsersTable"

    def __init__(self, table_name: str, aws_region: str = "us-east-1",
                 global_indexes: Tuple[str, ...] = (), lookup: bool = False):
        self.table_name = table_name
        self.aws_region = aws_region
        self.global_indexes = tuple(global_indexes)
        self.lookup = lookup

    def bind(self, unit: Unit) -> Dict[str, Any]:
        unit.add_lookup(
            self.logical_id,
            table_name=self.table_name,
            global_indexes=list(self.global_indexes),
            method="get_table" if self.lookup else "attributes",
        )
        return {
            "name": self.table_name,
            "arn": Attribute(self.logical_id, "table_arn"),
            "global_indexes": list(self.global_indexes),
        }

    def resolve(self, unit: Unit) -> Dict[str, Any]:
        if self.lookup:
            return lookup_table(self.table_name)
        return import_table_by_attributes(self.table_name, self.aws_region, list(self.global_indexes))
