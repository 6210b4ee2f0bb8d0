"""
Deployable Units
Every unit is deployed as its own Pulumi stack named after the unit.
A value handed from one unit to another becomes a stack output of the
producer, read back by the consumer through a StackReference.
"""
import pulumi
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple


class DeployCheckError(Exception):
    """Raised when deploying a unit would break the link between two stacks"""


class ExportInUseError(DeployCheckError):
    """Raised when an update would remove or change an export another unit still imports"""

    def __init__(self, producer: str, export_name: str, consumers: List[str]):
        self.producer = producer
        self.export_name = export_name
        self.consumers = consumers
        super().__init__(
            f"Export '{export_name}' of {producer} is still imported by {', '.join(consumers)}. "
            f"Deploy {', '.join(consumers)} without the import first."
        )


class MissingExportError(DeployCheckError):
    """Raised when a unit would import an export its producer's deployed stack does not publish"""

    def __init__(self, consumer: str, producer: str, export_name: str):
        self.consumer = consumer
        self.producer = producer
        self.export_name = export_name
        super().__init__(
            f"{consumer} imports '{export_name}' but the deployed {producer} does not export it. "
            f"Deploy {producer} with the export first."
        )


@dataclass(frozen=True)
class Attribute:
    """Attribute of a resource declared in the same unit"""
    logical_id: str
    attribute: str
    known: Optional[str] = None

    def render(self, app: "App") -> Any:
        if self.known is not None:
            return self.known
        return f"${{{self.logical_id}.{self.attribute}}}"


@dataclass(frozen=True)
class Import:
    """Stack output of another unit, optionally narrowed to one key"""
    producer: str
    export_name: str
    key: Optional[str] = None

    def render(self, app: "App") -> Any:
        reference = {
            "stack": app.qualified_stack_name(self.producer),
            "output": self.export_name,
        }
        if self.key:
            reference["key"] = self.key
        return {"stack_reference": reference}


@dataclass
class Resource:
    logical_id: str
    resource_type: str
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Export:
    name: str
    value: Any


def render(value: Any, app: "App") -> Any:
    """Turn a declared value into plain JSON-compatible data"""
    if isinstance(value, (Attribute, Import)):
        return value.render(app)
    if isinstance(value, dict):
        return {k: render(v, app) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [render(v, app) for v in value]
    return value


class Unit:
    """A deployable unit: its parent app plus the resources, exports and imports it declares"""

    def __init__(self, app: "App", unit_id: str, description: str = ""):
        self.app = app
        self.unit_id = unit_id
        self.description = description
        self.resources: Dict[str, Resource] = {}
        self.lookups: Dict[str, Dict[str, Any]] = {}
        self.exports: Dict[str, Export] = {}
        self.imports: List[Tuple[str, str]] = []
        self.program: Optional[Callable[["Unit"], Dict[str, Dict[str, Any]]]] = None
        self.created: Dict[str, Dict[str, Any]] = {}
        self._stack_references: Dict[str, pulumi.StackReference] = {}
        app.add_unit(self)

    @property
    def stack_name(self) -> str:
        return self.app.qualified_stack_name(self.unit_id)

    def add_resource(self, logical_id: str, resource_type: str, **properties) -> Resource:
        if logical_id in self.resources:
            raise ValueError(f"Resource {logical_id} is already declared in {self.unit_id}")
        resource = Resource(logical_id, resource_type, properties)
        self.resources[logical_id] = resource
        return resource

    def add_lookup(self, logical_id: str, **attributes) -> None:
        """Declare a resource resolved from attributes rather than created here"""
        self.lookups[logical_id] = attributes

    def export_value(self, name: str, value: Any) -> Export:
        """Publish a value as a stack output; exporting the same value twice is a no-op"""
        existing = self.exports.get(name)
        if existing is not None:
            if existing.value != value:
                raise ValueError(f"Export {name} of {self.unit_id} already holds a different value")
            return existing
        export = Export(name, value)
        self.exports[name] = export
        return export

    def import_value(self, producer: "Unit", export_name: str, key: Optional[str] = None) -> Import:
        """Read another unit's export; records the coupling between the two units"""
        if producer is self:
            raise ValueError(f"{self.unit_id} cannot import its own export {export_name}")
        if export_name not in producer.exports:
            raise ValueError(f"{producer.unit_id} has no export named {export_name}")
        if (producer.unit_id, export_name) not in self.imports:
            self.imports.append((producer.unit_id, export_name))
        return Import(producer.unit_id, export_name, key)

    def depends_on(self) -> List[str]:
        producers = []
        for producer, _ in self.imports:
            if producer not in producers:
                producers.append(producer)
        return producers

    def set_program(self, program: Callable[["Unit"], Dict[str, Dict[str, Any]]]) -> None:
        self.program = program

    def stack_reference(self, producer: str) -> pulumi.StackReference:
        if producer not in self._stack_references:
            self._stack_references[producer] = pulumi.StackReference(self.app.qualified_stack_name(producer))
        return self._stack_references[producer]

    def resolve(self, value: Any) -> Any:
        """Turn a declared value into the input handed to a Pulumi resource"""
        if isinstance(value, Import):
            output = self.stack_reference(value.producer).require_output(value.export_name)
            if value.key:
                key = value.key
                return output.apply(lambda exported: exported[key])
            return output
        if isinstance(value, Attribute):
            return self.created[value.logical_id][value.attribute]
        if isinstance(value, dict):
            return {k: self.resolve(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self.resolve(v) for v in value]
        return value

    def synth(self) -> Dict[str, Any]:
        """Artifact describing what this unit's stack declares, exports and imports"""
        return {
            "unit": self.unit_id,
            "stack": self.stack_name,
            "resources": {
                logical_id: {
                    "type": resource.resource_type,
                    "properties": render(resource.properties, self.app),
                }
                for logical_id, resource in self.resources.items()
            },
            "lookups": render(self.lookups, self.app),
            "exports": {name: render(export.value, self.app) for name, export in self.exports.items()},
            "imports": [
                {
                    "unit": producer,
                    "stack": self.app.qualified_stack_name(producer),
                    "output": export_name,
                }
                for producer, export_name in self.imports
            ],
        }

    def deploy(self) -> Dict[str, Dict[str, Any]]:
        """Create this unit's resources in the running Pulumi program"""
        if self.program is None:
            raise ValueError(f"Unit {self.unit_id} has no program")

        pulumi.log.info(
            f"Deploying {self.unit_id}: {len(self.resources)} resources, "
            f"{len(self.exports)} exports, {len(self.imports)} imports"
        )
        self.created = self.program(self) or {}

        declared = set(self.resources) | set(self.lookups)
        if set(self.created) != declared:
            raise ValueError(
                f"Program of {self.unit_id} created {sorted(self.created)} "
                f"but the unit declares {sorted(declared)}"
            )

        for export in self.exports.values():
            pulumi.export(export.name, self.resolve(export.value))
        pulumi.export("manifest", self.synth())

        return self.created


class App:
    """Root scope holding every unit of the project"""

    def __init__(self, organization: str, project: str):
        self.organization = organization
        self.project = project
        self.units: Dict[str, Unit] = {}

    def add_unit(self, unit: Unit) -> None:
        if unit.unit_id in self.units:
            raise ValueError(f"Unit {unit.unit_id} is already defined")
        self.units[unit.unit_id] = unit

    def unit(self, unit_id: str) -> Unit:
        if unit_id not in self.units:
            raise ValueError(f"Unknown unit {unit_id}; expected one of {', '.join(self.units)}")
        return self.units[unit_id]

    def qualified_stack_name(self, unit_id: str) -> str:
        return f"{self.organization}/{self.project}/{unit_id}"

    def synth(self) -> Dict[str, Dict[str, Any]]:
        return {unit_id: unit.synth() for unit_id, unit in self.units.items()}

    def deployment_order(self) -> List[str]:
        """Unit ids with every producer ahead of its consumers"""
        order: List[str] = []
        visiting: List[str] = []

        def visit(unit_id: str) -> None:
            if unit_id in order:
                return
            if unit_id in visiting:
                raise ValueError(f"Import cycle through {unit_id}")
            visiting.append(unit_id)
            for producer in self.unit(unit_id).depends_on():
                visit(producer)
            visiting.remove(unit_id)
            order.append(unit_id)

        for unit_id in self.units:
            visit(unit_id)
        return order

    def check_deploy(self, unit_id: str, deployed: Dict[str, Dict[str, Any]], destroy: bool = False) -> None:
        """
        Check that updating (or destroying) a unit keeps both sides of every stack link intact

        Args:
            unit_id: Unit about to be deployed
            deployed: Manifests of the currently deployed stacks, keyed by unit id
            destroy: Check removal of the whole stack instead of an update

        Raises:
            ExportInUseError: An export would vanish or change under a consumer
            MissingExportError: The unit would import an export its producer's stack lacks
        """
        new_exports = {}
        if not destroy:
            new_manifest = self.unit(unit_id).synth()
            new_exports = new_manifest["exports"]
            for imported in new_manifest["imports"]:
                producer = deployed.get(imported["unit"]) or {}
                if imported["output"] not in producer.get("exports", {}):
                    raise MissingExportError(unit_id, imported["unit"], imported["output"])

        previous = deployed.get(unit_id)
        if not previous:
            return

        for name, value in previous.get("exports", {}).items():
            if name in new_exports and new_exports[name] == value:
                continue
            consumers = sorted(
                consumer for consumer, manifest in deployed.items()
                if consumer != unit_id and any(
                    imported["unit"] == unit_id and imported["output"] == name
                    for imported in manifest.get("imports", [])
                )
            )
            if consumers:
                raise ExportInUseError(unit_id, name, consumers)

    def deploy(self, stack_name: str) -> Unit:
        unit = self.unit(stack_name)
        unit.deploy()
        return unit
