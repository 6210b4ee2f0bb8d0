"""
Decoupling
Two-phase removal of the export/import link between the direct-reference pair.

    coupled       producer exports the table, consumer imports it
    dummy-export  consumer reads the table by name; producer keeps the
                  original export and adds a dummy one with the same value
    decoupled     no exports, no imports
"""
from typing import Dict, List, Tuple, Union

from config import COUPLED, DECOUPLED, DECOUPLING_PHASES, DUMMY_EXPORT
from src.app import App
from src.references import ByHandle, ByName, TableHandle

# Units redeployed to move into each phase, in order
PHASE_DEPLOYMENTS = {
    DUMMY_EXPORT: ["UserService", "OrderService"],
    DECOUPLED: ["UserService"],
}

PHASE_DESCRIPTIONS = {
    COUPLED: "UserService exports the users table, OrderService imports it",
    DUMMY_EXPORT: "OrderService resolves the table by name; UserService keeps the export and adds a dummy copy",
    DECOUPLED: "No export/import relationship remains",
}


def select_table_source(phase: str, users_table: TableHandle, aws_region: str = "us-east-1",
                        global_indexes: Tuple[str, ...] = (), lookup: bool = False) -> Union[ByHandle, ByName]:
    """
    Pin the producer's exports for a phase and pick how the consumer reaches the table

    Raises:
        ValueError: Unknown phase
    """
    if phase == COUPLED:
        return ByHandle(users_table)

    if phase == DUMMY_EXPORT:
        users_table.export()
        users_table.export(users_table.dummy_export_name)
    elif phase != DECOUPLED:
        raise ValueError(f"Unknown decoupling phase {phase!r}; expected one of {', '.join(DECOUPLING_PHASES)}")

    return ByName(
        users_table.table_name,
        aws_region=aws_region,
        global_indexes=global_indexes,
        lookup=lookup,
    )


def migration_plan(current_phase: str) -> List[Dict[str, object]]:
    """Remaining steps from a phase to the decoupled state"""
    if current_phase not in DECOUPLING_PHASES:
        raise ValueError(f"Unknown decoupling phase {current_phase!r}; expected one of {', '.join(DECOUPLING_PHASES)}")

    steps = []
    for phase in DECOUPLING_PHASES[DECOUPLING_PHASES.index(current_phase) + 1:]:
        steps.append({
            "phase": phase,
            "description": PHASE_DESCRIPTIONS[phase],
            "deploy": PHASE_DEPLOYMENTS[phase],
        })
    return steps


def simulate_deployments(app: App, deployed: Dict[str, Dict], order: List[str]) -> Dict[str, Dict]:
    """
    Replay updates one unit at a time against deployed manifests

    Returns:
        Manifests after every update in ``order`` went through

    Raises:
        ExportInUseError: An update would pull an export from under a consumer
        MissingExportError: An update would import an export not yet deployed
    """
    deployed = dict(deployed)
    for unit_id in order:
        app.check_deploy(unit_id, deployed)
        deployed[unit_id] = app.unit(unit_id).synth()
    return deployed
