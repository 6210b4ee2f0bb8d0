#!/usr/bin/env python3
"""
Deploy Script
Runs every unit's stack through the Pulumi Automation API, producers first.
Before each update the unit's new manifest is checked against the manifests
of the stacks already deployed. An export still imported elsewhere is never
removed or changed, and no stack imports an export its producer lacks.
"""

import argparse
import json
import os
import sys
from typing import Dict, List, Optional

from pulumi import automation as auto

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import DECOUPLING_PHASES, get_config
from src.app import App, DeployCheckError
from src.composition import build_app

PROJECT_DIR = os.path.dirname(os.path.abspath(__file__))


def select_stack(app: App, unit_id: str) -> auto.Stack:
    return auto.create_or_select_stack(
        stack_name=app.qualified_stack_name(unit_id),
        work_dir=PROJECT_DIR
    )


def existing_stack(app: App, unit_id: str) -> Optional[auto.Stack]:
    try:
        return auto.select_stack(
            stack_name=app.qualified_stack_name(unit_id),
            work_dir=PROJECT_DIR
        )
    except auto.StackNotFoundError:
        return None


def deployed_manifests(app: App) -> Dict[str, Dict]:
    """Manifests exported by every unit stack that has been deployed"""
    manifests = {}
    for unit_id in app.units:
        stack = existing_stack(app, unit_id)
        if stack is None:
            continue

        outputs = stack.outputs()
        if "manifest" in outputs:
            manifests[unit_id] = outputs["manifest"].value
    return manifests


def current_config(app: App, unit_id: str) -> Dict[str, str]:
    """Config already set on a unit's stack, keyed without the project namespace"""
    stack = existing_stack(app, unit_id)
    if stack is None:
        return {}

    values = {}
    for key, item in stack.get_all_config().items():
        namespace, _, name = key.partition(":")
        values[key if namespace == "aws" else name] = item.value
    return values


def unit_app(app: App, unit_id: str, overrides: Dict[str, str]) -> App:
    """The app as a unit's own stack will build it"""
    return build_app(get_config({**current_config(app, unit_id), **overrides}))


def configure_stack(stack: auto.Stack, overrides: Dict[str, str]) -> None:
    for key, value in overrides.items():
        stack.set_config(key, auto.ConfigValue(value=value))


def synth(app: App) -> None:
    print(json.dumps(app.synth(), indent=2))


def preview(app: App, overrides: Dict[str, str], units: List[str]) -> None:
    deployed = deployed_manifests(app)
    for unit_id in units:
        stack_app = unit_app(app, unit_id, overrides)
        stack_app.check_deploy(unit_id, deployed)
        stack = select_stack(app, unit_id)
        configure_stack(stack, overrides)
        print(f"🔍 Previewing {unit_id}")
        stack.preview(on_output=print)
        deployed[unit_id] = stack_app.unit(unit_id).synth()


def up(app: App, overrides: Dict[str, str], units: List[str]) -> None:
    deployed = deployed_manifests(app)
    for unit_id in units:
        unit_app(app, unit_id, overrides).check_deploy(unit_id, deployed)
        stack = select_stack(app, unit_id)
        configure_stack(stack, overrides)
        print(f"🚀 Deploying {unit_id}")
        result = stack.up(on_output=print)
        deployed[unit_id] = result.outputs["manifest"].value
        print(f"✅ {unit_id}: {result.summary.result}")


def destroy(app: App, units: List[str]) -> None:
    deployed = deployed_manifests(app)
    for unit_id in units:
        app.check_deploy(unit_id, deployed, destroy=True)
        stack = select_stack(app, unit_id)
        print(f"🧹 Destroying {unit_id}")
        stack.destroy(on_output=print)
        deployed.pop(unit_id, None)


def parse_args(argv: List[str] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Deploy the producer and consumer stacks in dependency order"
    )
    parser.add_argument("command", choices=["synth", "preview", "up", "destroy"])
    parser.add_argument("--phase", choices=DECOUPLING_PHASES,
                        help="Decoupling phase of the UserService/OrderService pair")
    parser.add_argument("--unit", action="append", dest="units",
                        help="Unit to act on, in the given order (repeatable)")
    parser.add_argument("--region", help="AWS region")
    parser.add_argument("--organization", help="Pulumi organization")
    return parser.parse_args(argv)


def main(argv: List[str] = None) -> int:
    args = parse_args(argv)

    # Only flags given on the command line are written to the stacks
    values = {
        "decoupling_phase": args.phase,
        "aws:region": args.region,
        "organization": args.organization,
    }
    overrides = {key: value for key, value in values.items() if value is not None}
    app = build_app(get_config(overrides))

    if args.units:
        for unit_id in args.units:
            app.unit(unit_id)
        units = args.units
    elif args.command == "destroy":
        units = list(reversed(app.deployment_order()))
    else:
        units = app.deployment_order()

    try:
        if args.command == "synth":
            synth(app)
        elif args.command == "preview":
            preview(app, overrides, units)
        elif args.command == "up":
            up(app, overrides, units)
        else:
            destroy(app, units)
    except DeployCheckError as e:
        print(f"❌ {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
