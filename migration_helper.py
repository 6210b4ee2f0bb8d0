#!/usr/bin/env python3
"""
Migration Helper: From a Cross-Stack Reference to a Name Lookup
Walks through the two-phase "dummy export" procedure that unlinks
OrderService from UserService without an export-in-use deadlock
"""

import json
import sys
import os
from typing import Dict, List

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import COUPLED, DECOUPLED, DECOUPLING_PHASES, DUMMY_EXPORT, get_config
from src.app import DeployCheckError
from src.composition import build_app
from src.decoupling import PHASE_DESCRIPTIONS, migration_plan, simulate_deployments

PAIR = ["UserService", "OrderService"]


def phase_manifests(phase: str, values: Dict[str, str] = None) -> Dict[str, Dict]:
    """Synthesized manifests of every unit for a decoupling phase"""
    config = get_config({**(values or {}), "decoupling_phase": phase})
    return build_app(config).synth()


def explain_problem():
    """
    Describe why the direct-reference pair gets stuck
    """
    print("📊 The Coupling Problem")
    print("=======================")
    print("""
UserService creates the Users table and hands its handle to OrderService.
The handle cannot cross stacks as an object, so it becomes:

  UserService     pulumi.export("users_table", {"name": ..., "arn": ...})
  OrderService    pulumi.StackReference(".../UserService").require_output("users_table")

From then on UserService may not rename, replace or stop exporting the table
while OrderService still reads that output. Dropping the handle from
OrderService also drops the export from UserService, and deploying
UserService first pulls the value from under the running OrderService.
""")

    print("✨ Way out 1: Configuration-based lookup")
    print("----------------------------------------")
    print("""
ConfigBasedOrderService only receives the string "Users" and rebuilds the
table reference from it. No stack output links the two stacks. The price:
nothing checks the name before deployment, and grants only cover the
indexes you list.
""")

    print("🔄 Way out 2: Dummy export (for stacks already coupled)")
    print("-------------------------------------------------------")
    for phase in DECOUPLING_PHASES:
        print(f"  {phase:<13} {PHASE_DESCRIPTIONS[phase]}")


def show_phase(phase: str):
    """
    Print the exports and imports of the direct-reference pair in a phase
    """
    manifests = phase_manifests(phase)

    print(f"📄 Phase: {phase}")
    print("=" * (len(phase) + 9))
    for unit_id in PAIR:
        manifest = manifests[unit_id]
        print(f"\n{unit_id} ({manifest['stack']})")
        print(f"  exports: {json.dumps(manifest['exports'], indent=2) if manifest['exports'] else 'none'}")
        imports = [f"{i['unit']}.{i['output']}" for i in manifest["imports"]]
        print(f"  imports: {', '.join(imports) if imports else 'none'}")


def print_migration_commands(current_phase: str = COUPLED):
    """
    Print the deployments needed to reach the decoupled state, in order
    """
    config = get_config({"decoupling_phase": current_phase})
    app = build_app(config)

    print("🧭 Migration Commands")
    print("=====================")
    steps = migration_plan(current_phase)
    if not steps:
        print("Already decoupled, nothing to do.")
        return

    for number, step in enumerate(steps, start=1):
        print(f"\n# Step {number}: {step['description']}")
        units = " ".join(f"--unit {unit_id}" for unit_id in step["deploy"])
        print(f"python deploy.py up --phase {step['phase']} {units}")
        print("# or by hand:")
        for unit_id in step["deploy"]:
            print(f"pulumi stack select {app.qualified_stack_name(unit_id)}")
            print(f"pulumi config set decoupling_phase {step['phase']}")
            print("pulumi up")

    print("\n⚠️ Never deploy UserService without its export while OrderService still imports it.")


def check_transition(from_phase: str, to_phase: str, order: List[str]) -> bool:
    """
    Replay a transition offline and report whether it would be rejected
    """
    deployed = phase_manifests(from_phase)
    target = build_app(get_config({"decoupling_phase": to_phase}))

    try:
        simulate_deployments(target, deployed, order)
    except DeployCheckError as e:
        print(f"❌ {from_phase} -> {to_phase} deploying {', '.join(order)}: {e}")
        return False

    print(f"✅ {from_phase} -> {to_phase} deploying {', '.join(order)}: accepted")
    return True


def check_transitions():
    """
    Replay the safe procedure and the shortcuts that deadlock
    """
    print("🧪 Transition Checks")
    print("====================")
    check_transition(COUPLED, DUMMY_EXPORT, PAIR)
    check_transition(DUMMY_EXPORT, DECOUPLED, ["UserService"])
    check_transition(COUPLED, DECOUPLED, ["UserService", "OrderService"])
    check_transition(COUPLED, DECOUPLED, ["OrderService", "UserService"])
    check_transition(DECOUPLED, COUPLED, ["OrderService", "UserService"])


def main():
    """Main migration helper"""
    print("🚀 Cross-Stack Reference Migration Helper")
    print("=========================================")
    print("This tool walks through unlinking OrderService from UserService.")
    print()

    while True:
        print("Choose an option:")
        print("1. Explain the coupling problem")
        print("2. Show exports and imports for each phase")
        print("3. Print migration commands")
        print("4. Check transitions offline")
        print("5. Exit")
        print()

        choice = input("Enter your choice (1-5): ").strip()

        if choice == "1":
            explain_problem()
        elif choice == "2":
            for phase in DECOUPLING_PHASES:
                show_phase(phase)
                print()
        elif choice == "3":
            phase = input(f"Current phase ({', '.join(DECOUPLING_PHASES)}) [{COUPLED}]: ").strip() or COUPLED
            if phase in DECOUPLING_PHASES:
                print_migration_commands(phase)
            else:
                print(f"❌ Unknown phase {phase}.")
        elif choice == "4":
            check_transitions()
        elif choice == "5":
            print("👋 Happy decoupling!")
            break
        else:
            print("❌ Invalid choice. Please enter 1-5.")

        print("\n" + "="*50 + "\n")


if __name__ == "__main__":
    main()
