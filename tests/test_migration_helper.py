"""
Unit tests for the migration helper
"""

import unittest
from unittest.mock import patch
import sys
import os

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import migration_helper
from config import COUPLED, DECOUPLED, DUMMY_EXPORT
from src.decoupling import migration_plan


class TestMigrationPlan(unittest.TestCase):

    def test_plan_from_coupled(self):
        steps = migration_plan(COUPLED)
        self.assertEqual([step["phase"] for step in steps], [DUMMY_EXPORT, DECOUPLED])
        self.assertEqual(steps[0]["deploy"], ["UserService", "OrderService"])
        self.assertEqual(steps[1]["deploy"], ["UserService"])

    def test_plan_from_dummy_export(self):
        self.assertEqual([step["phase"] for step in migration_plan(DUMMY_EXPORT)], [DECOUPLED])

    def test_nothing_left_when_decoupled(self):
        self.assertEqual(migration_plan(DECOUPLED), [])

    def test_unknown_phase_rejected(self):
        with self.assertRaises(ValueError):
            migration_plan("half")


class TestMigrationHelper(unittest.TestCase):

    def test_safe_steps_accepted(self):
        with patch('builtins.print'):
            self.assertTrue(migration_helper.check_transition(COUPLED, DUMMY_EXPORT, migration_helper.PAIR))
            self.assertTrue(migration_helper.check_transition(DUMMY_EXPORT, DECOUPLED, ["UserService"]))

    def test_shortcut_rejected(self):
        with patch('builtins.print') as mock_print:
            self.assertFalse(migration_helper.check_transition(COUPLED, DECOUPLED, ["UserService"]))
        self.assertIn("OrderService", mock_print.call_args.args[0])

    def test_recoupling_needs_producer_first(self):
        with patch('builtins.print') as mock_print:
            self.assertFalse(migration_helper.check_transition(DECOUPLED, COUPLED, ["OrderService"]))
            self.assertIn("users_table", mock_print.call_args.args[0])
            self.assertTrue(migration_helper.check_transition(DECOUPLED, COUPLED, ["UserService", "OrderService"]))

    def test_commands_follow_the_plan(self):
        with patch('builtins.print') as mock_print:
            migration_helper.print_migration_commands(COUPLED)

        output = "\n".join(str(c.args[0]) for c in mock_print.call_args_list if c.args)
        self.assertIn("python deploy.py up --phase dummy-export --unit UserService --unit OrderService", output)
        self.assertIn("python deploy.py up --phase decoupled --unit UserService", output)
        self.assertLess(output.index("dummy-export --unit"), output.index("decoupled --unit"))

    def test_phase_manifests(self):
        manifests = migration_helper.phase_manifests(DUMMY_EXPORT)
        self.assertIn("users_table_dummy", manifests["UserService"]["exports"])


if __name__ == '__main__':
    unittest.main()
