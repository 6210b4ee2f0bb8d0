"""
Unit tests for configuration
"""

import unittest
import sys
import os

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import COUPLED, DECOUPLED, get_config


class TestConfigValues(unittest.TestCase):

    def test_defaults(self):
        config = get_config({})
        self.assertEqual(config.aws_region, "us-east-1")
        self.assertEqual(config.users_table_name, "Users")
        self.assertEqual(config.decoupling_phase, COUPLED)
        self.assertFalse(config.lookup_table)
        self.assertEqual(config.index_names, [])

    def test_typed_values(self):
        config = get_config({"lookup_table": True, "global_indexes": ["byEmail"], "function_timeout": 30})
        self.assertTrue(config.lookup_table)
        self.assertEqual(config.index_names, ["byEmail"])
        self.assertEqual(config.function_timeout, 30)

    def test_values_read_back_from_a_stack(self):
        """Stack config values arrive as strings"""
        config = get_config({
            "aws:region": "eu-west-1",
            "decoupling_phase": DECOUPLED,
            "lookup_table": "true",
            "global_indexes": '["byEmail"]',
            "function_memory_size": "256",
            "tags": '{"Team": "orders"}',
        })
        self.assertEqual(config.aws_region, "eu-west-1")
        self.assertEqual(config.decoupling_phase, DECOUPLED)
        self.assertTrue(config.lookup_table)
        self.assertEqual(config.index_names, ["byEmail"])
        self.assertEqual(config.function_memory_size, 256)
        self.assertEqual(config.common_tags["Team"], "orders")

    def test_false_string(self):
        self.assertFalse(get_config({"lookup_table": "false"}).lookup_table)


if __name__ == '__main__':
    unittest.main()
