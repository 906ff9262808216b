"""
Tests for the command-line interface.
"""
import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import MagicMock, patch

from lightroom_plugin.cli import EXIT_CANCELED, EXIT_FAILURE, EXIT_OK, build_parser, run_cli
from lightroom_plugin.operation import OperationResult, STATUS_CANCELED, STATUS_NO_DATA


class TestCli(unittest.TestCase):
    """Test cases for run_cli."""

    def setUp(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = os.path.join(self.temp_dir, "config.json")
        with open(self.config_path, 'w') as f:
            json.dump({"server_url": "https://example.com", "api_key": "secret"}, f)

        # Keep logging configuration away from the test runner's handlers
        self.logging_patch = patch('lightroom_plugin.cli.setup_logging')
        self.logging_patch.start()

    def tearDown(self):
        """Clean up after tests."""
        self.logging_patch.stop()
        shutil.rmtree(self.temp_dir)

    def test_parser_requires_command(self):
        with self.assertRaises(SystemExit):
            build_parser().parse_args([])

    @patch('builtins.print')
    def test_config_show_masks_api_key(self, mock_print):
        self.assertEqual(run_cli(["--config", self.config_path, "config", "show"]), EXIT_OK)
        printed = [call[0][0] for call in mock_print.call_args_list]
        self.assertIn("api_key = ********", printed)
        self.assertIn("server_url = https://example.com", printed)

    @patch('builtins.print')
    def test_config_set(self, mock_print):
        """Test that settings are validated and saved."""
        code = run_cli(["--config", self.config_path, "config", "set", "selection_filter", "foo; bar"])
        self.assertEqual(code, EXIT_OK)
        with open(self.config_path) as f:
            self.assertEqual(json.load(f)["selection_filter"], "foo; bar")

        code = run_cli(["--config", self.config_path, "config", "set", "numeric_setting", "12"])
        self.assertEqual(code, EXIT_FAILURE)

        code = run_cli(["--config", self.config_path, "config", "set", "unknown", "1"])
        self.assertEqual(code, EXIT_FAILURE)

    @patch('builtins.print')
    @patch('lightroom_plugin.cli.ExternalAPI')
    def test_test_connection(self, mock_api_class, mock_print):
        mock_api_class.return_value.test_connection.return_value = True
        self.assertEqual(run_cli(["--config", self.config_path, "test-connection"]), EXIT_OK)

        mock_api_class.return_value.test_connection.return_value = False
        self.assertEqual(run_cli(["--config", self.config_path, "test-connection"]), EXIT_FAILURE)

    @patch('builtins.print')
    def test_test_connection_without_url(self, mock_print):
        empty_config = os.path.join(self.temp_dir, "empty.json")
        self.assertEqual(run_cli(["--config", empty_config, "test-connection"]), EXIT_FAILURE)
        mock_print.assert_called_with("Please enter a server URL first.")

    @patch('builtins.print')
    @patch('lightroom_plugin.cli.perform_main_operation')
    def test_run_applies_overrides(self, mock_perform, mock_print):
        """Test that run passes options and command-line overrides through."""
        mock_perform.return_value = OperationResult(dry_run=True)

        code = run_cli(["--config", self.config_path, "run", "--dry-run", "--quick", "--filter", "Port", "--fuzzy"])

        self.assertEqual(code, EXIT_OK)
        config, options = mock_perform.call_args[0][:2]
        self.assertEqual(config.selection_filter, "Port")
        self.assertTrue(config.enable_fuzzy_matching)
        self.assertTrue(options.is_dry_run)
        self.assertTrue(options.is_quick_mode)
        self.assertIsNotNone(options.cancel_event)
        mock_print.assert_called_with(OperationResult(dry_run=True).message)

    @patch('builtins.print')
    @patch('lightroom_plugin.cli.perform_main_operation')
    def test_run_exit_codes(self, mock_perform, mock_print):
        mock_perform.return_value = OperationResult(status=STATUS_NO_DATA)
        self.assertEqual(run_cli(["--config", self.config_path, "run"]), EXIT_FAILURE)

        mock_perform.return_value = OperationResult(status=STATUS_CANCELED)
        self.assertEqual(run_cli(["--config", self.config_path, "run"]), EXIT_CANCELED)

        mock_perform.return_value = OperationResult(items_failed=1)
        self.assertEqual(run_cli(["--config", self.config_path, "run"]), EXIT_FAILURE)

    @patch('builtins.print')
    def test_run_missing_catalog(self, mock_print):
        code = run_cli(["--config", self.config_path, "run", "--catalog", os.path.join(self.temp_dir, "x.lrcat")])
        self.assertEqual(code, EXIT_FAILURE)


if __name__ == '__main__':
    unittest.main()
