import os
import unittest
from unittest import mock
from pathlib import Path
import tempfile

from config.manager import SettingsManager
from config.types import EngineSettings


class TestSettingsManager(unittest.TestCase):
    """Test cases for the SettingsManager class."""

    def setUp(self):
        """Set up test fixtures."""
        # Create a new instance for each test to avoid singleton issues
        SettingsManager._instance = None
        self.manager = SettingsManager()

        # Create a temporary directory for test files
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        """Clean up after tests."""
        import shutil

        shutil.rmtree(self.temp_dir, ignore_errors=True)
        SettingsManager._instance = None

    def create_env_file(self, content):
        """Create a temporary .env file with the given content."""
        env_file = Path(self.temp_dir) / ".env"
        env_file.write_text(content)
        return env_file

    def test_defaults(self):
        """Test that defaults are loaded."""
        self.assertEqual(self.manager.get_setting("render_engine"), "jinja")
        self.assertEqual(self.manager.get_setting("script_engine"), "python")
        self.assertTrue(self.manager.get_setting("render_autoescape"))
        self.assertIsNone(self.manager.get_setting("missing"))
        self.assertEqual(self.manager.get_setting("missing", "x"), "x")

    def test_singleton_pattern(self):
        """Test that SettingsManager follows singleton pattern."""
        SettingsManager._instance = None

        manager1 = SettingsManager()
        manager2 = SettingsManager()

        self.assertIs(manager1, manager2)

    def test_parse_env_file(self):
        """Test parsing an environment file."""
        env_file = self.create_env_file(
            """
            # Test environment file
            JINX_RENDER_ENGINE=tsx
            JINX_SCRIPT_RUN_IN_THREAD=false
            JINX_RENDER_COMPONENT_NAME="view"
            UNRELATED=value
            """
        )

        self.manager.load(str(env_file))

        self.assertEqual(self.manager.get_setting("render_engine"), "tsx")
        self.assertFalse(self.manager.get_setting("script_run_in_thread"))
        self.assertEqual(self.manager.get_setting("render_component_name"), "view")
        self.assertEqual(self.manager.env_variables["UNRELATED"], "value")
        self.assertEqual(self.manager.env_file, str(env_file))

    def test_load_from_os_environment(self):
        """OS environment overrides the .env file."""
        env_file = self.create_env_file("JINX_SCRIPT_ENGINE=node\n")

        with mock.patch.dict(os.environ, {"JINX_SCRIPT_ENGINE": "py"}, clear=True):
            self.manager.load(str(env_file))

        self.assertEqual(self.manager.get_setting("script_engine"), "py")

    def test_get_engine_settings(self):
        """Test the typed snapshot."""
        self.manager.update_configuration({"render_strict_undefined": "true"})

        engine_settings = self.manager.get_engine_settings()

        self.assertIsInstance(engine_settings, EngineSettings)
        self.assertTrue(engine_settings.render_strict_undefined)
        self.assertEqual(engine_settings.render_engine, "jinja")

    def test_update_configuration(self):
        result = self.manager.update_configuration(
            {"render_engine": "html", "script_run_in_thread": "no"}
        )

        self.assertTrue(result["success"])
        self.assertEqual(result["updated_settings"], ["render_engine", "script_run_in_thread"])
        self.assertEqual(self.manager.get_setting("render_engine"), "html")
        self.assertFalse(self.manager.get_setting("script_run_in_thread"))

    def test_update_with_invalid_value_changes_nothing(self):
        result = self.manager.update_configuration(
            {"render_engine": "html", "render_autoescape": "maybe"}
        )

        self.assertFalse(result["success"])
        self.assertIn("render_autoescape", result["message"])
        self.assertEqual(self.manager.get_setting("render_engine"), "jinja")
        self.assertTrue(self.manager.get_setting("render_autoescape"))

    def test_environment_applied_on_construction(self):
        """JINX_* variables take effect without an explicit load()."""
        SettingsManager._instance = None

        with mock.patch.dict(os.environ, {"JINX_RENDER_ENGINE": "tsx"}):
            manager = SettingsManager()

        self.assertEqual(manager.get_setting("render_engine"), "tsx")
        self.assertEqual(manager.get_engine_settings().render_engine, "tsx")

    def test_invalid_environment_value_is_ignored(self):
        with mock.patch.dict(os.environ, {"JINX_SCRIPT_RUN_IN_THREAD": "sometimes"}):
            with self.assertLogs("config.manager", level="WARNING"):
                self.manager.load()

        self.assertTrue(self.manager.get_setting("script_run_in_thread"))

    def test_update_unknown_setting(self):
        result = self.manager.update_configuration({"nope": 1})

        self.assertFalse(result["success"])
        self.assertIn("nope", result["error"])

    def test_reset_setting(self):
        self.manager.update_configuration({"render_engine": "html"})

        result = self.manager.reset_setting("render_engine")

        self.assertTrue(result["success"])
        self.assertEqual(self.manager.get_setting("render_engine"), "jinja")
        self.assertFalse(self.manager.reset_setting("nope")["success"])

    def test_get_all_configuration(self):
        config = self.manager.get_all_configuration()

        self.assertIn("render_engine", config["settings"])
        self.assertEqual(
            config["default_settings"]["render_autoescape"],
            {"default_value": True, "type": "bool"},
        )
        self.assertEqual(config["env_mapping"]["JINX_RENDER_ENGINE"], "render_engine")


if __name__ == "__main__":
    unittest.main()
