from pathlib import Path
from typing import Dict, Any, Optional
from config.types import EngineSettings
import logging
import os


class SettingsManager:
    """
    Settings manager for the jinx engine.

    Values come from DEFAULT_SETTINGS, then a .env file, then the process
    environment. Each setting can be overridden with its JINX_-prefixed
    uppercase name, e.g. JINX_RENDER_ENGINE=jinja.
    """

    _instance = None

    ENV_PREFIX = "JINX_"

    # Default settings with their types
    DEFAULT_SETTINGS = {
        # Engine identifiers
        "render_engine": ("jinja", str),
        "script_engine": ("python", str),
        # Render toolchain
        "render_component_name": ("component", str),
        "render_autoescape": (True, bool),
        "render_strict_undefined": (False, bool),
        # Script engine
        "script_run_in_thread": (True, bool),
        # Logging
        "log_level": ("INFO", str),
    }

    # Create mapping dynamically - each setting can be set via its prefixed env var
    ENV_MAPPING = {"JINX_" + setting.upper(): setting for setting in DEFAULT_SETTINGS.keys()}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Initialize settings with default values"""
        self.env_variables: Dict[str, str] = {}
        self.settings: Dict[str, Any] = {}
        self.env_file: Optional[str] = None
        self.logger = logging.getLogger(__name__)

        for key, (default_value, _) in self.DEFAULT_SETTINGS.items():
            self.settings[key] = default_value

        self.load()

    def _convert_value(self, value: Any, target_type: type) -> Any:
        """Convert a raw value to the target type"""
        if not isinstance(value, str):
            return target_type(value)
        if target_type == bool:
            normalized = value.strip().lower()
            if normalized in ("true", "1", "yes", "on"):
                return True
            if normalized in ("false", "0", "no", "off", ""):
                return False
            raise ValueError(f"Not a boolean: {value!r}")
        return target_type(value.strip())

    def _apply_variable(self, key: str, value: str):
        """Apply one environment variable to the mapped setting, if any"""
        setting_name = self.ENV_MAPPING.get(key)
        if setting_name is None:
            return
        _, target_type = self.DEFAULT_SETTINGS[setting_name]
        try:
            self.settings[setting_name] = self._convert_value(value, target_type)
        except ValueError:
            self.logger.warning(
                f"Ignoring {key}={value!r}: expected {target_type.__name__}"
            )

    def _load_from_env_file(self, env_path: Optional[Path] = None):
        """Load variables from a .env file in the current directory"""
        env_path = env_path or Path.cwd() / ".env"
        if env_path.exists() and env_path.is_file():
            self.logger.debug(f"Loading environment from: {env_path}")
            self._parse_env_file(env_path)
            self.env_file = str(env_path)

    def _parse_env_file(self, env_file_path: Path):
        """Parse a .env file and load variables into settings"""
        try:
            with open(env_file_path, "r") as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith("#") and "=" in line:
                        key, value = line.split("=", 1)
                        key = key.strip()
                        value = value.strip()

                        # Remove quotes if present
                        if (value.startswith('"') and value.endswith('"')) or (
                            value.startswith("'") and value.endswith("'")
                        ):
                            value = value[1:-1]

                        self.env_variables[key] = value
                        self._apply_variable(key, value)
        except OSError as e:
            self.logger.error(f"Error reading .env file {env_file_path}: {e}")

    def load(self, env_file: Optional[str] = None):
        """Load settings from a .env file and then the OS environment"""
        self._load_from_env_file(Path(env_file) if env_file else None)

        for key, value in os.environ.items():
            if key.startswith(self.ENV_PREFIX):
                self.env_variables[key] = value
                self._apply_variable(key, value)
        return self

    def get_setting(self, name: str, default: Any = None) -> Any:
        """Get a setting value by name"""
        return self.settings.get(name, default)

    def get_engine_settings(self) -> EngineSettings:
        """Get a validated, typed snapshot of the current settings"""
        return EngineSettings(env_file=self.env_file, **self.settings)

    def get_all_configuration(self) -> Dict[str, Any]:
        """Get all configuration settings with their defaults"""
        default_settings_serializable = {}
        for key, (default_value, type_class) in self.DEFAULT_SETTINGS.items():
            default_settings_serializable[key] = {
                "default_value": default_value,
                "type": type_class.__name__,
            }

        return {
            "settings": dict(self.settings),
            "default_settings": default_settings_serializable,
            "env_mapping": dict(self.ENV_MAPPING),
            "env_file": self.env_file,
        }

    def update_configuration(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Update settings and return a result summary"""
        converted = {}
        unknown_settings = []

        # Convert everything first so a bad value leaves settings untouched
        for key, value in updates.items():
            if key not in self.DEFAULT_SETTINGS:
                unknown_settings.append(key)
                continue
            _, target_type = self.DEFAULT_SETTINGS[key]
            try:
                converted[key] = self._convert_value(value, target_type)
            except (TypeError, ValueError) as e:
                return {
                    "success": False,
                    "error": str(e),
                    "message": f"Invalid value for {key}: {value!r}",
                }

        self.settings.update(converted)
        updated_settings = list(converted)

        result = {
            "success": not unknown_settings,
            "updated_settings": updated_settings,
            "message": f"Updated {len(updated_settings)} settings successfully",
        }
        if unknown_settings:
            result["error"] = f"Unknown settings: {', '.join(unknown_settings)}"
        return result

    def reset_setting(self, setting_name: str) -> Dict[str, Any]:
        """Reset a specific setting to its default value"""
        if setting_name not in self.DEFAULT_SETTINGS:
            return {"success": False, "error": f"Unknown setting: {setting_name}"}

        default_value, _ = self.DEFAULT_SETTINGS[setting_name]
        self.settings[setting_name] = default_value
        return {
            "success": True,
            "message": f"Reset {setting_name} to default value: {default_value}",
        }


# Create singleton instance
settings_manager = SettingsManager()
