"""
Metamodel Configuration

Configuration for the command-line surface and logging, from YAML files
and environment variables.

Configuration Sources (in order of precedence):
    1. Environment variables (METAMODEL_*)
    2. Values set at runtime or loaded from a config file
    3. Default values

Identity computation is deliberately absent here: the sigil, arrow glyphs,
hash function and identifier envelope are fixed constants.
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar, Union

import yaml

from metamodel.observability import ModelLayer, ModelLogger

T = TypeVar("T")

DEFAULT_CONFIG_FILES = (Path("metamodel.yaml"), Path("config") / "metamodel.yaml")

_log = ModelLogger(__name__, ModelLayer.CONFIG)


class ConfigError(Exception):
    """Configuration error."""
    pass


class ConfigValidationError(ConfigError):
    """Configuration validation error."""
    pass


@dataclass
class ConfigValue(Generic[T]):
    """
    A single configuration value with metadata.

    Supports default values, environment variable binding and validation.
    """
    default: T
    env_var: Optional[str] = None
    description: str = ""
    validator: Optional[Callable[[T], bool]] = None
    _value: Optional[T] = field(default=None, repr=False)

    def get(self) -> T:
        """Get the current value."""
        if self.env_var and self.env_var in os.environ:
            return self._coerce(os.environ[self.env_var])
        return self._value if self._value is not None else self.default

    def set(self, value: T) -> None:
        """Set the value with validation."""
        if self.validator and not self.validator(value):
            raise ConfigValidationError(f"Invalid value for config: {value!r}")
        self._value = value

    def reset(self) -> None:
        self._value = None

    def _coerce(self, value: str) -> T:
        """Coerce string value to target type."""
        target_type = type(self.default)

        if target_type == bool:
            return value.lower() in ("true", "1", "yes", "on")  # type: ignore
        elif target_type == int:
            return int(value)  # type: ignore
        elif target_type == list:
            return value.split(",")  # type: ignore
        else:
            return value  # type: ignore


@dataclass
class ObservabilityConfig:
    """Logging configuration."""
    log_level: ConfigValue[str] = field(default_factory=lambda: ConfigValue(
        default="warning",
        env_var="METAMODEL_LOG_LEVEL",
        description="Log level (debug, info, warning, error, critical)",
        validator=lambda x: x in ("debug", "info", "warning", "error", "critical"),
    ))
    log_format: ConfigValue[str] = field(default_factory=lambda: ConfigValue(
        default="json",
        env_var="METAMODEL_LOG_FORMAT",
        description="Log format (json, text)",
        validator=lambda x: x in ("json", "text"),
    ))


@dataclass
class OutputConfig:
    """CLI output configuration."""
    format: ConfigValue[str] = field(default_factory=lambda: ConfigValue(
        default="json",
        env_var="METAMODEL_OUTPUT_FORMAT",
        description="Output format (json, yaml, text)",
        validator=lambda x: x in ("json", "yaml", "text"),
    ))
    model_path: ConfigValue[str] = field(default_factory=lambda: ConfigValue(
        default="",
        env_var="METAMODEL_MODEL_PATH",
        description="Model definition file; empty selects the built-in token model",
    ))


@dataclass
class MetamodelConfig:
    """Root configuration."""
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_dict(self) -> Dict[str, Any]:
        def extract_values(obj: Any) -> Any:
            if isinstance(obj, ConfigValue):
                return obj.get()
            elif hasattr(obj, "__dataclass_fields__"):
                return {k: extract_values(getattr(obj, k)) for k in obj.__dataclass_fields__}
            return obj

        return extract_values(self)

    def to_yaml(self) -> str:
        return yaml.dump(self.to_dict(), default_flow_style=False)


class ConfigManager:
    """
    Configuration manager with file loading and environment binding.

    Thread-safe singleton; ``reset()`` discards loaded state.
    """

    _instance: Optional["ConfigManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "ConfigManager":
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._initialized = False
            return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._config = MetamodelConfig()
        self._config_paths: List[Path] = []
        self._initialized = True

    @property
    def config(self) -> MetamodelConfig:
        return self._config

    @property
    def loaded_files(self) -> List[Path]:
        return list(self._config_paths)

    def reset(self) -> None:
        """Return to defaults (environment variables still apply)."""
        self._config = MetamodelConfig()
        self._config_paths = []

    def load_from_file(self, path: Union[str, Path]) -> None:
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"Configuration file is not valid YAML: {path}: {e}") from e

        if data:
            if not isinstance(data, dict):
                raise ConfigError(f"Configuration file must contain a mapping: {path}")
            self._apply_dict(data)
        self._config_paths.append(path)
        _log.info("configuration loaded", operation="load_config", path=str(path))

    def load_defaults(self) -> None:
        """Load the first default config file that exists."""
        for path in DEFAULT_CONFIG_FILES:
            if path.exists():
                self.load_from_file(path)
                return

    def _apply_dict(self, data: Dict[str, Any]) -> None:
        def apply_to_config(config_obj: Any, values: Dict[str, Any], prefix: str) -> None:
            for key, value in values.items():
                if not hasattr(config_obj, key):
                    raise ConfigError(f"Unknown config key: {prefix}{key}")
                attr = getattr(config_obj, key)
                if isinstance(attr, ConfigValue):
                    attr.set(value)
                elif hasattr(attr, "__dataclass_fields__") and isinstance(value, dict):
                    apply_to_config(attr, value, f"{prefix}{key}.")
                else:
                    raise ConfigError(f"Invalid config section: {prefix}{key}")

        apply_to_config(self._config, data, "")

    def _resolve(self, path: str) -> Any:
        obj: Any = self._config
        for part in path.split("."):
            if not hasattr(obj, part):
                raise ConfigError(f"Invalid config path: {path}")
            obj = getattr(obj, part)
        return obj

    def set(self, path: str, value: Any) -> None:
        """
        Set a configuration value by path.

        Example: config.set("output.format", "yaml")
        """
        attr = self._resolve(path)
        if not isinstance(attr, ConfigValue):
            raise ConfigError(f"Invalid config path: {path}")
        attr.set(value)

    def get(self, path: str) -> Any:
        """
        Get a configuration value by path.

        Example: config.get("observability.log_level")
        """
        obj = self._resolve(path)
        if isinstance(obj, ConfigValue):
            return obj.get()
        return obj

    def validate(self) -> List[str]:
        """
        Validate all configuration values, including environment overrides.

        Returns list of validation errors.
        """
        errors: List[str] = []

        def validate_config(obj: Any, path: str = "") -> None:
            if isinstance(obj, ConfigValue):
                try:
                    value = obj.get()
                except (TypeError, ValueError) as e:
                    errors.append(f"{path}: {e}")
                    return
                if obj.validator and not obj.validator(value):
                    errors.append(f"{path}: validation failed for value {value!r}")
            elif hasattr(obj, "__dataclass_fields__"):
                for field_name in obj.__dataclass_fields__:
                    field_path = f"{path}.{field_name}" if path else field_name
                    validate_config(getattr(obj, field_name), field_path)

        validate_config(self._config)
        return errors


def get_config() -> MetamodelConfig:
    return ConfigManager().config


def get_config_manager() -> ConfigManager:
    return ConfigManager()
