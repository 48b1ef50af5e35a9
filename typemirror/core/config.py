"""
Configuration management for code generation.

Handles loading and merging configuration from named profiles and JSON
files, providing defaults and validation for generator settings.
"""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..logging_config import get_logger

logger = get_logger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


@dataclass
class GeneratorConfig:
    """Configuration for one generation run."""

    # Output settings
    output_file: Optional[str] = None
    language: str = "typescript"

    # Naming settings
    type_prefix: str = ""
    export_types: bool = False

    # Code style settings
    indent_size: int = 4
    use_tabs: bool = False
    line_ending: str = "\n"
    add_comments: bool = True

    # Flattening
    flatten: bool = False
    flatten_fields: Optional[List[str]] = None  # None inlines every struct field
    flatten_suffix: str = ""
    collision_strategy: str = "error"  # error, rename
    rename_case: str = "snake"  # snake, camel, pascal
    drop_inlined: bool = True

    # Override slot, keyed by primitive kind name
    scalar_overrides: Dict[str, Any] = field(default_factory=dict)

    # Custom settings (language-specific)
    custom: Dict[str, Any] = field(default_factory=dict)


BASE_DEFAULTS: Dict[str, Any] = {
    "language": "typescript",
    "custom": {
        "prefer_null_for_nullable": True,
        "prefer_array_generic": True,
        "include_semicolon": True,
        "prefer_unknown": False,
        "inline_objects": False,
        "union_tag_field": "type",
        "union_value_field": "value",
    },
}

TIMESTAMP_ALIAS_OVERRIDE = {"mode": "alias", "target": "string", "alias": "Timestamp"}


class ConfigManager:
    """Manages configuration profiles, loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._profiles: Dict[str, Dict[str, Any]] = {}
        self._load_defaults()

    def _load_defaults(self):
        """Load the built-in profiles."""
        # Nested declarations, tab indented, no exports
        self._profiles["default"] = {
            "use_tabs": True,
            "indent_size": 4,
            "export_types": False,
        }

        # Nested structs inlined, every identifier prefixed
        self._profiles["flattened"] = {
            "flatten": True,
            "type_prefix": "Flattened_",
            "export_types": True,
            "use_tabs": False,
            "indent_size": 4,
            "scalar_overrides": {"timestamp": {"mode": "inline", "target": "string"}},
        }

        # Same as flattened, timestamps reference one generated alias
        self._profiles["flattened-alias"] = {
            "flatten": True,
            "type_prefix": "Flattened_",
            "export_types": True,
            "use_tabs": False,
            "indent_size": 4,
            "scalar_overrides": {"timestamp": dict(TIMESTAMP_ALIAS_OVERRIDE)},
        }

    def get_config(
        self,
        profile: str = "default",
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> GeneratorConfig:
        """
        Get complete configuration for a profile.

        Args:
            profile: Built-in profile name
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration

        Raises:
            ConfigError: If the profile is unknown or the file is invalid
        """
        file_config = self._load_config_file(config_file) if config_file else {}
        if file_config.pop("targets", None) is not None:
            logger.debug("Ignoring targets in %s for a single configuration", config_file)

        return self._build_config(profile, file_config, custom_config)

    def get_target_configs(
        self,
        profile: str = "default",
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> List[GeneratorConfig]:
        """
        Get one configuration per output target.

        A configuration file may hold a ``targets`` list. Each entry is
        merged over the file's top-level settings and may name its own
        ``profile``; every target must write to a distinct ``output_file``.
        Without a ``targets`` list this returns the single configuration
        ``get_config`` would.

        Args:
            profile: Profile for targets that do not name one
            custom_config: Overrides applied to every target
            config_file: Path to JSON configuration file

        Raises:
            ConfigError: If the targets list or any target is invalid
        """
        file_config = self._load_config_file(config_file) if config_file else {}
        targets = file_config.pop("targets", None)

        if targets is None:
            return [self._build_config(profile, file_config, custom_config)]

        if not isinstance(targets, list) or not targets:
            raise ConfigError(f"'targets' must be a non-empty list of objects: {config_file}")

        configs = []
        seen_outputs = set()
        for index, entry in enumerate(targets):
            if not isinstance(entry, dict):
                raise ConfigError(f"targets[{index}] must be a JSON object")

            entry = dict(entry)
            target_profile = entry.pop("profile", profile)
            config = self._build_config(target_profile, _merge(file_config, entry), custom_config)

            if not config.output_file:
                raise ConfigError(f"targets[{index}] needs an output_file")
            output = str(Path(config.output_file))
            if output in seen_outputs:
                raise ConfigError(f"targets[{index}] writes to {output}, which another target already uses")
            seen_outputs.add(output)
            configs.append(config)

        logger.debug("Resolved %d targets from %s", len(configs), config_file)
        return configs

    def _build_config(
        self,
        profile: str,
        file_config: Dict[str, Any],
        custom_config: Optional[Dict[str, Any]],
    ) -> GeneratorConfig:
        """Merge defaults, profile, file settings and overrides, in that order."""
        if profile not in self._profiles:
            raise ConfigError(
                f"Unknown profile: {profile}. Available: {', '.join(self.list_profiles())}"
            )

        # Start with defaults, then the profile
        base_config = _merge({}, BASE_DEFAULTS)
        base_config = _merge(base_config, self._profiles[profile])

        if file_config:
            base_config = _merge(base_config, file_config)

        # Apply custom overrides
        if custom_config:
            base_config = _merge(base_config, custom_config)

        logger.debug("Resolved configuration for profile %s", profile)
        return self._dict_to_config(base_config)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig instance."""
        # Extract known fields
        known_fields = {f.name for f in GeneratorConfig.__dataclass_fields__.values()}

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        # Unknown keys are language specific
        if custom_args:
            existing_custom = dict(config_args.get("custom", {}))
            existing_custom.update(custom_args)
            config_args["custom"] = existing_custom

        return GeneratorConfig(**config_args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)
        config_dict = asdict(config)

        # Flatten custom settings back to the top level
        config_dict.update(config_dict.pop("custom"))

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}") from e

    def list_profiles(self) -> List[str]:
        """Get list of built-in profiles."""
        return list(self._profiles.keys())

    def get_profile(self, name: str) -> Dict[str, Any]:
        """Get a copy of a profile's raw settings."""
        if name not in self._profiles:
            raise ConfigError(f"Unknown profile: {name}")
        return _merge({}, self._profiles[name])

    def validate_config(self, config: GeneratorConfig) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation warnings
        """
        warnings = []

        if config.collision_strategy not in {"error", "rename"}:
            warnings.append(f"Invalid collision_strategy: {config.collision_strategy}")

        if config.rename_case not in {"snake", "camel", "pascal"}:
            warnings.append(f"Invalid rename_case: {config.rename_case}")

        if config.indent_size < 2:
            warnings.append("indent_size must be greater than or equal to 2")

        if config.type_prefix and not config.type_prefix.replace("_", "a").isidentifier():
            warnings.append(f"Invalid type_prefix: {config.type_prefix}")

        if config.flatten and not (config.type_prefix or config.flatten_suffix):
            warnings.append(
                "Flattening without type_prefix or flatten_suffix would reuse the "
                "unflattened identifiers"
            )

        if config.flatten_fields is not None and not config.flatten:
            warnings.append("flatten_fields is set but flatten is disabled")

        for kind_name, raw in (config.scalar_overrides or {}).items():
            if isinstance(raw, dict) and raw.get("mode") not in (None, "inline", "alias"):
                warnings.append(f"Invalid override mode for {kind_name}: {raw.get('mode')}")

        return warnings


def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``overrides`` into a copy of ``base``; nested dicts merge by key."""
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        elif isinstance(value, dict):
            merged[key] = _merge({}, value)
        else:
            merged[key] = value
    return merged


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(
    profile: str = "default",
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
) -> GeneratorConfig:
    """
    Convenience function to load configuration.

    Args:
        profile: Built-in profile name
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration
    """
    manager = get_config_manager()
    return manager.get_config(profile, custom_config, config_file)


def load_target_configs(
    profile: str = "default",
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
) -> List[GeneratorConfig]:
    """Convenience function to load one configuration per output target."""
    return get_config_manager().get_target_configs(profile, custom_config, config_file)
