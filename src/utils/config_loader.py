"""
Configuration Loader Module

Loads and validates the YAML configuration of the dialog preprocessing
pipeline. Supports environment variable interpolation and config merging.
"""

import os
import re
import yaml
from pathlib import Path
from typing import Any, Dict, Union
from copy import deepcopy


ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}")


class ConfigLoader:
    """
    Load and manage configuration files with validation and interpolation.

    Example:
        >>> config = ConfigLoader.load_config('config/preprocessing_config.yaml')
        >>> stages = config['preprocessing']['stages']
    """

    @staticmethod
    def load_config(
        config_path: Union[str, Path],
        validate: bool = True
    ) -> Dict[str, Any]:
        """
        Load a YAML configuration file.

        Args:
            config_path: Path to the YAML configuration file
            validate: Whether to validate the configuration

        Returns:
            Dictionary containing configuration parameters

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML is malformed
            ValueError: If validation fails
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Error parsing YAML file {config_path}: {e}")

        config = ConfigLoader._interpolate_env_vars(config)

        if validate:
            ConfigLoader._validate_config(config, config_path.stem)

        return config

    @staticmethod
    def load_all_configs(config_dir: Union[str, Path] = 'config') -> Dict[str, Dict[str, Any]]:
        """Load every ``*.yaml`` file of a directory, keyed by file stem."""
        config_dir = Path(config_dir)
        return {
            config_file.stem: ConfigLoader.load_config(config_file)
            for config_file in sorted(config_dir.glob('*.yaml'))
        }

    @staticmethod
    def merge_configs(
        base_config: Dict[str, Any],
        override_config: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Deep-merge ``override_config`` into a copy of ``base_config``.

        Nested dicts are merged key by key; any other value (including lists
        such as the stage order) replaces the base value.
        """
        merged = deepcopy(base_config)

        for key, value in override_config.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = ConfigLoader.merge_configs(merged[key], value)
            else:
                merged[key] = deepcopy(value)

        return merged

    @staticmethod
    def _interpolate_env_vars(config: Any) -> Any:
        """
        Recursively interpolate environment variables in config values.

        Format: ${ENV_VAR_NAME} or ${ENV_VAR_NAME:default_value}. A value that
        is exactly one reference is replaced whole; references embedded in a
        longer string are substituted in place. Unset variables without a
        default are left untouched.
        """
        if isinstance(config, dict):
            return {k: ConfigLoader._interpolate_env_vars(v) for k, v in config.items()}
        if isinstance(config, list):
            return [ConfigLoader._interpolate_env_vars(item) for item in config]
        if isinstance(config, str):
            def _replace(match: re.Match) -> str:
                var_name, default_value = match.group(1), match.group(2)
                if default_value is None:
                    return os.getenv(var_name, match.group(0))
                return os.getenv(var_name, default_value)

            return ENV_VAR_PATTERN.sub(_replace, config)
        return config

    @staticmethod
    def _validate_config(config: Dict[str, Any], config_type: str) -> None:
        """Dispatch validation on the config file stem."""
        if config_type == 'preprocessing_config':
            ConfigLoader.validate_preprocessing_config(config)

    @staticmethod
    def validate_preprocessing_config(config: Dict[str, Any]) -> None:
        """
        Validate a preprocessing configuration.

        Raises:
            ValueError: If a required section is missing or a value is invalid
        """
        if 'preprocessing' not in config:
            raise ValueError("Missing required key in preprocessing_config: preprocessing")

        # preprocessing imports utils at load time
        from preprocessing.stages import STAGE_NAMES

        section = config['preprocessing'] or {}

        stages = section.get('stages', [])
        if not isinstance(stages, list):
            raise ValueError("preprocessing.stages must be a list of stage names")
        unknown = [name for name in stages if name not in STAGE_NAMES]
        if unknown:
            raise ValueError(
                f"Unknown stage(s) {unknown}; expected any of {list(STAGE_NAMES)}"
            )

        tokenizer = section.get('tokenizer', {}) or {}
        min_len = tokenizer.get('min_token_length', 2)
        max_len = tokenizer.get('max_token_length', 30)
        if min_len < 0 or max_len < 0:
            raise ValueError("Token length bounds must be non-negative")
        if min_len > max_len:
            raise ValueError(
                f"min_token_length ({min_len}) exceeds max_token_length ({max_len})"
            )

        merger = section.get('message_merger', {}) or {}
        if merger.get('max_gap_seconds', 0) < 0:
            raise ValueError("message_merger.max_gap_seconds must be non-negative")

        lid = section.get('language_identifier', {}) or {}
        threshold = lid.get('confidence_threshold', 0.5)
        if not 0.0 <= threshold <= 1.0:
            raise ValueError("language_identifier.confidence_threshold must be in [0, 1]")

        source = section.get('source', {}) or {}
        date_from = source.get('date_from', 0)
        date_to = source.get('date_to', 0)
        if date_from < 0 or date_to < 0:
            raise ValueError("source dates must be non-negative unix timestamps")
        if date_to and date_to < date_from:
            raise ValueError("source.date_to must not be earlier than source.date_from")

    @staticmethod
    def save_config(
        config: Dict[str, Any],
        output_path: Union[str, Path]
    ) -> None:
        """Save a configuration dict to a YAML file."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Convenience function to load a configuration file."""
    return ConfigLoader.load_config(config_path)
