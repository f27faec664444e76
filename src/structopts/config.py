"""
Loading option defaults from YAML or JSON configuration files.

The instance returned by load_defaults is meant to be passed straight to
parse, so values given on the command line override values from the file::

    opts = load_defaults(ServeOpts, "serve.yaml")
    files = parse(ServeOpts, opts, sys.argv[1:])
"""

import dataclasses
import json
import logging
import os
from typing import Any, Optional, Type

import yaml

from .coerce import append_value, coerce_value
from .descriptor import FieldDescriptor, TypeCategory, describe
from .errors import ConfigError, ParseError
from .multi import Multi

logger = logging.getLogger(__name__)


def _load_config_file(config_path: str) -> dict[str, Any]:
    """
    Load configuration from a YAML or JSON file.

    Args:
        config_path (str): Path to the configuration file.

    Returns:
        dict[str, Any]: Dictionary containing the configuration data.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ConfigError: If the file format is not supported or invalid.
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    file_ext = os.path.splitext(config_path)[1].lower()

    with open(config_path, "r") as f:
        if file_ext in [".yaml", ".yml"]:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML file: {e}") from e
        elif file_ext == ".json":
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Invalid JSON file: {e}") from e
        else:
            raise ConfigError(
                f"Unsupported file format: {file_ext}. "
                "Supported formats are: .yaml, .yml, .json"
            )

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Configuration file must contain a mapping, got {type(data).__name__}"
        )
    return data


def _select_section(
    cls: Type[Any], data: dict[str, Any], section: Optional[str]
) -> dict[str, Any]:
    if section is not None:
        if section not in data:
            raise ConfigError(f"Section '{section}' not found in configuration file")
        values = data[section]
    elif isinstance(data.get(cls.__name__), dict):
        values = data[cls.__name__]
    else:
        values = data

    if values is None:
        return {}
    if not isinstance(values, dict):
        raise ConfigError(f"Section for {cls.__name__} must be a mapping")
    return values


def _convert_leaf(descriptor: FieldDescriptor, value: Any) -> Any:
    """
    Validate a native config value against the field's leaf type.

    Strings are run through the command-line coercer so that ``"8080"``
    and ``8080`` are both accepted for an integer field.
    """
    leaf = descriptor.leaf
    if isinstance(value, str) and leaf is not TypeCategory.STRING:
        return coerce_value(descriptor, value)

    is_number = isinstance(value, (int, float)) and not isinstance(value, bool)
    if leaf is TypeCategory.BOOLEAN and isinstance(value, bool):
        return value
    if leaf is TypeCategory.INTEGER and is_number and isinstance(value, int):
        # Reuse the coercer for the fixed-width range check.
        return coerce_value(descriptor, str(value))
    if leaf is TypeCategory.FLOAT and is_number:
        return float(value)
    if leaf is TypeCategory.STRING and isinstance(value, str):
        return value
    if leaf is TypeCategory.ENUM and isinstance(value, descriptor.leaf_type):
        return value
    if leaf is TypeCategory.LITERAL and value in descriptor.leaf_type:
        return value

    raise ConfigError(
        f"Field '{descriptor.qualified_name}' expects {leaf.value}, "
        f"got {type(value).__name__}: {value!r}"
    )


def _convert(descriptor: FieldDescriptor, value: Any) -> Any:
    if descriptor.category is TypeCategory.MULTI:
        if not isinstance(value, list):
            raise ConfigError(
                f"Field '{descriptor.qualified_name}' expects a list, "
                f"got {type(value).__name__}: {value!r}"
            )
        accumulator = Multi(descriptor.capacity, descriptor.leaf_type)
        for item in value:
            append_value(descriptor, accumulator, _convert_leaf(descriptor, item))
        return accumulator

    if value is None and descriptor.category is TypeCategory.OPTIONAL:
        return None
    return _convert_leaf(descriptor, value)


def load_defaults(cls: Type[Any], config_path: str, section: Optional[str] = None) -> Any:
    """
    Build an instance of ``cls`` whose defaults come from a config file.

    Values are read from ``section`` if given, else from a top-level key
    named after the class when present, else from the top level of the
    file. Keys may use the field name (``dry_run``) or the option spelling
    (``dry-run``). Fields absent from the file keep their dataclass default.

    Args:
        cls: The option dataclass type.
        config_path: Path to a .yaml, .yml or .json file.
        section: Optional top-level key holding the values for ``cls``.

    Returns:
        An instance of ``cls``.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ConfigError: If the file is malformed, names unknown fields, holds
            values of the wrong type, or leaves a required field unset.
    """
    table = describe(cls)
    values = _select_section(cls, _load_config_file(config_path), section)
    by_name = {d.name: d for d in table}
    init_names = {f.name for f in dataclasses.fields(cls) if f.init}

    kwargs = {}
    for key, value in values.items():
        name = str(key).replace("-", "_")
        descriptor = by_name.get(name)
        if descriptor is None or name not in init_names:
            raise ConfigError(
                f"Unknown option '{key}' for {cls.__name__} in {config_path}"
            )
        try:
            kwargs[name] = _convert(descriptor, value)
        except ParseError as e:
            raise ConfigError(f"{config_path}: {e}") from e

    missing = [
        f.name
        for f in dataclasses.fields(cls)
        if f.init
        and f.name not in kwargs
        and f.default is dataclasses.MISSING
        and f.default_factory is dataclasses.MISSING
    ]
    if missing:
        raise ConfigError(
            f"Missing required values for {cls.__name__}: {', '.join(missing)}"
        )

    logger.debug(
        "Loaded %d value(s) for %s from %s", len(kwargs), cls.__name__, config_path
    )
    return cls(**kwargs)
