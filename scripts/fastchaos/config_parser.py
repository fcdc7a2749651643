#!/usr/bin/env python3
"""
fastchaos Configuration Parser

Loads the YAML settings file used by the fastchaos CLI and merges it over
the built-in defaults.

Example config.yaml:
    encode:
      block_width: 100
      overlap: 10
    resources:
      threads: 4
    draw:
      image_size: 512

Usage:
    # Get single value
    python -m fastchaos.config_parser config.yaml --get encode.overlap

    # Validate configuration
    python -m fastchaos.config_parser config.yaml --validate

    # As Python module
    from fastchaos.config_parser import load_config, resolve_settings
    settings = resolve_settings(load_config("config.yaml"))
"""

import argparse
import copy
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_ENV_VAR = "FASTCHAOS_CONFIG"

DEFAULT_CONFIG: Dict[str, Any] = {
    "encode": {
        "block_width": 100,
        "overlap": 10,
    },
    "resources": {
        "threads": 1,
    },
    "draw": {
        "image_size": 512,
    },
}


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Dictionary containing configuration values

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML parsing fails
        ValueError: If the top level is not a mapping
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(path, 'r') as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration file must contain a mapping: {config_path}")

    return config


def find_config(explicit: Optional[str] = None) -> Optional[str]:
    """Return the config path from an explicit argument or $FASTCHAOS_CONFIG."""
    return explicit or os.environ.get(CONFIG_ENV_VAR) or None


def get_nested(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Get a nested value from config using dot notation.

    Args:
        config: Configuration dictionary
        key_path: Dot-separated path (e.g., "encode.overlap")
        default: Default value if key not found

    Returns:
        Value at the specified path, or default if not found

    Examples:
        >>> config = {"encode": {"overlap": 20}}
        >>> get_nested(config, "encode.overlap")
        20
        >>> get_nested(config, "encode.missing", "default")
        'default'
    """
    keys = key_path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


def flatten_config(config: Dict[str, Any], prefix: str = "") -> Dict[str, str]:
    """
    Flatten nested config into flat dictionary with dot-notation keys.

    Examples:
        >>> flatten_config({"encode": {"overlap": 10}})
        {'encode.overlap': '10'}
    """
    flat = {}

    for key, value in config.items():
        full_key = f"{prefix}.{key}" if prefix else key

        if isinstance(value, dict):
            flat.update(flatten_config(value, full_key))
        elif value is None:
            flat[full_key] = ""
        elif isinstance(value, bool):
            flat[full_key] = "true" if value else "false"
        else:
            flat[full_key] = str(value)

    return flat


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def resolve_settings(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Merge a loaded config over DEFAULT_CONFIG.

    Examples:
        >>> resolve_settings({"encode": {"overlap": 20}})["encode"]
        {'block_width': 100, 'overlap': 20}
    """
    return _merge(DEFAULT_CONFIG, config or {})


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def validate_config(config: Dict[str, Any]) -> tuple[bool, list[str]]:
    """
    Validate configuration values.

    Missing keys fall back to defaults and are not errors.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    errors = []
    settings = resolve_settings(config)

    positive = [
        ("encode.block_width", "Block width"),
        ("resources.threads", "Threads"),
        ("draw.image_size", "Image size"),
    ]
    for key_path, description in positive:
        value = get_nested(settings, key_path)
        number = _as_int(value)
        if number is None:
            errors.append(f"{description} ({key_path}) must be an integer, got {value!r}")
        elif number < 1:
            errors.append(f"{description} ({key_path}) must be >= 1, got {number}")

    overlap_value = get_nested(settings, "encode.overlap")
    overlap = _as_int(overlap_value)
    width = _as_int(get_nested(settings, "encode.block_width"))
    if overlap is None:
        errors.append(f"Overlap (encode.overlap) must be an integer, got {overlap_value!r}")
    elif overlap < 0:
        errors.append(f"Overlap (encode.overlap) must be >= 0, got {overlap}")
    elif width is not None and width >= 1 and overlap >= width:
        errors.append(f"Overlap (encode.overlap) must be < block width {width}, got {overlap}")

    return len(errors) == 0, errors


def print_config_summary(config: Dict[str, Any]) -> None:
    """Print a human-readable config summary."""
    settings = resolve_settings(config)

    print("=" * 60)
    print("fastchaos Configuration Summary")
    print("=" * 60)

    sections = [
        ("Encode", [
            ("encode.block_width", "Block Width"),
            ("encode.overlap", "Overlap"),
        ]),
        ("Resources", [
            ("resources.threads", "Threads"),
        ]),
        ("Draw", [
            ("draw.image_size", "Image Size"),
        ]),
    ]

    for section_name, fields in sections:
        print(f"\n{section_name}:")
        for key_path, label in fields:
            value = get_nested(settings, key_path, "not set")
            print(f"  {label}: {value}")

    print("\n" + "=" * 60)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="fastchaos Configuration Parser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        "config",
        help="Path to YAML configuration file"
    )

    parser.add_argument(
        "--get",
        metavar="KEY",
        help="Get single value using dot notation (e.g., encode.overlap)"
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration and report errors"
    )

    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print configuration summary"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON (for --get with complex values)"
    )

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"Error parsing YAML: {e}", file=sys.stderr)
        sys.exit(1)

    if args.get:
        value = get_nested(resolve_settings(config), args.get)
        if value is None:
            print(f"Key not found: {args.get}", file=sys.stderr)
            sys.exit(1)
        if args.json:
            print(json.dumps(value))
        else:
            print(value)

    elif args.validate:
        is_valid, errors = validate_config(config)
        if is_valid:
            print("Configuration is valid!")
            sys.exit(0)
        else:
            print("Configuration errors:", file=sys.stderr)
            for error in errors:
                print(f"  - {error}", file=sys.stderr)
            sys.exit(1)

    else:
        # Default: print summary
        print_config_summary(config)


if __name__ == "__main__":
    main()
