"""
Configuration file handling.
"""

import json
import logging
import os
from pathlib import Path

from .dom import BACKEND_AUTO, BACKEND_CHOICES, configure_backend

logger = logging.getLogger(__name__)

# Default paths (can be overridden with FAREWATCH_CONFIG or an explicit path)
_DATA_DIR = Path(__file__).parent.parent
DEFAULT_CONFIG_FILE = _DATA_DIR / "config.json"
CONFIG_ENV_VAR = "FAREWATCH_CONFIG"

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


def _apply_defaults(config):
    config.setdefault('html_backend', BACKEND_AUTO)
    config.setdefault('default_airline', None)
    config.setdefault('log_level', 'WARNING')
    config.setdefault('indent', 2)
    return config


def config_path(config_file=None):
    """Resolve the config file: explicit path, then $FAREWATCH_CONFIG, then config.json."""
    if config_file is None:
        config_file = os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILE
    return Path(config_file)


def load_config(config_file=None):
    """Load configuration from file with error handling.

    A missing file is not an error. A corrupt file is reported and ignored.

    Args:
        config_file: Path to config file. Defaults to $FAREWATCH_CONFIG or config.json.

    Returns:
        Config dict with defaults applied
    """
    path = config_path(config_file)
    if not path.exists():
        return _apply_defaults({})

    try:
        with open(path, 'r', encoding='utf-8') as f:
            config = json.load(f)
    except json.JSONDecodeError as e:
        logger.warning(f"{path.name} is corrupted ({e}), using defaults")
        return _apply_defaults({})
    except OSError as e:
        logger.warning(f"Could not read {path} ({e}), using defaults")
        return _apply_defaults({})

    if not isinstance(config, dict):
        logger.warning(f"{path.name} has invalid format, using defaults")
        return _apply_defaults({})

    config = _apply_defaults(config)

    # Validate optional fields
    if config['html_backend'] not in BACKEND_CHOICES:
        logger.warning(f"Unknown html_backend {config['html_backend']!r}, using {BACKEND_AUTO!r}")
        config['html_backend'] = BACKEND_AUTO
    if str(config['log_level']).upper() not in LOG_LEVELS:
        logger.warning(f"Unknown log_level {config['log_level']!r}, using 'WARNING'")
        config['log_level'] = 'WARNING'
    config['log_level'] = str(config['log_level']).upper()
    if not isinstance(config['indent'], int) or isinstance(config['indent'], bool):
        config['indent'] = 2

    return config


def save_config(config, config_file=None):
    """Save configuration to file.

    Args:
        config: Config dict to save.
        config_file: Path to config file. Defaults to $FAREWATCH_CONFIG or config.json.
    """
    with open(config_path(config_file), 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2)


def apply_config(config):
    """Apply process-wide settings (the HTML backend) from a loaded config."""
    return configure_backend(config.get('html_backend', BACKEND_AUTO))
