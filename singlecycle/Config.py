import os

import yaml

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "config.yaml")

DEFAULTS = {
    'memory': {
        'size': 256,
        'display_words': 16,
    },
    'run': {
        'delay_ms': 0,
        'max_steps': 10000,
    },
    'server': {
        'host': '127.0.0.1',
        'port': 5000,
    },
    'logging': {
        'level': 'WARNING',
    },
}


def load_config(config_path=None):
    """Read the YAML config and fill in defaults section by section."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    with open(config_path, 'r') as file:
        config = yaml.safe_load(file) or {}

    return {section: {**values, **(config.get(section) or {})}
            for section, values in DEFAULTS.items()}
