"""
Configuration module for rosa-network.
Handles settings for the template catalog, stack polling, AWS access and logging.
"""
import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional

DEFAULT_CONFIG_PATH = Path.home() / ".rosa-network" / "config.yaml"

DEFAULTS = {
    "network": {
        "template_dir": None,
        "default_template": "rosa-quickstart-default-vpc",
        "default_region": None,
        "name_prefix": "rosa-network-stack",
        "poll_interval": 5,
        "poll_timeout": 1800,
    },
    "aws": {
        "profile": None,
        "connect_timeout": 10,
        "read_timeout": 30,
    },
    "logging": {
        "level": "INFO",
        "log_to_console": True,
        "log_to_file": False,
        "log_dir": None,
        "log_filename": "rosa_network.log",
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class Config:
    """Configuration class for rosa-network."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration.

        Args:
            config_path: Path to configuration file. If None, the default path is
                used when it exists.
        """
        self.config_path = None
        self.config_data = _merge(DEFAULTS, {})

        if config_path is None and DEFAULT_CONFIG_PATH.is_file():
            config_path = DEFAULT_CONFIG_PATH
        if config_path:
            self.load_config(config_path)

    def load_config(self, config_path: str) -> None:
        """Load configuration from a YAML file, over the defaults.

        Args:
            config_path: Path to configuration file.
        """
        with open(config_path, "r") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration file {config_path} must contain a mapping")

        self.config_path = Path(config_path)
        self.config_data = _merge(DEFAULTS, loaded)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value.

        Args:
            key: Configuration key.
            default: Default value if key not found.

        Returns:
            Configuration value.
        """
        return self.config_data.get(key, default)

    @property
    def network(self) -> Dict[str, Any]:
        return self.config_data["network"]

    @property
    def aws(self) -> Dict[str, Any]:
        return self.config_data["aws"]

    def default_region(self, environ: Optional[Dict[str, str]] = None) -> str:
        """Region used when neither the Region parameter nor --region is given.

        The config file wins over AWS_REGION, which wins over us-west-2.
        """
        environ = os.environ if environ is None else environ
        return self.network.get("default_region") or environ.get("AWS_REGION") or "us-west-2"
