"""System configuration loading.

The configuration is read once per job and handed around as a read-only
mapping; see :func:`processes.config.loader.load_config`.
"""

from .loader import Configuration, default_config_path, load_config

__all__ = ["Configuration", "default_config_path", "load_config"]
