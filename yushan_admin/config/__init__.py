"""
JSON configuration: global.json plus one file per table under tables/.
"""

from .loader import load_global_config, load_table_configs
from .model import GlobalConfig, TableConfig

__all__ = ["GlobalConfig", "TableConfig", "load_global_config", "load_table_configs"]
