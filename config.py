import configparser
import logging
import os
from typing import Optional

from default import DEFAULT

LOGGER = logging.getLogger(__name__)


class Config:
    def __init__(self, config_dir: Optional[str] = None):
        self.config_dir = config_dir or os.path.dirname(os.path.abspath(__file__))
        self.config = self.load_config()
        self.account_size = self.get_float('account', 'account_size', DEFAULT.account_size)
        self.default_risk_percent = self.get_float('account', 'default_risk_percent', DEFAULT.default_risk_percent)
        self.default_lot_type = self.get_string('trades', 'default_lot_type', DEFAULT.default_lot_type)
        self.import_lot_type = self.get_string('trades', 'import_lot_type', DEFAULT.import_lot_type)
        self.default_period = self.get_string('trades', 'default_period', DEFAULT.default_period)
        self.timeline_interval = self.get_string('trades', 'timeline_interval', DEFAULT.timeline_interval)
        self.symbol_limit = self.get_int('trades', 'symbol_limit', DEFAULT.symbol_limit)
        self.extra_table_path = self.get_string('instruments', 'extra_table_path', DEFAULT.extra_table_path)
        self.log_level = self.get_string('logging', 'level', DEFAULT.log_level).upper()
        self.strategy_tags = self.get_list('tags', 'strategies', DEFAULT.strategy_tags)
        self.setup_tags = self.get_list('tags', 'setups', DEFAULT.setup_tags)

    def load_config(self, config_base_name="config"):
        config = configparser.ConfigParser()

        default_config_path = os.path.join(self.config_dir, f"{config_base_name}.ini")
        config.read(default_config_path)

        env = os.environ.get("CONFIG_ENV")
        if env:
            env_config_path = os.path.join(self.config_dir, f"{config_base_name}.{env}.ini")
            if os.path.exists(env_config_path):
                config.read(env_config_path)
                LOGGER.info("Loaded configuration for environment: %s", env)
            else:
                LOGGER.warning(
                    "Environment '%s' specified, but config file '%s' not found. Using default.",
                    env, env_config_path,
                )
        else:
            LOGGER.debug("Using default configuration.")

        return config

    def get_bool(self, section, option, default=False):
        """Reads a yes/no style flag, warning and falling back on anything else."""
        try:
            return self.config.getboolean(section, option, fallback=default)
        except ValueError:
            LOGGER.warning(
                "Invalid boolean value '%s' for '%s.%s'. Using default: %s",
                self.config.get(section, option), section, option, default,
            )
            return default

    def get_int(self, section, option, default=0):
        return self.config.getint(section, option, fallback=default)

    def get_float(self, section, option, default=0.0):
        return self.config.getfloat(section, option, fallback=default)

    def get_string(self, section, option, default=""):
        return self.config.get(section, option, fallback=default).strip()


    def get_list(self, section, option, default=None):
        """Comma-separated values, blanks dropped."""
        value_str = self.config.get(section, option, fallback=None)
        if value_str is None:
            return list(default or [])
        return [item.strip() for item in value_str.split(",") if item.strip()]
