"""Defender Policy Loader.

This module loads the operational policy of the XSS defender from an external
YAML file (`xss-defender.yaml`). Unlike environment settings, the policy is
nested and can be re-read at runtime with `reload()`.

Expected layout:

    defender:
      enabled: true
      strategy: trim            # trim | escape | throw
      escape_after_trim: false
      log_payloads: false

Typical Usage:
    from xss_defender.app.policy import policy
    if policy.defender_enabled:
        ...
"""

import logging
import os

import yaml

from xss_defender.app.config import settings
from xss_defender.engines.strategy import DefenseConfig

logger = logging.getLogger("xss_defender.policy")

_TRUE_VALUES = {"true", "yes", "on", "1"}
_FALSE_VALUES = {"false", "no", "off", "0"}


class DefenderPolicy:
    """A wrapper around the YAML policy file enforcing default behaviors.

    Missing keys, a missing file or an unreadable file all fall back to the
    defaults: defender enabled, TRIM strategy, no escape after trim.
    """

    def __init__(self, config_path: str = "xss-defender.yaml"):
        """Initializes the policy.

        Args:
            config_path (str): Path to the policy file.
        """
        self.config_path = config_path
        self._config = {}
        self.reload()

    def reload(self):
        """Loads or reloads the policy from disk.

        If the file is missing or invalid, `_default_config()` is used and a
        warning is logged instead of failing startup.
        """
        if not os.path.exists(self.config_path):
            logger.warning(f"⚠️ Policy file not found at {self.config_path}. Using Defaults.")
            self._config = self._default_config()
            return

        try:
            with open(self.config_path, "r") as f:
                loaded = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.critical(f"❌ Failed to load defender policy: {e}")
            self._config = self._default_config()
            return

        if not isinstance(loaded, dict):
            logger.warning(f"⚠️ Policy file {self.config_path} is empty or not a mapping. Using Defaults.")
            self._config = self._default_config()
            return

        self._config = loaded
        logger.info(f"✅ Defender Policy loaded from {self.config_path}")

    def _default_config(self):
        """Returns the hardcoded 'Safe Mode' policy."""
        return {
            "defender": {
                "enabled": True,
                "strategy": "trim",
                "escape_after_trim": False,
                "log_payloads": False,
            }
        }

    def _section(self) -> dict:
        return self._config.get("defender") or {}

    def _flag(self, key: str, default: bool) -> bool:
        """Reads a boolean toggle, accepting quoted "true"/"false" as well.

        Any other value is ignored with a warning and the default applies.
        """
        value = self._section().get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _TRUE_VALUES | _FALSE_VALUES:
            return value.strip().lower() in _TRUE_VALUES
        logger.warning(f"⚠️ Invalid value {value!r} for defender.{key}. Using default: {default}")
        return default

    @property
    def defender_enabled(self) -> bool:
        """Feature flag: Enable/Disable the XSS defender globally."""
        return self._flag("enabled", True)

    @property
    def strategy(self) -> str:
        """The raw strategy name as written in the policy."""
        return str(self._section().get("strategy", "trim"))

    @property
    def escape_after_trim(self) -> bool:
        """Escape the cleaned text as well (TRIM only)."""
        return self._flag("escape_after_trim", False)

    @property
    def log_payloads(self) -> bool:
        """Log every input and output at DEBUG level."""
        return self._flag("log_payloads", False)

    @property
    def defense_config(self) -> DefenseConfig:
        """Builds the immutable engine configuration from the policy."""
        return DefenseConfig(strategy=self.strategy, escape_after_trim=self.escape_after_trim)


policy = DefenderPolicy(settings.POLICY_PATH)
