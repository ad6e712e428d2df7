"""Global service registry and initialization manager.

This module acts as a singleton container for the defender engines. It reads
the global `policy` to decide how the `DefenderEngine` is configured.

Architecture Note:
    - The `SanitizerEngine` is always built; its allowlist is fixed.
    - The `DefenderEngine` is built even when the policy disables the
      defender, so that re-enabling it only takes a policy reload. Whether
      it applies is decided per request (see `app.integration`).
"""

import logging

from xss_defender.app.policy import policy
from xss_defender.engines.defender_engine import DefenderEngine
from xss_defender.engines.errors import UnsupportedDefenseStrategyError
from xss_defender.engines.sanitizer_engine import SanitizerEngine
from xss_defender.engines.strategy import DefenseStrategy

logger = logging.getLogger("xss_defender.services")

# Global Instances
# These are populated by initialize_services() at startup.
sanitizer_service = None
defender_service = None


def initialize_services():
    """Bootstraps the engines based on the active defender policy.

    Raises:
        UnsupportedDefenseStrategyError: If the policy names a strategy the
            engine does not know. Startup is aborted rather than failing on
            the first request.
    """
    global sanitizer_service, defender_service

    try:
        logger.info("⚡ Initializing Defender Services...")

        sanitizer_service = SanitizerEngine()

        config = policy.defense_config
        if not isinstance(config.strategy, DefenseStrategy):
            raise UnsupportedDefenseStrategyError(config.strategy_name)

        defender_service = DefenderEngine(
            config,
            sanitizer=sanitizer_service,
            log_payloads=policy.log_payloads,
        )
        logger.info(
            f"✅ DefenderEngine: Ready (strategy={config.strategy_name}, "
            f"escape_after_trim={config.escape_after_trim})"
        )

        if not policy.defender_enabled:
            logger.warning("⚪ DefenderEngine: Disabled by Policy, input is only whitespace-trimmed")

    except Exception as e:
        logger.critical(f"❌ Failed to initialize services: {e}")
        raise
