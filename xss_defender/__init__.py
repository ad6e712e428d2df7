"""Input sanitization against cross-site scripting.

Typical Usage:
    from xss_defender import DefenseConfig, DefenseStrategy, defend
    defend("<b>hi</b><script>x</script>", DefenseConfig(strategy=DefenseStrategy.TRIM))
"""

from xss_defender.engines.defender_engine import DefenderEngine, defend
from xss_defender.engines.errors import (
    DefenseError,
    UnsupportedDefenseStrategyError,
    XssRiskDetectedError,
)
from xss_defender.engines.sanitizer_engine import SanitizerEngine
from xss_defender.engines.strategy import DefenseConfig, DefenseStrategy

__all__ = [
    "DefenderEngine",
    "DefenseConfig",
    "DefenseError",
    "DefenseStrategy",
    "SanitizerEngine",
    "UnsupportedDefenseStrategyError",
    "XssRiskDetectedError",
    "defend",
]
