"""XSS Defense Engine.

This module turns a `DefenseConfig` into behaviour. `DefenderEngine.defend`
takes one untrusted string and either returns a safe string or raises a
`DefenseError`; the payload helpers apply it to every string value of a
decoded JSON body or a submitted form.

Strategy Summary:
    - **TRIM**: allowlist clean, optionally followed by an escape.
    - **ESCAPE**: entity-encode, never raises.
    - **THROW**: reject anything the allowlist would change.

The engine holds no per-call state and can be shared across requests.
"""

import logging
from typing import Any, Mapping, Optional

from xss_defender.engines.errors import UnsupportedDefenseStrategyError, XssRiskDetectedError
from xss_defender.engines.sanitizer_engine import SanitizerEngine, sanitizer_engine
from xss_defender.engines.strategy import DefenseConfig, DefenseStrategy

logger = logging.getLogger("xss_defender.defender")

# Surrounding whitespace that is trimmed: ASCII controls, Unicode space, line and
# paragraph separators. Non-breaking spaces (U+00A0, U+2007, U+202F) are content.
WHITESPACE = (
    "\t\n\x0b\x0c\r\x1c\x1d\x1e\x1f "
    "\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2008\u2009\u200a"
    "\u2028\u2029\u205f\u3000"
)


class DefenderEngine:
    """Applies the configured defense strategy to untrusted text."""

    def __init__(
        self,
        config: DefenseConfig,
        sanitizer: Optional[SanitizerEngine] = None,
        log_payloads: bool = False,
    ):
        """Initializes the engine.

        Args:
            config (DefenseConfig): The process-wide defender configuration.
            sanitizer (SanitizerEngine, optional): The allowlist primitives.
                Defaults to the shared module instance.
            log_payloads (bool): Log input and output of every call at DEBUG.
                Off by default since it writes untrusted text to the logs.
        """
        self.config = config
        self.sanitizer = sanitizer or sanitizer_engine
        self.log_payloads = log_payloads

    def defend(self, text: Optional[str]) -> str:
        """Sanitizes a single untrusted value.

        Args:
            text (str, optional): The raw input. `None` is accepted.

        Returns:
            str: The safe text. Empty or whitespace-only input yields "".

        Raises:
            XssRiskDetectedError: Under THROW, if the text violates the allowlist.
            UnsupportedDefenseStrategyError: If the configured strategy is unknown.
        """
        if text is None:
            return ""

        trimmed = text.strip(WHITESPACE)
        if not trimmed:
            return ""

        strategy = self.config.strategy

        if strategy is DefenseStrategy.TRIM:
            result = self._trim(trimmed)
        elif strategy is DefenseStrategy.ESCAPE:
            result = self.sanitizer.escape(trimmed)
        elif strategy is DefenseStrategy.THROW:
            if not self.sanitizer.is_clean(trimmed):
                logger.warning(f"⛔ XSS risk detected, rejecting input: {text!r}")
                raise XssRiskDetectedError(text)
            result = trimmed
        else:
            raise UnsupportedDefenseStrategyError(self.config.strategy_name)

        if self.log_payloads:
            logger.debug(f"Defended input ({self.config.strategy_name}): {text!r} -> {result!r}")

        return result

    def _trim(self, text: str) -> str:
        cleaned = self.sanitizer.clean(text)
        if cleaned != text:
            logger.warning(f"⚠️ XSS risk detected and trimmed: {text!r} -> {cleaned!r}")

        # Escapes even when clean() changed nothing
        if self.config.escape_after_trim:
            return self.sanitizer.escape(cleaned)
        return cleaned

    def defend_payload(self, data: Any) -> Any:
        """Recursively defends string values within a decoded JSON document.

        Dictionaries and lists are traversed; keys and non-string scalars
        (numbers, booleans, None) are returned as they are.

        Args:
            data (Any): A decoded JSON value.

        Returns:
            Any: A new structure with defended string values. The input is
            left unmodified.

        Raises:
            XssRiskDetectedError: If any string value is rejected. No partially
                defended structure is returned.
        """
        if isinstance(data, str):
            return self.defend(data)
        if isinstance(data, dict):
            return {key: self.defend_payload(value) for key, value in data.items()}
        if isinstance(data, list):
            return [self.defend_payload(item) for item in data]
        return data

    def defend_form(self, fields: Mapping[str, Any]) -> dict:
        """Defends every value of a submitted form.

        Multi-valued fields (lists) are defended per value. `None` values
        become "" like any other empty input. Non-text values such as
        uploaded files are passed through.
        """
        defended = {}
        for name, value in fields.items():
            if isinstance(value, (list, tuple)):
                defended[name] = [self._defend_field(item) for item in value]
            else:
                defended[name] = self._defend_field(value)
        return defended

    def _defend_field(self, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return self.defend(value)
        return value


class WhitespaceOnlyEngine(DefenderEngine):
    """Stand-in used when the defender is disabled or a route opts out.

    Values are only stripped of surrounding whitespace; nothing is cleaned,
    escaped or rejected.
    """

    def __init__(self):
        super().__init__(DefenseConfig())

    def defend(self, text: Optional[str]) -> str:
        if text is None:
            return ""
        return text.strip(WHITESPACE)


def defend(text: Optional[str], config: DefenseConfig) -> str:
    """Sanitizes `text` according to `config`.

    Convenience entry point for callers that hold a config but no engine.
    See `DefenderEngine.defend`.
    """
    return DefenderEngine(config).defend(text)
