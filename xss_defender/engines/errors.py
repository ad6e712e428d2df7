"""Exceptions raised by the defense engine."""


class DefenseError(Exception):
    """Base exception for all defender errors."""
    pass


class XssRiskDetectedError(DefenseError, ValueError):
    """Raised under the THROW strategy when input violates the allow-list.

    Callers are expected to turn this into a rejected-input (4xx) response.

    Attributes:
        offending_text (str): The input that was rejected.
    """
    def __init__(self, offending_text: str):
        super().__init__(f"XSS risk detected in input: {offending_text!r}")
        self.offending_text = offending_text


class UnsupportedDefenseStrategyError(DefenseError, NotImplementedError):
    """Raised when the configured strategy is not one the engine knows.

    This is a configuration defect and should surface at startup rather than
    be handled per request.

    Attributes:
        value (str): The unsupported strategy value.
    """
    def __init__(self, value: str):
        super().__init__(f"Unsupported XSS defense strategy: {value}")
        self.value = value
