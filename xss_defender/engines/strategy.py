"""Defense strategy definitions.

This module holds the closed set of strategies the defender can run and the
immutable configuration object that selects one of them. A `DefenseConfig` is
built once at startup (see `app.policy`) and only read afterwards.
"""

from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, field_validator


class DefenseStrategy(Enum):
    """How the defender reacts to risky input.

    - **TRIM**: strip everything outside the allow-list.
    - **ESCAPE**: entity-encode the markup-significant characters.
    - **THROW**: reject input that does not already satisfy the allow-list.
    """
    TRIM = "trim"
    ESCAPE = "escape"
    THROW = "throw"


class DefenseConfig(BaseModel):
    """Process-wide defender configuration.

    Attributes:
        strategy (DefenseStrategy | str): The active strategy. Strings are
            matched case-insensitively; unknown values are kept verbatim so
            the engine can report them as unsupported.
        escape_after_trim (bool): Escape the cleaned text as well. Only
            meaningful for `DefenseStrategy.TRIM`, ignored otherwise.
    """
    model_config = ConfigDict(frozen=True)

    strategy: Union[DefenseStrategy, str] = DefenseStrategy.TRIM
    escape_after_trim: bool = False

    @field_validator("strategy", mode="before")
    @classmethod
    def _parse_strategy(cls, value):
        if isinstance(value, str):
            normalized = value.strip().lower()
            try:
                return DefenseStrategy(normalized)
            except ValueError:
                return value
        return value

    @property
    def strategy_name(self) -> str:
        """Lower-case name of the strategy, raw value if unsupported."""
        if isinstance(self.strategy, DefenseStrategy):
            return self.strategy.value
        return str(self.strategy)
