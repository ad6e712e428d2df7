import pytest
from pydantic import ValidationError

from xss_defender import DefenseConfig, DefenseStrategy


def test_defaults():
    config = DefenseConfig()
    assert config.strategy is DefenseStrategy.TRIM
    assert config.escape_after_trim is False


@pytest.mark.parametrize("raw, expected", [
    ("trim", DefenseStrategy.TRIM),
    ("ESCAPE", DefenseStrategy.ESCAPE),
    (" Throw ", DefenseStrategy.THROW),
    (DefenseStrategy.THROW, DefenseStrategy.THROW),
])
def test_strategy_parsing(raw, expected):
    assert DefenseConfig(strategy=raw).strategy is expected


def test_unknown_strategy_is_kept_verbatim():
    config = DefenseConfig(strategy="ignore")
    assert config.strategy == "ignore"
    assert config.strategy_name == "ignore"


def test_strategy_name():
    assert DefenseConfig(strategy=DefenseStrategy.ESCAPE).strategy_name == "escape"


def test_config_is_immutable():
    config = DefenseConfig()
    with pytest.raises(ValidationError):
        config.strategy = DefenseStrategy.THROW
