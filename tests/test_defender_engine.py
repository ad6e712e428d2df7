import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from xss_defender import (
    DefenderEngine,
    DefenseConfig,
    DefenseError,
    DefenseStrategy,
    UnsupportedDefenseStrategyError,
    XssRiskDetectedError,
    defend,
)
from xss_defender.engines.defender_engine import WhitespaceOnlyEngine

XSS_TEXT = "<script>alert(document.cookies);</script>"

ALL_CONFIGS = [
    DefenseConfig(strategy=DefenseStrategy.TRIM),
    DefenseConfig(strategy=DefenseStrategy.TRIM, escape_after_trim=True),
    DefenseConfig(strategy=DefenseStrategy.ESCAPE),
    DefenseConfig(strategy=DefenseStrategy.THROW),
    DefenseConfig(strategy="ignore"),
]


@pytest.mark.parametrize("config", ALL_CONFIGS)
@pytest.mark.parametrize("text", [None, "", " ", "   \t\n  "])
def test_empty_input_returns_empty_string(config, text):
    assert defend(text, config) == ""


def test_trim_removes_script():
    config = DefenseConfig(strategy=DefenseStrategy.TRIM)
    assert defend(XSS_TEXT, config) == ""
    assert defend("XssDefenderTest" + XSS_TEXT, config) == "XssDefenderTest"


def test_trim_keeps_allowed_text():
    config = DefenseConfig(strategy=DefenseStrategy.TRIM)
    assert defend("  <b>bold</b> and <i>it</i>  ", config) == "<b>bold</b> and <i>it</i>"


def test_trim_then_escape():
    config = DefenseConfig(strategy=DefenseStrategy.TRIM, escape_after_trim=True)
    result = defend("<code>XssDefenderTest</code>" + XSS_TEXT, config)
    assert result == "&lt;code&gt;XssDefenderTest&lt;/code&gt;"


def test_trim_then_escape_applies_even_without_risk():
    config = DefenseConfig(strategy=DefenseStrategy.TRIM, escape_after_trim=True)
    assert defend("<b>bold</b>", config) == "&lt;b&gt;bold&lt;/b&gt;"


def test_trim_logs_detection(caplog):
    config = DefenseConfig(strategy=DefenseStrategy.TRIM)
    with caplog.at_level(logging.WARNING, logger="xss_defender.defender"):
        defend("ok" + XSS_TEXT, config)
    assert "XSS risk detected" in caplog.text


def test_escape():
    config = DefenseConfig(strategy=DefenseStrategy.ESCAPE)
    result = defend(XSS_TEXT, config)
    assert result == "&lt;script&gt;alert(document.cookies);&lt;/script&gt;"
    assert "<" not in result and ">" not in result


def test_escape_ignores_escape_after_trim():
    config = DefenseConfig(strategy=DefenseStrategy.ESCAPE, escape_after_trim=True)
    assert defend("a & b", config) == "a &amp; b"


def test_throw_rejects_risky_input():
    config = DefenseConfig(strategy=DefenseStrategy.THROW)
    with pytest.raises(XssRiskDetectedError) as exc_info:
        defend("  " + XSS_TEXT, config)
    assert exc_info.value.offending_text == "  " + XSS_TEXT
    assert isinstance(exc_info.value, DefenseError)
    assert isinstance(exc_info.value, ValueError)


def test_throw_returns_clean_input_unchanged():
    config = DefenseConfig(strategy=DefenseStrategy.THROW, escape_after_trim=True)
    assert defend("XssDefenderTest", config) == "XssDefenderTest"
    assert defend(" <b>bold</b> ", config) == "<b>bold</b>"


def test_unsupported_strategy():
    config = DefenseConfig(strategy="ignore")
    with pytest.raises(UnsupportedDefenseStrategyError) as exc_info:
        defend("ignore", config)
    assert exc_info.value.value == "ignore"
    assert "ignore" in str(exc_info.value)


def test_payload_logging_is_opt_in(caplog):
    config = DefenseConfig(strategy=DefenseStrategy.ESCAPE)
    with caplog.at_level(logging.DEBUG, logger="xss_defender.defender"):
        DefenderEngine(config).defend("<b>")
        assert caplog.records == []
        DefenderEngine(config, log_payloads=True).defend("<b>")
    assert "&lt;b&gt;" in caplog.text


def test_defend_payload_walks_nested_structures():
    engine = DefenderEngine(DefenseConfig(strategy=DefenseStrategy.TRIM))
    data = {
        "name": " Alice<script>x</script> ",
        "age": 30,
        "active": True,
        "note": None,
        "tags": ["<b>ok</b>", "<img src=x onerror=y>", 7],
        "profile": {"bio": "<div>hi</div>", "<key>": "v"},
    }
    result = engine.defend_payload(data)
    assert result == {
        "name": "Alice",
        "age": 30,
        "active": True,
        "note": None,
        "tags": ["<b>ok</b>", "", 7],
        "profile": {"bio": "hi", "<key>": "v"},
    }
    assert data["name"] == " Alice<script>x</script> "


def test_defend_payload_has_no_partial_results():
    engine = DefenderEngine(DefenseConfig(strategy=DefenseStrategy.THROW))
    with pytest.raises(XssRiskDetectedError):
        engine.defend_payload({"ok": "fine", "bad": ["x", XSS_TEXT]})


def test_defend_form():
    engine = DefenderEngine(DefenseConfig(strategy=DefenseStrategy.ESCAPE))
    upload = object()
    result = engine.defend_form({
        "title": "<i>t</i>",
        "empty": None,
        "multi": [" a ", "<b>"],
        "file": upload,
    })
    assert result == {
        "title": "&lt;i&gt;t&lt;/i&gt;",
        "empty": "",
        "multi": ["a", "&lt;b&gt;"],
        "file": upload,
    }


def test_whitespace_only_engine():
    engine = WhitespaceOnlyEngine()
    assert engine.defend(None) == ""
    assert engine.defend("  " + XSS_TEXT + "  ") == XSS_TEXT
    assert engine.defend_payload({"a": [" <b> "]}) == {"a": ["<b>"]}


@pytest.mark.parametrize("space", ["\xa0", "\u2007", "\u202f"])
def test_non_breaking_spaces_are_not_trimmed(space):
    config = DefenseConfig(strategy=DefenseStrategy.ESCAPE)
    assert defend(space, config) == space
    assert defend(" a" + space + " ", config) == "a" + space
    assert WhitespaceOnlyEngine().defend(space + "x") == space + "x"


def test_unicode_separators_are_trimmed():
    config = DefenseConfig(strategy=DefenseStrategy.ESCAPE)
    assert defend("\u2003\u3000x\u2028\x1f", config) == "x"
    assert defend("\u1680\u3000", config) == ""


@pytest.mark.parametrize("text", ["Tom & Jerry", "1 > 0", "<br/>"])
def test_throw_rejects_text_that_clean_would_reserialize(text):
    config = DefenseConfig(strategy=DefenseStrategy.THROW)
    with pytest.raises(XssRiskDetectedError) as exc_info:
        defend(text, config)
    assert exc_info.value.offending_text == text


def test_trim_is_safe_under_concurrent_callers():
    config = DefenseConfig(strategy=DefenseStrategy.TRIM)
    inputs = ["<b>a</b>" * 30 + XSS_TEXT, "<p>" + "b " * 40 + "</p><div>c</div>", "x & y"]
    expected = {text: defend(text, config) for text in inputs}

    def run(worker):
        return [defend(text, config) == expected[text] for text in inputs * 50]

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(run, range(8)))

    assert all(all(matches) for matches in results)
