"""
Semantic test: engine configuration is validated at the boundary.

Invariant:
Unknown keys, an empty scope or a scope with surrounding whitespace are
rejected. Optional observability settings default to off.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from procurement_engine.core.config.engine_config import EngineConfig


def test_minimal_config_defaults() -> None:
    config = EngineConfig.from_json_obj({"scope": "site-lyon"})

    assert config.logger_name == "procurement_engine.decisions"
    assert config.event_log_path is None
    assert config.prometheus is None
    assert config.extra == {}


def test_prometheus_defaults_when_section_present() -> None:
    config = EngineConfig.from_json_obj({"scope": "site-lyon", "prometheus": {}})

    assert config.prometheus is not None
    assert config.prometheus.enabled is True
    assert config.prometheus.job == "procurement_engine"


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"scope": ""},
        {"scope": " site "},
        {"scope": "site", "unexpected": 1},
        {"scope": "site", "prometheus": {"jobname": "x"}},
        {"scope": "site", "event_log_path": ""},
    ],
)
def test_invalid_configs_are_rejected(payload) -> None:
    with pytest.raises(ValidationError):
        EngineConfig.from_json_obj(payload)


def test_extra_is_free_form() -> None:
    config = EngineConfig.from_json_obj({"scope": "site", "extra": {"tenant": "acme", "n": 3}})

    assert config.extra == {"tenant": "acme", "n": 3}
