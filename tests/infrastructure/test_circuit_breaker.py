from __future__ import annotations

import uuid

import pybreaker
import pytest

from erp_system.infrastructure.circuit_breaker import (
    create_circuit_breaker,
    get_circuit_breaker,
    get_circuit_breaker_stats,
    reset_all_circuit_breakers,
    with_circuit_breaker,
)


def boom():
    raise ConnectionError("down")


def unique_name():
    return f"test-{uuid.uuid4().hex[:8]}"


def test_registry_returns_same_breaker():
    name = unique_name()
    breaker = create_circuit_breaker(name, "redis")
    assert create_circuit_breaker(name, "database") is breaker
    assert get_circuit_breaker(name) is breaker
    assert breaker.fail_max == 3
    assert get_circuit_breaker_stats()[name]["failMax"] == 3


def test_breaker_opens_after_repeated_failures_and_resets():
    name = unique_name()
    breaker = create_circuit_breaker(name, "redis")
    for _ in range(3):
        with pytest.raises((ConnectionError, pybreaker.CircuitBreakerError)):
            breaker.call(boom)
    assert breaker.current_state == pybreaker.STATE_OPEN
    with pytest.raises(pybreaker.CircuitBreakerError):
        with_circuit_breaker(name, "redis", lambda: "ok")

    reset_all_circuit_breakers()
    assert with_circuit_breaker(name, "redis", lambda: "ok") == "ok"


def test_excluded_errors_do_not_count():
    breaker = create_circuit_breaker(unique_name(), "email", exclude=[KeyError])

    def missing():
        raise KeyError("nope")

    for _ in range(5):
        with pytest.raises(KeyError):
            breaker.call(missing)
    assert breaker.fail_counter == 0
    assert breaker.current_state == pybreaker.STATE_CLOSED
