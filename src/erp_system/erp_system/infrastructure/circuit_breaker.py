"""Circuit breakers around external dependencies (pybreaker)."""
from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Optional

import pybreaker

from ..logging_config import get_logger

logger = get_logger(__name__)

BREAKER_CONFIGS: Dict[str, Dict[str, int]] = {
    "database": {"fail_max": 5, "reset_timeout": 30},
    "redis": {"fail_max": 3, "reset_timeout": 10},
    "email": {"fail_max": 3, "reset_timeout": 60},
    "storage": {"fail_max": 5, "reset_timeout": 30},
    "external": {"fail_max": 5, "reset_timeout": 30},
}

_registry: Dict[str, pybreaker.CircuitBreaker] = {}
_lock = threading.Lock()


class LoggingListener(pybreaker.CircuitBreakerListener):
    def state_change(self, cb, old_state, new_state):
        new_name = getattr(new_state, "name", str(new_state))
        old_name = getattr(old_state, "name", str(old_state))
        if new_name == pybreaker.STATE_OPEN:
            logger.error("Circuit breaker '%s' opened (was %s)", cb.name, old_name)
        elif new_name == pybreaker.STATE_HALF_OPEN:
            logger.warning("Circuit breaker '%s' half-open, probing", cb.name)
        else:
            logger.info("Circuit breaker '%s' closed", cb.name)

    def failure(self, cb, exc):
        logger.warning("Circuit breaker '%s' recorded failure: %s", cb.name, exc)


def create_circuit_breaker(
    name: str, kind: str = "external", *, exclude: Optional[list] = None
) -> pybreaker.CircuitBreaker:
    """Return the breaker registered under name, creating it from the kind's config.

    Exceptions listed in exclude (business errors such as 404s) do not count as failures.
    """
    with _lock:
        breaker = _registry.get(name)
        if breaker is not None:
            return breaker
        config = BREAKER_CONFIGS.get(kind, BREAKER_CONFIGS["external"])
        breaker = pybreaker.CircuitBreaker(
            fail_max=config["fail_max"],
            reset_timeout=config["reset_timeout"],
            listeners=[LoggingListener()],
            exclude=exclude or [],
            name=name,
        )
        _registry[name] = breaker
        return breaker


def get_circuit_breaker(name: str) -> Optional[pybreaker.CircuitBreaker]:
    return _registry.get(name)


def get_circuit_breaker_stats() -> Dict[str, Dict[str, Any]]:
    return {
        name: {
            "state": breaker.current_state,
            "failCounter": breaker.fail_counter,
            "failMax": breaker.fail_max,
            "resetTimeout": breaker.reset_timeout,
        }
        for name, breaker in _registry.items()
    }


def reset_all_circuit_breakers() -> None:
    for breaker in _registry.values():
        breaker.close()


def with_circuit_breaker(name: str, kind: str, fn: Callable[..., Any], *args, **kwargs) -> Any:
    return create_circuit_breaker(name, kind).call(fn, *args, **kwargs)
