from __future__ import annotations

from flask import Flask, jsonify

from .. import __version__
from ..common.datetime_utils import utc_now
from ..infrastructure.circuit_breaker import get_circuit_breaker_stats


def register(app: Flask) -> None:
    def health():
        return jsonify(
            {
                "status": "ok",
                "version": __version__,
                "timestamp": utc_now().isoformat(),
                "circuitBreakers": get_circuit_breaker_stats(),
            }
        )

    app.add_url_rule("/health", endpoint="health", view_func=health, methods=["GET"])
    app.add_url_rule("/v1/health", endpoint="v1_health", view_func=health, methods=["GET"])
