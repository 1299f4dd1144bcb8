from __future__ import annotations

from ..domain.models import Alternative, DependencySpec


ALTERNATIVES: dict[str, tuple[Alternative, ...]] = {
    "moment": (
        Alternative("date-fns", "Lightweight alternative to Moment.js"),
        Alternative("dayjs", "Fast 2kB alternative to Moment.js with the same API"),
    ),
    "lodash": (
        Alternative("ramda", "Functional programming library"),
        Alternative("lodash-es", "ES modules version of Lodash"),
    ),
    "jquery": (
        Alternative("cash-dom", "Lightweight jQuery alternative"),
        Alternative("umbrella", "Tiny jQuery alternative"),
    ),
    "express": (
        Alternative("fastify", "Fast and low overhead web framework"),
        Alternative("koa", "Next generation web framework by Express team"),
    ),
    "request": (
        Alternative("axios", "Promise based HTTP client"),
        Alternative("got", "Human-friendly HTTP request library"),
    ),
}


def suggest_alternatives(deps: list[DependencySpec]) -> dict[str, tuple[Alternative, ...]]:
    """Map known packages to suggested replacements; unknown names are omitted."""
    return {dep.name: ALTERNATIVES[dep.name] for dep in deps if dep.name in ALTERNATIVES}
