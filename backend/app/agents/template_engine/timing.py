"""Latency lines for template registration and generation backend calls.

Printed as ``[TIMING] <scope>: <what> <n>ms``, e.g.
``[TIMING] registry:motion-to-sever: federal (90 variants) 38ms``.
"""

import time
from contextlib import asynccontextmanager, contextmanager
from typing import Dict, List

from ...schemas.template_schema import CourtType


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


@contextmanager
def sync_timer(scope: str, action: str):
    start = time.perf_counter()
    try:
        yield
    finally:
        print(f"[TIMING] {scope}: {action} {_elapsed_ms(start):.0f}ms")


@asynccontextmanager
async def async_timer(scope: str, action: str):
    """Times one awaited backend call, including its retry."""
    start = time.perf_counter()
    try:
        yield
    finally:
        print(f"[TIMING] {scope}: {action} {_elapsed_ms(start):.0f}ms")


class RegistrationTimer:
    """
    Build time and variant count per court type for one template.

    Usage:
        timer = RegistrationTimer("motion-for-mistrial")
        with timer.court(CourtType.STATE) as built:
            for code in codes:
                built.append(code)
        timer.summary()
    """

    def __init__(self, template_id: str):
        self.scope = f"registry:{template_id}"
        self.counts: Dict[CourtType, int] = {}
        self._start = time.perf_counter()

    @contextmanager
    def court(self, court_type: CourtType):
        built: List[str] = []
        start = time.perf_counter()
        try:
            yield built
        finally:
            self.counts[court_type] = len(built)
            print(
                f"[TIMING] {self.scope}: {court_type.value} "
                f"({len(built)} variants) {_elapsed_ms(start):.0f}ms"
            )

    def summary(self) -> float:
        total_ms = _elapsed_ms(self._start)
        print(f"[TIMING] {self.scope}: {sum(self.counts.values())} variants {total_ms:.0f}ms")
        return total_ms
