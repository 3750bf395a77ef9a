"""Self-test battery checking that the provider returns the expected verdicts."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from .errors import ZetascanError
from .evaluator import is_match

logger = logging.getLogger(__name__)


class VerificationCase(NamedTuple):
    """A query with the match verdict the provider must give."""
    query: str
    expected: bool


VERIFICATION_CASES = (
    # Whitelisted / clean
    VerificationCase("okdomain.org", False),
    VerificationCase("127.9.9.4", False),
    # Blacklisted
    VerificationCase("baddomain.org", True),
    VerificationCase("127.9.9.1", True),
    VerificationCase("127.9.9.2", True),
    VerificationCase("127.9.9.3", True),
)


@dataclass
class VerificationResult:
    """Outcome of one verification query."""
    item: str
    match: bool
    expected: bool
    time_elapsed_ms: int
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.error is None and self.match == self.expected

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "item": self.item,
            "match": self.match,
            "expected": self.expected,
            "passed": self.passed,
            "time_elapsed_ms": self.time_elapsed_ms,
            "error": self.error,
        }


def run_verification(
    client,
    cases: Iterable[VerificationCase] = VERIFICATION_CASES,
    verbose: bool = False
) -> List[VerificationResult]:
    """
    Query every case and compare the verdict with the expected one.

    A failing query is recorded on its result and does not stop the run.

    Args:
        client: Anything with a ``query(item)`` method returning a NormalizedResult
        cases: Cases to run
        verbose: Log each query and response at INFO instead of DEBUG

    Returns:
        One VerificationResult per case, in order
    """
    level = logging.INFO if verbose else logging.DEBUG
    results = []

    for case in cases:
        logger.log(level, f"Testing {case.query} (expected match: {case.expected})")

        start_time = time.monotonic()
        match = False
        error = None

        try:
            response = client.query(case.query)
            match = is_match(response)
            logger.log(level, f"Response for {case.query}: {response.to_dict()}")
        except ZetascanError as e:
            error = str(e)
            logger.error(f"Verification query for {case.query} failed: {e}")

        time_elapsed_ms = int((time.monotonic() - start_time) * 1000)

        results.append(VerificationResult(
            item=case.query,
            match=match,
            expected=case.expected,
            time_elapsed_ms=time_elapsed_ms,
            error=error,
        ))

    return results


def summarize(results: List[VerificationResult], runtime_seconds: float = 0.0) -> Dict[str, Any]:
    """
    Get summary statistics for a verification run.

    Args:
        results: Results from run_verification
        runtime_seconds: Total runtime in seconds

    Returns:
        Summary dictionary
    """
    if not results:
        return {
            "total_runtime_seconds": round(runtime_seconds, 2),
            "cases_total": 0,
            "cases_passed": 0,
            "cases_failed": 0,
            "average_response_time_ms": 0,
            "min_response_time_ms": 0,
            "max_response_time_ms": 0,
        }

    response_times = [r.time_elapsed_ms for r in results]
    passed = sum(1 for r in results if r.passed)

    return {
        "total_runtime_seconds": round(runtime_seconds, 2),
        "cases_total": len(results),
        "cases_passed": passed,
        "cases_failed": len(results) - passed,
        "average_response_time_ms": round(sum(response_times) / len(response_times), 2),
        "min_response_time_ms": min(response_times),
        "max_response_time_ms": max(response_times),
    }
