"""
Soft assertions: checks that record failures instead of stopping the test.
"""

from typing import Any, List


class SoftAssertions:
    """
    Collects failed checks and reports them together

    Every check returns whether it passed. Nothing is raised until
    assertAll(), which fails with all recorded messages at once.

    Example:
        soft = SoftAssertions()
        soft.assertNotNone(body.get("current"), "Current weather data should be present")
        soft.assertIsNone(body.get("forecast"), "Forecast data should not be present")
        soft.assertAll()
    """

    def __init__(self):
        self.failures: List[str] = []

    def _check(self, passed: bool, message: str, detail: str) -> bool:
        if not passed:
            self.failures.append(f"{message} ({detail})" if message else detail)
        return passed

    def assertTrue(self, condition: Any, message: str = "") -> bool:
        return self._check(bool(condition), message, f"expected true, got {condition!r}")

    def assertEqual(self, actual: Any, expected: Any, message: str = "") -> bool:
        return self._check(actual == expected, message, f"expected {expected!r}, got {actual!r}")

    def assertNotNone(self, value: Any, message: str = "") -> bool:
        return self._check(value is not None, message, "expected a value, got None")

    def assertIsNone(self, value: Any, message: str = "") -> bool:
        return self._check(value is None, message, f"expected None, got {type(value).__name__}")

    def assertAll(self) -> None:
        """Raise AssertionError listing every failed check, if any."""
        if self.failures:
            lines = "\n".join(f"  {i}. {failure}" for i, failure in enumerate(self.failures, start=1))
            raise AssertionError(f"{len(self.failures)} soft assertion(s) failed:\n{lines}")
