"""
Unit tests for retry module
"""
import pytest

from verifier.errors import (
    ExhaustedRetries,
    MalformedResponse,
    PermanentFetchError,
    RangeNotFound,
    TransientFetchError,
)
from verifier.retry import (
    FailureKind,
    backoff_delay,
    classify_failure,
    classify_status,
    retry_with_backoff,
)


class Flaky:
    """Fails with the given errors, then returns `value`."""

    def __init__(self, errors, value="ok"):
        self.errors = list(errors)
        self.value = value
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.value


def transient(status=503):
    return TransientFetchError(status, f"HTTP {status}")


class TestClassification:
    """Test status and exception classification"""

    @pytest.mark.parametrize("status", [408, 429, 500, 502, 503, 504, 599])
    def test_retryable_statuses(self, status):
        assert classify_status(status) is FailureKind.RETRYABLE

    @pytest.mark.parametrize("status", [401, 403, 404, 405])
    def test_permanent_statuses(self, status):
        assert classify_status(status) is FailureKind.PERMANENT

    def test_bad_range_is_empty_result(self):
        body = '{"error": {"code": 400, "message": "Unable to parse range: Sheet9!A2:G1001"}}'
        assert classify_status(400, body) is FailureKind.EMPTY_RESULT

    @pytest.mark.parametrize("body", [
        '{"error": {"code": 400, "message": "API key not valid. Please pass a valid API key.", '
        '"status": "INVALID_ARGUMENT"}}',
        "",
    ])
    def test_other_400_is_permanent(self, body):
        assert classify_status(400, body) is FailureKind.PERMANENT

    def test_exception_kinds(self):
        assert classify_failure(transient()) is FailureKind.RETRYABLE
        assert classify_failure(PermanentFetchError(404, "x")) is FailureKind.PERMANENT
        assert classify_failure(RangeNotFound(400, "x")) is FailureKind.EMPTY_RESULT
        assert classify_failure(MalformedResponse("x")) is FailureKind.PERMANENT
        assert classify_failure(KeyError("bug")) is FailureKind.PERMANENT


class TestRetryWithBackoff:
    """Test retry_with_backoff"""

    def test_success_first_try(self, sleeps):
        op = Flaky([])
        assert retry_with_backoff(op, max_attempts=3, sleep=sleeps) == "ok"
        assert op.calls == 1
        assert sleeps.calls == []

    def test_success_on_attempt_k(self, sleeps):
        op = Flaky([transient(), transient()], value=42)
        result = retry_with_backoff(op, max_attempts=3, sleep=sleeps, jitter=lambda: 0)
        assert result == 42
        assert op.calls == 3
        assert len(sleeps.calls) == 2

    def test_always_failing_calls_exactly_max_attempts(self, sleeps):
        errors = [transient(500), transient(502), transient(503)]
        last = errors[-1]
        op = Flaky(errors)

        with pytest.raises(ExhaustedRetries) as exc_info:
            retry_with_backoff(op, max_attempts=3, sleep=sleeps, jitter=lambda: 0)

        assert op.calls == 3
        assert exc_info.value.last_error is last
        assert exc_info.value.__cause__ is last
        assert exc_info.value.attempts == 3
        assert exc_info.value.status == 503
        # No wait after the final attempt
        assert len(sleeps.calls) == 2

    def test_exponential_delays_with_jitter(self, sleeps):
        op = Flaky([transient()] * 4)
        with pytest.raises(ExhaustedRetries):
            retry_with_backoff(
                op, max_attempts=4, base_delay=1.0, sleep=sleeps, jitter=lambda: 0.25
            )
        assert sleeps.calls == [1.25, 2.25, 4.25]

    def test_default_jitter_is_bounded(self, sleeps):
        op = Flaky([transient()] * 2)
        retry_with_backoff(op, max_attempts=3, base_delay=0.5, sleep=sleeps)
        first, second = sleeps.calls
        assert 0.5 <= first <= 1.5
        assert 1.0 <= second <= 2.0

    def test_permanent_error_not_retried(self, sleeps):
        error = PermanentFetchError(403, "forbidden")
        op = Flaky([error])
        with pytest.raises(PermanentFetchError) as exc_info:
            retry_with_backoff(op, max_attempts=5, sleep=sleeps)
        assert exc_info.value is error
        assert op.calls == 1
        assert sleeps.calls == []

    def test_range_not_found_propagates_unchanged(self, sleeps):
        op = Flaky([RangeNotFound(400, "bad range")])
        with pytest.raises(RangeNotFound):
            retry_with_backoff(op, max_attempts=3, sleep=sleeps)
        assert op.calls == 1

    def test_single_attempt(self, sleeps):
        op = Flaky([transient()])
        with pytest.raises(ExhaustedRetries):
            retry_with_backoff(op, max_attempts=1, sleep=sleeps)
        assert op.calls == 1
        assert sleeps.calls == []

    def test_invalid_max_attempts(self):
        with pytest.raises(ValueError):
            retry_with_backoff(lambda: None, max_attempts=0)

    def test_backoff_delay_formula(self):
        assert backoff_delay(1, 1.0, lambda: 0) == 1.0
        assert backoff_delay(2, 1.0, lambda: 0) == 2.0
        assert backoff_delay(3, 1.0, lambda: 0.5) == 4.5
