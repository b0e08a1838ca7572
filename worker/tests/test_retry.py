import asyncio

import pytest

from leadfinder.core.errors import ErrorKind, ParseError
from leadfinder.core.retry import with_retry


class FlakyOperation:
    def __init__(self, failures, result="ok"):
        self.failures = list(failures)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.result


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def test_quota_errors_are_retried_until_success():
    operation = FlakyOperation([RuntimeError("429 quota"), RuntimeError("RESOURCE_EXHAUSTED")])
    sleep = RecordingSleep()

    result = asyncio.run(with_retry(operation, max_attempts=3, initial_delay=1.5, sleep=sleep))

    assert result == "ok"
    assert operation.calls == 3
    assert sleep.delays == [1.5, 3.0]


def test_non_retryable_error_propagates_immediately():
    error = RuntimeError("400 INVALID_ARGUMENT")
    operation = FlakyOperation([error])
    sleep = RecordingSleep()

    with pytest.raises(RuntimeError) as excinfo:
        asyncio.run(with_retry(operation, max_attempts=5, initial_delay=1, sleep=sleep))

    assert excinfo.value is error
    assert operation.calls == 1
    assert sleep.delays == []


def test_parse_errors_are_not_retried():
    operation = FlakyOperation([ParseError(raw_text="x")])

    with pytest.raises(ParseError):
        asyncio.run(with_retry(operation, max_attempts=3, initial_delay=0, sleep=RecordingSleep()))
    assert operation.calls == 1


def test_exhausted_attempts_raise_last_error_unchanged():
    errors = [RuntimeError("timeout 1"), RuntimeError("timeout 2"), RuntimeError("timeout 3")]
    operation = FlakyOperation(list(errors))
    sleep = RecordingSleep()

    with pytest.raises(RuntimeError) as excinfo:
        asyncio.run(with_retry(operation, max_attempts=3, initial_delay=2, sleep=sleep))

    assert excinfo.value is errors[2]
    assert operation.calls == 3
    assert sleep.delays == [2, 4]


def test_jitter_only_adds_delay(monkeypatch):
    monkeypatch.setattr("leadfinder.core.retry.random.uniform", lambda a, b: 0.25)
    operation = FlakyOperation([RuntimeError("quota")])
    sleep = RecordingSleep()

    asyncio.run(with_retry(operation, max_attempts=2, initial_delay=1, jitter=0.5, sleep=sleep))

    assert sleep.delays == [1.25]


def test_custom_classifier_is_used():
    operation = FlakyOperation([RuntimeError("quota")])

    with pytest.raises(RuntimeError):
        asyncio.run(
            with_retry(operation, max_attempts=3, classify=lambda exc: ErrorKind.PARSE, sleep=RecordingSleep())
        )
    assert operation.calls == 1


def test_rejects_zero_attempts():
    with pytest.raises(ValueError):
        asyncio.run(with_retry(FlakyOperation([]), max_attempts=0))
