"""
Tests for the bounded retry decorator.
"""
import pytest

from adstudio.errors import AuthorizationError, CollaboratorError
from adstudio.services import linear_backoff, retry


class Flaky:
    """Fails a given number of times before succeeding."""

    def __init__(self, failures, error=None):
        self.failures = failures
        self.error = error or CollaboratorError("test", "temporary failure")
        self.calls = 0

    def fetch(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


class TestRetry:
    """Tests for retry()."""

    def test_linear_backoff(self):
        """Delays grow by one step per failed attempt."""
        delay = linear_backoff(1.0)
        assert [delay(n) for n in (1, 2, 3)] == [1.0, 2.0, 3.0]

    def test_recovers(self):
        """A call that eventually succeeds returns its result."""
        sleeps = []
        flaky = Flaky(2)
        result = retry(max_attempts=3, backoff=linear_backoff(1.0), sleep=sleeps.append)(flaky.fetch)()

        assert result == "ok"
        assert flaky.calls == 3
        assert sleeps == [1.0, 2.0]

    def test_last_error_propagates(self):
        """After the last attempt the original exception is raised."""
        flaky = Flaky(5)
        with pytest.raises(CollaboratorError, match="temporary failure"):
            retry(max_attempts=3, sleep=lambda _: None)(flaky.fetch)()
        assert flaky.calls == 3

    def test_authorization_not_retried(self):
        """Authorization failures give up immediately."""
        flaky = Flaky(5, AuthorizationError("veo", "Requested entity was not found", 404))
        with pytest.raises(AuthorizationError):
            retry(max_attempts=3, sleep=lambda _: None)(flaky.fetch)()
        assert flaky.calls == 1

    def test_only_listed_errors_retried(self):
        """Errors outside retry_on propagate at once."""
        flaky = Flaky(5, KeyError("x"))
        with pytest.raises(KeyError):
            retry(max_attempts=3, retry_on=(CollaboratorError,), sleep=lambda _: None)(flaky.fetch)()
        assert flaky.calls == 1

    def test_defaults_from_config(self, monkeypatch):
        """Attempt count comes from the configuration at call time."""
        from adstudio.config import config

        monkeypatch.setattr(config, "max_retries", 2)
        flaky = Flaky(5)
        with pytest.raises(CollaboratorError):
            retry(sleep=lambda _: None)(flaky.fetch)()
        assert flaky.calls == 2

    def test_logs_attempts(self, caplog):
        """Each failed attempt is logged."""
        retry(max_attempts=2, sleep=lambda _: None)(Flaky(1).fetch)()
        assert "attempt 1/2" in caplog.text
