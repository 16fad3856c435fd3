"""Tests for publishing the review URL to the CI registry."""

from unittest.mock import MagicMock

from reviewapp.invocation_log import InvocationLog
from reviewapp.models import Outcome
from reviewapp.providers.base import ProviderError
from reviewapp.registry_sync import sync_registry_url

URL = "https://ui-review-pr-42.test.galacticfog.com"


def test_updates_matching_record(registry: MagicMock) -> None:
    log = InvocationLog()
    assert sync_registry_url(registry, "pr-42", URL, log) is True
    registry.update_environment.assert_called_once_with(7, URL)
    assert log.outcome == Outcome.SUCCEEDED


def test_not_found_is_warning(registry: MagicMock) -> None:
    registry.find_environment.return_value = None
    log = InvocationLog()
    assert sync_registry_url(registry, "pr-42", URL, log) is False
    assert log.lines == ["WARNING: Could not locate GitLab environment 'pr-42' in order to update external_url"]
    registry.update_environment.assert_not_called()


def test_lookup_failure_distinguished(registry: MagicMock) -> None:
    registry.find_environment.side_effect = ProviderError("GitLab API returned 401. Check GITLAB_TOKEN")
    log = InvocationLog()
    sync_registry_url(registry, "pr-42", URL, log)
    assert log.lines == ["WARNING: GitLab environment lookup failed: GitLab API returned 401. Check GITLAB_TOKEN"]
    assert log.outcome == Outcome.DEGRADED


def test_update_failure_is_warning(registry: MagicMock) -> None:
    registry.update_environment.side_effect = ProviderError("GitLab API returned 403: forbidden")
    log = InvocationLog()
    assert sync_registry_url(registry, "pr-42", URL, log) is False
    assert log.lines[-1] == "WARNING: GitLab environment update failed: GitLab API returned 403: forbidden"


def test_unconfigured_registry() -> None:
    log = InvocationLog()
    assert sync_registry_url(None, "pr-42", URL, log) is False
    assert log.outcome == Outcome.DEGRADED
