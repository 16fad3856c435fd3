"""Publish a review app's URL back to the CI environment registry."""

from reviewapp.invocation_log import InvocationLog
from reviewapp.providers.base import EnvironmentRegistry, ProviderError


def sync_registry_url(
    registry: EnvironmentRegistry | None,
    slug: str,
    external_url: str,
    log: InvocationLog,
) -> bool:
    """Update external_url on the registry record matching ``slug``.

    Every failure here is a warning; the deploy itself already happened.
    """
    if registry is None:
        log.warning("no GitLab registry configured; external_url not updated")
        return False

    try:
        record = registry.find_environment(slug)
    except ProviderError as exc:
        log.warning(f"GitLab environment lookup failed: {exc}")
        return False
    if record is None:
        log.warning(f"Could not locate GitLab environment '{slug}' in order to update external_url")
        return False

    log.info(f"Calling back to GitLab to update environment url: {record.id}")
    try:
        registry.update_environment(record.id, external_url)
    except ProviderError as exc:
        log.warning(f"GitLab environment update failed: {exc}")
        return False
    log.info(f"GitLab environment {record.id} now points at {external_url}")
    return True
