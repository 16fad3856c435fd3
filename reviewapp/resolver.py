"""Resolve configured target names into platform handles."""

from reviewapp.invocation_log import InvocationLog
from reviewapp.models import TargetContext
from reviewapp.providers.base import PlatformClient, ProviderError
from reviewapp.settings import ReviewSettings


def resolve_context(
    platform: PlatformClient,
    settings: ReviewSettings,
    log: InvocationLog,
    require_provider: bool = True,
) -> TargetContext | None:
    """Look up org, environment and (optionally) provider by name.

    Returns None after logging an error if any of them cannot be found; the
    caller must stop without mutating anything.
    """
    try:
        org = platform.resolve_org(settings.target_org) if settings.target_org else None
        if org is None:
            log.error(f"could not find target org '{settings.target_org}'")
            return None

        env = platform.resolve_environment(org, settings.target_env) if settings.target_env else None
        if env is None:
            log.error(f"could not find target environment '{settings.target_env}'")
            return None

        provider = None
        if require_provider:
            provider = platform.resolve_provider(org, settings.target_provider) if settings.target_provider else None
            if provider is None:
                log.error(f"could not find target provider '{settings.target_provider}'")
                return None
    except ProviderError as exc:
        log.error(f"could not resolve deployment target: {exc}")
        return None

    log.info(f"[init] resolved target {org.name} / {env.name}" + (f" / {provider.name}" if provider else ""))
    return TargetContext(organization=org, environment=env, provider=provider)
