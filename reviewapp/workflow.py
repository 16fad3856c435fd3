"""Deploy and stop orchestration for review apps.

Each step runs only when its predecessor succeeded. Registry sync and chat
notification failures are absorbed. Every exit path returns the accumulated
InvocationLog as an InvocationResult.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from reviewapp.builder import build_workload_spec, parse_request
from reviewapp.invocation_log import InvocationLog
from reviewapp.models import InvocationResult, RequestError, ReviewRequest, StopRequest
from reviewapp.notify import announce
from reviewapp.providers.base import ChatNotifier, EnvironmentRegistry, PlatformClient
from reviewapp.reconciler import reconcile_workload, teardown_workload
from reviewapp.registry_sync import sync_registry_url
from reviewapp.resolver import resolve_context
from reviewapp.settings import ReviewSettings, public_address


def deploy(
    payload: Mapping[str, Any],
    settings: ReviewSettings,
    platform: PlatformClient,
    registry: EnvironmentRegistry | None = None,
    notifier: ChatNotifier | None = None,
    now: datetime | None = None,
) -> InvocationResult:
    log = InvocationLog("deploy")
    log.info("***** begin UI review app deploy ************")
    log.info(f"[init] using platform: {settings.meta_url}")

    try:
        request = parse_request(ReviewRequest, payload)
    except RequestError as exc:
        for problem in exc.problems:
            log.error(problem)
        return log.result()

    context = resolve_context(platform, settings, log)
    if context is None:
        return log.result()

    spec = build_workload_spec(request, context, settings, now=now)
    url = f"https://{public_address(settings, request.slug)}"
    log.info(f"Will deploy image {request.image} to provider {context.provider.name} at url: {url}")  # type: ignore[union-attr]

    if reconcile_workload(platform, context, spec, log) is None:
        return log.result()

    sync_registry_url(registry, request.slug, url, log)
    announce(notifier, request.image, url, log, fire_and_forget=settings.notify_async)

    log.info("***** done with UI review app deploy ************")
    return log.result()


def stop(
    payload: Mapping[str, Any],
    settings: ReviewSettings,
    platform: PlatformClient,
) -> InvocationResult:
    log = InvocationLog("stop")
    log.info("***** begin UI review app stop ************")

    try:
        request = parse_request(StopRequest, payload)
    except RequestError as exc:
        for problem in exc.problems:
            log.error(problem)
        return log.result()

    context = resolve_context(platform, settings, log, require_provider=False)
    if context is None:
        return log.result()

    log.info(f"Will delete deployment associated with gitlab environment {request.slug}")
    if not teardown_workload(platform, context, request.slug, log):
        return log.result()

    log.info("***** done with UI review app stop ************")
    return log.result()
