"""Create-or-patch and teardown of review workloads, keyed by name."""

from reviewapp.builder import update_ops
from reviewapp.invocation_log import InvocationLog
from reviewapp.models import PlatformError, TargetContext, Workload, WorkloadSpec
from reviewapp.providers.base import PlatformClient, ProviderError


def reconcile_workload(
    platform: PlatformClient,
    context: TargetContext,
    spec: WorkloadSpec,
    log: InvocationLog,
) -> Workload | None:
    """Create the workload if absent, otherwise patch image, description and labels.

    Returns None after logging an error when the lookup fails or the platform
    rejects the change.
    """
    org, env = context.organization, context.environment
    try:
        existing = platform.find_workload_by_name(org, env, spec.name)
    except ProviderError as exc:
        log.error(f"error looking up workload '{spec.name}': {exc}")
        return None

    if existing is None:
        log.debug(f"create payload: {spec.model_dump_json()}")
        result = platform.create_workload(org, env, spec)
        action = "creating"
    else:
        log.info(f"Found existing workload {existing.id}; updating image, description and labels")
        result = platform.patch_workload(org, env, existing, update_ops(spec))
        action = "updating"

    if isinstance(result, PlatformError):
        log.error(f"error {action} workload: response code {result.code}: {result.message}")
        return None

    log.info(f"{'Created new' if existing is None else 'Updated'} workload with id {result.id}")
    return result


def teardown_workload(
    platform: PlatformClient,
    context: TargetContext,
    slug: str,
    log: InvocationLog,
) -> bool:
    """Delete the workload named ``slug``. Absent workloads are a successful no-op."""
    org, env = context.organization, context.environment
    try:
        existing = platform.find_workload_by_name(org, env, slug)
    except ProviderError as exc:
        log.error(f"error looking up workload '{slug}': {exc}")
        return False

    if existing is None:
        log.info("did not find any deployments matching that name")
        return True

    error = platform.delete_workload(org, env, existing)
    if error is not None:
        log.error(f"error deleting workload {existing.id}: response code {error.code}: {error.message}")
        return False
    log.info(f"Deleted workload {existing.id}")
    return True
