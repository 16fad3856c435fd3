"""Payload parsing and desired-state construction for review workloads."""

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from reviewapp.models import (
    PatchOp,
    PortMapping,
    RequestError,
    ReviewRequest,
    TargetContext,
    WorkloadProperties,
    WorkloadSpec,
)
from reviewapp.settings import ReviewSettings, public_address

RequestT = TypeVar("RequestT", bound=BaseModel)


def parse_request(model: type[RequestT], payload: Mapping[str, Any]) -> RequestT:
    """Validate a raw CI payload once, at the boundary."""
    try:
        return model.model_validate(dict(payload))
    except ValidationError as exc:
        raise RequestError.from_validation_error(exc) from exc


def format_timestamp(moment: datetime) -> str:
    return moment.strftime("%a %b %d %Y %H:%M:%S %Z").strip()


def describe(request: ReviewRequest, timestamp: str) -> str:
    return (
        "CI review app: \n"
        f"Time: {timestamp}\n"
        f"Author: {request.git_author}\n"
        f"Git ref: {request.git_ref}\n"
        f"SHA: {request.git_sha}\n"
    )


def build_labels(request: ReviewRequest, vhost: str, timestamp: str) -> dict[str, str]:
    """Routing hints for the HAProxy ingress plus deploy metadata.

    HAPROXY_* keys are what makes the workload reachable at ``vhost``.
    """
    labels = {
        "HAPROXY_GROUP": "external",
        "HAPROXY_0_VHOST": vhost,
        "HAPROXY_0_REDIRECT_TO_HTTPS": "true",
        "DEPLOYED_AT": timestamp,
        "GIT_AUTHOR": request.git_author,
        "GIT_SHA": request.git_sha,
        "GIT_REF": request.git_ref,
        "REVIEW_APP": request.slug,
    }
    return {k: v for k, v in labels.items() if v is not None}


def build_workload_spec(
    request: ReviewRequest,
    context: TargetContext,
    settings: ReviewSettings,
    now: datetime | None = None,
) -> WorkloadSpec:
    if context.provider is None:
        raise ValueError("a provider handle is required to build a workload")
    timestamp = format_timestamp(now or datetime.now(timezone.utc))
    vhost = public_address(settings, request.slug)
    return WorkloadSpec(
        name=request.slug,
        description=describe(request, timestamp),
        properties=WorkloadProperties(
            provider={"id": context.provider.id},
            image=request.image,
            port_mappings=[PortMapping()],
            env={
                "META_API_URL": settings.local_meta_url,
                "SEC_API_URL": settings.local_sec_url,
            },
            labels=build_labels(request, vhost, timestamp),
        ),
    )


def update_ops(spec: WorkloadSpec) -> list[PatchOp]:
    """Partial update for an existing workload; everything else stays as the operator left it."""
    return [
        PatchOp.replace("/properties/image", spec.properties.image),
        PatchOp.replace("/description", spec.description),
        PatchOp.replace("/properties/labels", spec.properties.labels),
    ]
