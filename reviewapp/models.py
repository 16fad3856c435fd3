"""Shared pydantic models: the contract between providers and the workflow."""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError


class Handle(BaseModel):
    """A resolved platform resource: org, environment or provider."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class TargetContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    organization: Handle
    environment: Handle
    provider: Handle | None = None  # teardown does not need a provider


class ReviewRequest(BaseModel):
    """Incoming CI payload for a review deploy."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    slug: str = Field(min_length=1, validation_alias=AliasChoices("slug", "gitlab_env_slug"))
    image: str = Field(min_length=1)
    git_ref: str | None = None
    git_sha: str | None = None
    git_author: str | None = None


class StopRequest(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    slug: str = Field(min_length=1, validation_alias=AliasChoices("slug", "gitlab_env_slug"))


class RequestError(ValueError):
    """Raised when an incoming payload is missing or has invalid fields."""

    def __init__(self, problems: list[str]) -> None:
        super().__init__("; ".join(problems))
        self.problems = problems

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> "RequestError":
        problems = []
        for err in exc.errors():
            field = ".".join(str(part) for part in err["loc"]) or "payload"
            if err["type"] in ("missing", "string_too_short"):
                problems.append(f"missing required field '{field}'")
            else:
                problems.append(f"invalid field '{field}': {err['msg']}")
        return cls(problems)


class PortMapping(BaseModel):
    model_config = ConfigDict(frozen=True)

    protocol: str = "tcp"
    name: str = "web"
    expose_endpoint: bool = True
    container_port: int = 80


class WorkloadProperties(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: dict[str, str]  # {"id": <provider id>}
    num_instances: int = 1
    cpus: float = 0.1
    memory: float = 64.0
    disk: float = 0.0
    container_type: str = "DOCKER"
    image: str
    network: str = "BRIDGE"
    port_mappings: list[PortMapping] = [PortMapping()]
    env: dict[str, str] = {}
    labels: dict[str, str] = {}
    force_pull: bool = True


class WorkloadSpec(BaseModel):
    """Desired state for a review workload. Built fresh per invocation."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    properties: WorkloadProperties

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class Workload(BaseModel):
    """The platform's current record for a workload."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str | None = None
    properties: dict[str, Any] = {}


class PatchOp(BaseModel):
    model_config = ConfigDict(frozen=True)

    op: str = "replace"
    path: str
    value: Any

    @classmethod
    def replace(cls, path: str, value: Any) -> "PatchOp":
        return cls(op="replace", path=path, value=value)


class PlatformError(BaseModel):
    """Returned (not raised) by platform mutations that failed."""

    model_config = ConfigDict(frozen=True)

    code: int | None = None  # None when no HTTP response was received
    message: str


class RegistryEnvironment(BaseModel):
    """A GitLab environment record. Updated, never created."""

    model_config = ConfigDict(frozen=True)

    id: int
    slug: str
    name: str | None = None
    external_url: str | None = None


class Outcome(str, Enum):
    SUCCEEDED = "succeeded"
    DEGRADED = "degraded"
    FAILED = "failed"


class InvocationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    outcome: Outcome
    lines: list[str]

    @property
    def text(self) -> str:
        return "\n".join(self.lines)
