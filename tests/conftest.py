"""Shared test fixtures."""

import copy
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from reviewapp.models import Handle, PatchOp, PlatformError, RegistryEnvironment, Workload, WorkloadSpec
from reviewapp.providers.base import ChatNotifier, EnvironmentRegistry, PlatformClient
from reviewapp.settings import ReviewSettings

NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


class FakePlatform(PlatformClient):
    """In-memory platform keeping workloads as raw dicts, keyed by name."""

    def __init__(
        self,
        orgs: tuple[str, ...] = ("galacticfog",),
        envs: tuple[str, ...] = ("review",),
        providers: tuple[str, ...] = ("dcos",),
    ) -> None:
        self.orgs = {n: Handle(id=f"org-{n}", name=n) for n in orgs}
        self.envs = {n: Handle(id=f"env-{n}", name=n) for n in envs}
        self.providers = {n: Handle(id=f"prov-{n}", name=n) for n in providers}
        self.workloads: dict[str, dict] = {}
        self.calls: list[str] = []
        self.fail_with: PlatformError | None = None
        self._seq = 0

    @property
    def mutations(self) -> list[str]:
        return [c for c in self.calls if c in ("create", "patch", "delete")]

    def resolve_org(self, name: str) -> Handle | None:
        self.calls.append("resolve_org")
        return self.orgs.get(name)

    def resolve_environment(self, org: Handle, name: str) -> Handle | None:
        self.calls.append("resolve_environment")
        return self.envs.get(name)

    def resolve_provider(self, org: Handle, name: str) -> Handle | None:
        self.calls.append("resolve_provider")
        return self.providers.get(name)

    def find_workload_by_name(self, org: Handle, env: Handle, name: str) -> Workload | None:
        self.calls.append("find")
        node = self.workloads.get(name)
        return Workload.model_validate(node) if node else None

    def create_workload(self, org: Handle, env: Handle, spec: WorkloadSpec) -> Workload | PlatformError:
        self.calls.append("create")
        if self.fail_with:
            return self.fail_with
        self._seq += 1
        node = {"id": f"wl-{self._seq}", **spec.to_payload()}
        self.workloads[spec.name] = node
        return Workload.model_validate(node)

    def patch_workload(
        self,
        org: Handle,
        env: Handle,
        workload: Workload,
        ops: list[PatchOp],
    ) -> Workload | PlatformError:
        self.calls.append("patch")
        if self.fail_with:
            return self.fail_with
        node = copy.deepcopy(self.workloads[workload.name])
        for op in ops:
            *parents, leaf = op.path.strip("/").split("/")
            target = node
            for part in parents:
                target = target.setdefault(part, {})
            target[leaf] = op.value
        self.workloads[workload.name] = node
        return Workload.model_validate(node)

    def delete_workload(self, org: Handle, env: Handle, workload: Workload) -> PlatformError | None:
        self.calls.append("delete")
        if self.fail_with:
            return self.fail_with
        self.workloads.pop(workload.name, None)
        return None


@pytest.fixture
def settings() -> ReviewSettings:
    return ReviewSettings(  # type: ignore[call-arg]
        _env_file=None,
        meta_url="https://meta.example.test",
        target_org="galacticfog",
        target_env="review",
        target_provider="dcos",
        gitlab_token="glpat-test",
        slack_path="/services/T000/B000/XXXX",
    )


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def registry() -> MagicMock:
    reg = MagicMock(spec=EnvironmentRegistry)
    reg.find_environment.return_value = RegistryEnvironment(id=7, slug="pr-42", name="review/pr-42")
    reg.update_environment.return_value = None
    return reg


@pytest.fixture
def notifier() -> MagicMock:
    return MagicMock(spec=ChatNotifier)


@pytest.fixture
def payload() -> dict:
    return {
        "slug": "pr-42",
        "image": "registry.example.test/ui:abc123",
        "git_ref": "feature/login",
        "git_sha": "abc123",
        "git_author": "Jane Doe",
    }
