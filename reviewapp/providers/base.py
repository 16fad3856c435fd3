"""Abstract base classes for the external systems a deploy talks to."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from concurrent.futures import Future

from reviewapp.models import Handle, PatchOp, PlatformError, RegistryEnvironment, Workload, WorkloadSpec


class ProviderError(RuntimeError):
    """A lookup against an external system failed (transport or non-2xx)."""


class PlatformClient(ABC):
    """Infrastructure platform. Lookups return None for not-found and raise
    ProviderError on failure; mutations return PlatformError instead of raising."""

    @abstractmethod
    def resolve_org(self, name: str) -> Handle | None: ...

    @abstractmethod
    def resolve_environment(self, org: Handle, name: str) -> Handle | None: ...

    @abstractmethod
    def resolve_provider(self, org: Handle, name: str) -> Handle | None: ...

    @abstractmethod
    def find_workload_by_name(self, org: Handle, env: Handle, name: str) -> Workload | None: ...

    @abstractmethod
    def create_workload(self, org: Handle, env: Handle, spec: WorkloadSpec) -> Workload | PlatformError: ...

    @abstractmethod
    def patch_workload(
        self,
        org: Handle,
        env: Handle,
        workload: Workload,
        ops: list[PatchOp],
    ) -> Workload | PlatformError: ...

    @abstractmethod
    def delete_workload(self, org: Handle, env: Handle, workload: Workload) -> PlatformError | None: ...


class EnvironmentRegistry(ABC):
    """CI system's environment registry."""

    @abstractmethod
    def find_environment(self, slug: str) -> RegistryEnvironment | None: ...

    @abstractmethod
    def update_environment(self, environment_id: int, external_url: str) -> None: ...


class ChatNotifier(ABC):
    @abstractmethod
    def post(self, text: str) -> None: ...

    @abstractmethod
    def post_async(
        self,
        text: str,
        on_complete: Callable[[Future], None] | None = None,
    ) -> Future: ...
