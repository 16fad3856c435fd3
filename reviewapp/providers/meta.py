"""Gestalt Meta REST API provider."""

import httpx
from pydantic import ValidationError

from reviewapp.models import Handle, PatchOp, PlatformError, Workload, WorkloadSpec
from reviewapp.providers.base import PlatformClient, ProviderError
from reviewapp.settings import ReviewSettings


class MetaPlatform(PlatformClient):
    def __init__(self, settings: ReviewSettings) -> None:
        self._base_url = settings.meta_url.rstrip("/")
        self._timeout = settings.http_timeout
        self._headers = {"Accept": "application/json"}
        # Independent of any caller credentials; may be absent for open test instances
        if settings.meta_token:
            self._headers["Authorization"] = f"Bearer {settings.meta_token.get_secret_value()}"

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get(self, path: str, params: dict | None = None) -> dict | list | None:
        """GET a resource, returning None on 404."""
        try:
            response = httpx.get(
                f"{self._base_url}{path}",
                headers=self._headers,
                params=params or {},
                timeout=self._timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ProviderError(f"GET {path} failed: {exc}") from exc
        if response.status_code == 404:
            return None
        if response.status_code == 401:
            raise ProviderError("Meta API returned 401. Check META_TOKEN for the active profile.")
        if response.is_error:
            raise ProviderError(f"GET {path} returned {response.status_code}: {response.text}")
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(f"GET {path} returned a non-JSON body: {exc}") from exc

    def _send(self, method: str, path: str, body: dict | list | None = None) -> httpx.Response | PlatformError:
        try:
            response = httpx.request(
                method,
                f"{self._base_url}{path}",
                headers=self._headers,
                json=body,
                timeout=self._timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return PlatformError(code=None, message=str(exc))
        if response.is_error:
            return PlatformError(code=response.status_code, message=response.text)
        return response

    def _find_by_name(self, path: str, name: str) -> dict | None:
        nodes = self._get(path, params={"expand": "true"}) or []
        if not isinstance(nodes, list):
            raise ProviderError(f"GET {path} did not return a list")
        for node in nodes:
            if isinstance(node, dict) and node.get("name") == name:
                return node
        return None

    def _handle(self, node: dict, name: str) -> Handle:
        try:
            return Handle(id=str(node["id"]), name=name)
        except (KeyError, ValidationError) as exc:
            raise ProviderError(f"unexpected record for '{name}': {exc}") from exc

    def _workload(self, response: httpx.Response) -> Workload | PlatformError:
        """Parse a 2xx mutation response; an unreadable body is reported, not raised."""
        try:
            return Workload.model_validate(response.json())
        except ValueError as exc:
            return PlatformError(code=response.status_code, message=f"unexpected response body: {exc}")

    def resolve_org(self, name: str) -> Handle | None:
        node = self._get(f"/{name}")
        if node is None:
            return None
        if not isinstance(node, dict):
            raise ProviderError(f"GET /{name} did not return an object")
        # Orgs are addressed by fqon in every other path
        fqon = (node.get("properties") or {}).get("fqon", name)
        return self._handle(node, fqon)

    def resolve_environment(self, org: Handle, name: str) -> Handle | None:
        node = self._find_by_name(f"/{org.name}/environments", name)
        return self._handle(node, name) if node else None

    def resolve_provider(self, org: Handle, name: str) -> Handle | None:
        node = self._find_by_name(f"/{org.name}/providers", name)
        return self._handle(node, name) if node else None

    def find_workload_by_name(self, org: Handle, env: Handle, name: str) -> Workload | None:
        node = self._find_by_name(f"/{org.name}/environments/{env.id}/containers", name)
        if node is None:
            return None
        try:
            return Workload.model_validate(node)
        except ValidationError as exc:
            raise ProviderError(f"unexpected workload record for '{name}': {exc}") from exc

    def create_workload(self, org: Handle, env: Handle, spec: WorkloadSpec) -> Workload | PlatformError:
        result = self._send("POST", f"/{org.name}/environments/{env.id}/containers", spec.to_payload())
        if isinstance(result, PlatformError):
            return result
        return self._workload(result)

    def patch_workload(
        self,
        org: Handle,
        env: Handle,
        workload: Workload,
        ops: list[PatchOp],
    ) -> Workload | PlatformError:
        body = [op.model_dump(mode="json") for op in ops]
        result = self._send("PATCH", f"/{org.name}/containers/{workload.id}", body)
        if isinstance(result, PlatformError):
            return result
        return self._workload(result)

    def delete_workload(self, org: Handle, env: Handle, workload: Workload) -> PlatformError | None:
        result = self._send("DELETE", f"/{org.name}/containers/{workload.id}")
        return result if isinstance(result, PlatformError) else None
