"""GitLab REST API v4 environment registry."""

import httpx
from pydantic import ValidationError

from reviewapp.models import RegistryEnvironment
from reviewapp.providers.base import EnvironmentRegistry, ProviderError
from reviewapp.settings import ReviewSettings


class GitLabRegistry(EnvironmentRegistry):
    def __init__(self, settings: ReviewSettings) -> None:
        if not settings.gitlab_token:
            raise ProviderError("No GitLab credentials. Set GITLAB_TOKEN for the active profile.")
        self._base_url = f"{settings.gitlab_url.rstrip('/')}/projects/{settings.gitlab_project_id}"
        self._page_size = settings.gitlab_page_size
        self._timeout = settings.http_timeout
        self._headers = {"PRIVATE-TOKEN": settings.gitlab_token.get_secret_value()}

    def _check(self, response: httpx.Response) -> None:
        if response.status_code == 401:
            raise ProviderError("GitLab API returned 401. Check GITLAB_TOKEN for the active profile.")
        if response.is_error:
            raise ProviderError(f"GitLab API returned {response.status_code}: {response.text}")

    def _page_nodes(self, response: httpx.Response) -> list:
        try:
            nodes = response.json()
        except ValueError as exc:
            raise ProviderError(f"GitLab environment listing returned a non-JSON body: {exc}") from exc
        if not isinstance(nodes, list):
            raise ProviderError("GitLab environment listing did not return a list")
        return nodes

    def find_environment(self, slug: str) -> RegistryEnvironment | None:
        page: str | None = "1"
        while page:
            try:
                response = httpx.get(
                    f"{self._base_url}/environments",
                    headers=self._headers,
                    params={"per_page": str(self._page_size), "page": page},
                    timeout=self._timeout,
                )
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                raise ProviderError(f"GitLab environment listing failed: {exc}") from exc
            self._check(response)
            nodes = self._page_nodes(response)
            for node in nodes:
                if isinstance(node, dict) and node.get("slug") == slug:
                    try:
                        return RegistryEnvironment.model_validate(node)
                    except ValidationError as exc:
                        raise ProviderError(f"unexpected GitLab environment record for '{slug}': {exc}") from exc
            # GitLab leaves X-Next-Page empty on the last page
            page = response.headers.get("X-Next-Page") if nodes else None
        return None

    def update_environment(self, environment_id: int, external_url: str) -> None:
        # Only the status matters; the response body is not read
        try:
            response = httpx.put(
                f"{self._base_url}/environments/{environment_id}",
                headers=self._headers,
                json={"external_url": external_url},
                timeout=self._timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ProviderError(f"GitLab environment update failed: {exc}") from exc
        self._check(response)
