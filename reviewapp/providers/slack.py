"""Slack incoming-webhook notifier."""

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor

import httpx

from reviewapp.providers.base import ChatNotifier, ProviderError
from reviewapp.settings import ReviewSettings

_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="reviewapp-notify")


class SlackNotifier(ChatNotifier):
    def __init__(self, settings: ReviewSettings) -> None:
        if not settings.slack_path:
            raise ProviderError("No Slack webhook. Set SLACK_PATH for the active profile.")
        self._url = f"{settings.slack_host.rstrip('/')}{settings.slack_path}"
        self._timeout = settings.http_timeout

    @property
    def url(self) -> str:
        return self._url

    def post(self, text: str) -> None:
        try:
            response = httpx.post(
                self._url,
                json={"text": text, "mrkdwn": True},
                timeout=self._timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ProviderError(f"POST to Slack webhook failed: {exc}") from exc
        if response.is_error:
            raise ProviderError(f"Slack webhook returned {response.status_code}: {response.text}")

    def post_async(
        self,
        text: str,
        on_complete: Callable[[Future], None] | None = None,
    ) -> Future:
        """Post on a worker thread; the returned future carries any ProviderError."""
        future = _executor.submit(self.post, text)
        if on_complete is not None:
            future.add_done_callback(on_complete)
        return future
