"""Best-effort chat announcement of a finished deploy."""

import logging
from concurrent.futures import Future

from reviewapp.invocation_log import InvocationLog
from reviewapp.providers.base import ChatNotifier, ProviderError

logger = logging.getLogger("reviewapp.notify")


def announcement(image: str, url: str) -> str:
    return f"_{image}_ deployed to review app\n{url}"


def _report(future: Future) -> None:
    exc = future.exception()
    if exc is not None:
        logger.warning("Caught error posting message to slack: %s", exc)
    else:
        logger.info("posted message to slack")


def announce(
    notifier: ChatNotifier | None,
    image: str,
    url: str,
    log: InvocationLog,
    fire_and_forget: bool = False,
) -> None:
    """Post the announcement. Never raises and never logs above info level."""
    if notifier is None:
        log.info("no slack webhook configured; skipping announcement")
        return

    text = announcement(image, url)
    if fire_and_forget:
        try:
            notifier.post_async(text, on_complete=_report)
        except RuntimeError as exc:
            # The executor refuses new work once the interpreter is shutting down
            log.info("Caught error posting message to slack")
            log.info(str(exc))
            return
        log.info("queued message to slack")
        return

    try:
        notifier.post(text)
    except ProviderError as exc:
        log.info("Caught error posting message to slack")
        log.info(str(exc))
        return
    log.info("posted message to slack")
