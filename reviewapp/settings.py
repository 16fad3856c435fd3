"""Settings resolution with named profile support."""

from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

import tomlkit
import typer
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_PATH = Path.home() / ".config" / "reviewapp" / "config.toml"
PROFILE_ENV_VAR = "REVIEWAPP_PROFILE"


class ReviewSettings(BaseSettings):
    # Unprefixed so the variable names of the CI lambda environment keep working
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Infrastructure platform
    meta_url: str = "https://meta.test.galacticfog.com"
    meta_token: SecretStr | None = None
    target_org: str | None = None
    target_env: str | None = None
    target_provider: str | None = None

    # Injected into the workload's environment
    local_meta_url: str = "https://meta.test.galacticfog.com"
    local_sec_url: str = "https://security.test.galacticfog.com"

    # Public address: https://<vhost_prefix><slug>.<domain_suffix>
    vhost_prefix: str = "ui-review-"
    domain_suffix: str = "test.galacticfog.com"

    # GitLab environment registry
    gitlab_url: str = "https://gitlab.com/api/v4"
    gitlab_project_id: str = "2251734"
    gitlab_token: SecretStr | None = None
    gitlab_page_size: int = 100

    # Slack webhook
    slack_host: str = "https://hooks.slack.com"
    slack_path: str | None = None
    notify_async: bool = False

    http_timeout: float = 30.0


@lru_cache(maxsize=1)
def _load_toml() -> tomlkit.TOMLDocument:
    """Load ~/.config/reviewapp/config.toml, returning empty document if missing."""
    if not CONFIG_PATH.exists():
        return tomlkit.document()
    return tomlkit.load(CONFIG_PATH.open())


def _list_profiles(config: Mapping) -> list[str]:
    # tomlkit Table implements MutableMapping but not dict, so check Mapping
    return [k for k, v in config.items() if isinstance(v, Mapping)]


def get_settings(profile: str | None = None) -> ReviewSettings:
    """Resolve the active profile and return a fully populated ReviewSettings.

    Precedence for the profile name (highest to lowest):
    1. profile argument (--profile CLI flag)
    2. REVIEWAPP_PROFILE env var
    3. default_profile key in ~/.config/reviewapp/config.toml
    4. First profile defined in ~/.config/reviewapp/config.toml

    With no profile at all, settings come from env vars and .env only.
    """
    import os

    toml_config = _load_toml()

    active = (
        profile
        or os.environ.get(PROFILE_ENV_VAR)
        or toml_config.get("default_profile")
        or ((_profiles := _list_profiles(toml_config)) and _profiles[0] or None)
    )

    profile_values: dict = {}
    if active:
        if active in toml_config and isinstance(toml_config[active], Mapping):
            profile_values = dict(toml_config[active])
        else:
            profiles = _list_profiles(toml_config)
            typer.echo(f"Profile '{active}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}")
            raise typer.Exit(1)

    # Explicit profile values win over env vars and .env
    return ReviewSettings(**profile_values)


def public_address(settings: ReviewSettings, slug: str) -> str:
    """Return the virtual host a review app is served on, e.g. ui-review-pr-42.test.galacticfog.com."""
    return f"{settings.vhost_prefix}{slug}.{settings.domain_suffix}"


def set_default_profile(profile: str) -> None:
    """Write default_profile to ~/.config/reviewapp/config.toml.

    A missing file is created. An existing file must already define the profile.
    """
    if CONFIG_PATH.exists():
        doc = tomlkit.load(CONFIG_PATH.open())
        profiles = _list_profiles(doc)
        if profile not in profiles:
            typer.echo(f"Profile '{profile}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}")
            raise typer.Exit(1)
        doc["default_profile"] = profile
    else:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        doc = tomlkit.document()
        doc.add("default_profile", profile)
    CONFIG_PATH.write_text(tomlkit.dumps(doc))
    _load_toml.cache_clear()
