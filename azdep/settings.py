"""Settings resolution with organisation profiles and explicit credential selection."""

import os
from collections.abc import Mapping, Sequence
from functools import lru_cache
from pathlib import Path

import tomlkit
import typer
from pydantic import SecretStr
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from azdep.errors import MissingCredential
from azdep.models import Credential

CONFIG_PATH = Path.home() / ".config" / "azdep" / "config.toml"

AZURE_HOST = "dev.azure.com"


class AzdepSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="AZDEP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    organisation: str | None = None
    endpoint: str = f"https://{AZURE_HOST}"

    # Personal access token, sent as basic auth password
    username: str = "x-access-token"
    credentials: SecretStr | None = None

    timeout: float = 30
    retries: int = 3  # connection-level retries, handled by the httpx transport
    log_level: str = "INFO"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # env vars and .env override the profile values passed as init kwargs
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    def credential_list(self) -> list[Credential]:
        if not self.credentials:
            return []
        return [Credential(host=AZURE_HOST, username=self.username, password=self.credentials)]


def select_credential(credentials: Sequence[Credential], host: str = AZURE_HOST) -> Credential:
    for credential in credentials:
        if credential.type == "git_source" and credential.host == host:
            return credential
    raise MissingCredential(host)


@lru_cache(maxsize=1)
def _load_toml() -> tomlkit.TOMLDocument:
    """Load ~/.config/azdep/config.toml, returning empty document if missing."""
    if not CONFIG_PATH.exists():
        return tomlkit.document()
    return tomlkit.load(CONFIG_PATH.open())


def _list_profiles(config: Mapping) -> list[str]:
    # tomlkit Table implements MutableMapping but not dict, so check Mapping
    return [k for k, v in config.items() if isinstance(v, Mapping)]


def get_settings(organisation: str | None = None) -> AzdepSettings:
    """Resolve the active organisation profile and return populated AzdepSettings.

    Precedence (highest to lowest):
    1. organisation argument (--organisation CLI flag)
    2. AZDEP_ORGANISATION env var
    3. default_organisation key in ~/.config/azdep/config.toml
    4. First profile defined in ~/.config/azdep/config.toml
    """
    toml_config = _load_toml()

    active = (
        organisation
        or os.environ.get("AZDEP_ORGANISATION")
        or toml_config.get("default_organisation")
        or ((_profiles := _list_profiles(toml_config)) and _profiles[0] or None)
    )
    if not active:
        typer.echo(f"No organisation given. Pass --organisation, set AZDEP_ORGANISATION or add a profile to {CONFIG_PATH}")
        raise typer.Exit(1)

    # A profile is optional: an organisation may be configured through env vars alone.
    # Only a default_organisation that names a missing profile is an error.
    profile_defaults: dict = {}
    if active in toml_config and isinstance(toml_config[active], Mapping):
        profile_defaults = dict(toml_config[active])
    elif active == toml_config.get("default_organisation"):
        profiles = _list_profiles(toml_config)
        typer.echo(f"Profile '{active}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}")
        raise typer.Exit(1)

    settings = AzdepSettings(**profile_defaults)
    settings = settings.model_copy(update={"organisation": active})

    if not settings.credentials:
        typer.echo(
            "Missing Azure DevOps credentials. Set AZDEP_CREDENTIALS or "
            f"credentials in the [{active}] section of {CONFIG_PATH}"
        )
        raise typer.Exit(1)

    return settings
