"""Translate .dependabot/config.yml into validated update policies."""

from datetime import date

import yaml
from pydantic import ValidationError

from azdep.errors import InvalidUpdateConfig, UnsupportedPackageManager, UnsupportedSchedule
from azdep.models import PackageManager, UpdateConfigEntry, UpdateConfigFile, UpdatePolicy, UpdateSchedule

UPDATE_CONFIG_PATH = ".dependabot/config.yml"
PIPELINE_CONFIG_PATH = "azure-pipelines.yml"

# Dependabot v1 config values → package manager identifiers
PACKAGE_MANAGERS: dict[str, PackageManager] = {
    "javascript": PackageManager.NPM_AND_YARN,
    "ruby:bundler": PackageManager.BUNDLER,
    "php:composer": PackageManager.COMPOSER,
    "python": PackageManager.PIP,
    "go:modules": PackageManager.GO_MODULES,
    "go:dep": PackageManager.DEP,
    "java:maven": PackageManager.MAVEN,
    "java:gradle": PackageManager.GRADLE,
    "dotnet:nuget": PackageManager.NUGET,
    "rust:cargo": PackageManager.CARGO,
    "elixir:hex": PackageManager.HEX,
    "docker": PackageManager.DOCKER,
    "terraform": PackageManager.TERRAFORM,
    "submodules": PackageManager.SUBMODULES,
    "elm": PackageManager.ELM,
}


def parse_update_config(text: str) -> UpdateConfigFile:
    """Parse and validate a config.yml document, raising InvalidUpdateConfig on any problem."""
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise InvalidUpdateConfig(f"{UPDATE_CONFIG_PATH} is not valid YAML: {exc}") from exc
    if not isinstance(raw, dict):
        raise InvalidUpdateConfig(f"{UPDATE_CONFIG_PATH} must be a mapping with an update_configs list")
    try:
        return UpdateConfigFile.model_validate(raw)
    except ValidationError as exc:
        raise InvalidUpdateConfig(f"{UPDATE_CONFIG_PATH} failed validation: {exc}") from exc


def resolve_package_manager(value: str) -> PackageManager:
    package_manager = PACKAGE_MANAGERS.get(value)
    if package_manager is None:
        raise UnsupportedPackageManager(value)
    return package_manager


def runs_on(value: str, today: date) -> bool:
    try:
        schedule = UpdateSchedule(value)
    except ValueError:
        raise UnsupportedSchedule(value) from None

    match schedule:
        case UpdateSchedule.LIVE | UpdateSchedule.DAILY:
            return True
        case UpdateSchedule.WEEKLY:
            return today.weekday() == 0
        case UpdateSchedule.MONTHLY:
            return today.day == 1


def translate(entry: UpdateConfigEntry, today: date) -> UpdatePolicy:
    return UpdatePolicy(
        package_manager=resolve_package_manager(entry.package_manager),
        directory=entry.directory,
        runs_today=runs_on(entry.update_schedule, today),
        ignore_names=frozenset(rule.match.dependency_name for rule in entry.ignored_updates or []),
        automerge_names=frozenset(rule.match.dependency_name for rule in entry.automerged_updates or []),
    )
