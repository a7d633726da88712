"""Shared pydantic models: the contract between the Azure client, the pipeline and capabilities."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, SecretStr


class PackageManager(str, Enum):
    NPM_AND_YARN = "npm_and_yarn"
    BUNDLER = "bundler"
    COMPOSER = "composer"
    PIP = "pip"
    GO_MODULES = "go_modules"
    DEP = "dep"
    MAVEN = "maven"
    GRADLE = "gradle"
    NUGET = "nuget"
    CARGO = "cargo"
    HEX = "hex"
    DOCKER = "docker"
    TERRAFORM = "terraform"
    SUBMODULES = "submodules"
    ELM = "elm"


class UpdateSchedule(str, Enum):
    LIVE = "live"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class RequirementsUnlock(str, Enum):
    NONE = "none"
    OWN = "own"
    ALL = "all"


# Least disruptive first: leave requirement strings alone, then relax only the
# dependency's own requirement, then allow transitive relaxation.
UNLOCK_ORDER: tuple[RequirementsUnlock, ...] = (
    RequirementsUnlock.NONE,
    RequirementsUnlock.OWN,
    RequirementsUnlock.ALL,
)


class Credential(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str = "git_source"
    host: str = "dev.azure.com"
    username: str
    password: SecretStr


class Project(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class Repository(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str


# ---------------------------------------------------------------------------
# .dependabot/config.yml
# ---------------------------------------------------------------------------


class RuleMatch(BaseModel):
    # version_requirement, dependency_type and update_type are accepted but not interpreted
    model_config = ConfigDict(frozen=True, extra="allow")

    dependency_name: str


class UpdateRule(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    match: RuleMatch


class UpdateConfigEntry(BaseModel):
    """One raw entry of `update_configs`.

    package_manager and update_schedule stay strings here; translation into
    closed enums happens in azdep.policy so the error names the raw value.
    """

    # target_branch, default_reviewers, default_labels, allowed_updates, ... are ignored
    model_config = ConfigDict(frozen=True, extra="allow")

    package_manager: str
    directory: str = "/"
    update_schedule: str
    ignored_updates: list[UpdateRule] | None = None
    automerged_updates: list[UpdateRule] | None = None


class UpdateConfigFile(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    version: int | None = None
    update_configs: list[UpdateConfigEntry]


class UpdatePolicy(BaseModel):
    """A fully validated update policy derived from one config entry."""

    model_config = ConfigDict(frozen=True)

    package_manager: PackageManager
    directory: str
    runs_today: bool
    ignore_names: frozenset[str] = frozenset()
    automerge_names: frozenset[str] = frozenset()


# ---------------------------------------------------------------------------
# Update capability payloads
# ---------------------------------------------------------------------------


class Source(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: str = "azure"
    repo: str  # "<org>/<projectId>/_git/<repoId>"
    directory: str = "/"
    hostname: str = "dev.azure.com"


class DependencyFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    content: str | None = None
    directory: str = "/"


class FetchedFiles(BaseModel):
    model_config = ConfigDict(frozen=True)

    files: list[DependencyFile]
    commit: str


class Dependency(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    version: str | None = None
    top_level: bool = True


class PullRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int  # pullRequestId
    created_by_id: str


# ---------------------------------------------------------------------------
# Tracking work items
# ---------------------------------------------------------------------------


class TicketKind(str, Enum):
    MISSING_UPDATE_CONFIG = "missing_update_config"
    MISSING_PIPELINE_CONFIG = "missing_pipeline_config"


class WorkItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    tags: str
    repro_steps: str
    priority: str = "1"
    severity: str = "1 - Critical"

    def to_patch(self) -> list[dict]:
        """Render as an Azure DevOps JSON-patch document."""
        fields = {
            "System.Title": self.title,
            "System.Tags": self.tags,
            "Microsoft.VSTS.TCM.ReproSteps": self.repro_steps,
            "Microsoft.VSTS.Common.Priority": self.priority,
            "Microsoft.VSTS.Common.Severity": self.severity,
        }
        return [{"op": "add", "path": f"/fields/{name}", "from": "", "value": value} for name, value in fields.items()]
