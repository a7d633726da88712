"""Selects an update capability per package manager.

Capabilities are installed as plugins exposing an `azdep.capabilities` entry
point named after the package manager, e.g.

    [project.entry-points."azdep.capabilities"]
    npm_and_yarn = "azdep_npm:NpmCapability"
"""

from collections.abc import Callable, Sequence
from importlib.metadata import entry_points

from azdep.capabilities.base import UpdateCapability
from azdep.errors import CapabilityNotFound
from azdep.models import Credential, PackageManager

ENTRY_POINT_GROUP = "azdep.capabilities"

CapabilityFactory = Callable[[Sequence[Credential]], UpdateCapability]


class CapabilityRegistry:
    def __init__(self, credentials: Sequence[Credential]) -> None:
        self._credentials = list(credentials)
        self._factories: dict[PackageManager, CapabilityFactory] = {}

    @classmethod
    def from_entry_points(cls, credentials: Sequence[Credential]) -> "CapabilityRegistry":
        registry = cls(credentials)
        for ep in entry_points(group=ENTRY_POINT_GROUP):
            try:
                package_manager = PackageManager(ep.name)
            except ValueError:
                continue  # not a package manager azdep knows how to configure
            registry.register(package_manager, lambda creds, ep=ep: ep.load()(creds))
        return registry

    def register(self, package_manager: PackageManager, factory: CapabilityFactory) -> None:
        self._factories[package_manager] = factory

    def installed(self) -> list[PackageManager]:
        return sorted(self._factories, key=lambda pm: pm.value)

    def get(self, package_manager: PackageManager) -> UpdateCapability:
        factory = self._factories.get(package_manager)
        if factory is None:
            raise CapabilityNotFound(package_manager.value)
        return factory(self._credentials)
