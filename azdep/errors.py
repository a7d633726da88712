"""Exception hierarchy shared by the client, policy and pipeline layers."""


class AzdepError(Exception):
    pass


class Unauthorized(AzdepError):
    """Azure DevOps answered 401."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Azure DevOps returned 401 for {url}. Check AZDEP_CREDENTIALS for the active profile.")
        self.url = url


class NotFound(AzdepError):
    """Azure DevOps answered 404."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Azure DevOps returned 404 for {url}")
        self.url = url


class MissingCredential(AzdepError):
    def __init__(self, host: str) -> None:
        super().__init__(f"No git_source credential configured for host '{host}'")
        self.host = host


class InvalidUpdateConfig(AzdepError):
    pass


class UnsupportedPackageManager(AzdepError):
    def __init__(self, value: object) -> None:
        super().__init__(f"Unsupported package manager: {value}")
        self.value = value


class UnsupportedSchedule(AzdepError):
    def __init__(self, value: object) -> None:
        super().__init__(f"Unsupported update schedule: {value}")
        self.value = value


class CapabilityNotFound(AzdepError):
    def __init__(self, package_manager: str) -> None:
        super().__init__(f"No update capability installed for package manager '{package_manager}'")
        self.package_manager = package_manager
