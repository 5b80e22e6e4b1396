"""Custom exception classes for deptree."""

from typing import Optional


def format_requiring_path(requiring_path: Optional[list[str]]) -> str:
    """Render a requiring path as ``/ > /a > /a/b``.

    Args:
        requiring_path: Locations from the root to the requiring node.

    Returns:
        Human-readable chain, or an empty string.
    """
    if not requiring_path:
        return ""
    return " > ".join(requiring_path)


class DeptreeException(Exception):
    """Base exception for all deptree errors.

    Attributes:
        message: Human-readable error message.
        requiring_path: Locations from the root to the node that triggered
            the error, if known.
    """

    def __init__(
        self,
        message: str,
        requiring_path: Optional[list[str]] = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            requiring_path: Locations from the root to the requiring node.
        """
        self.message = message
        self.requiring_path = list(requiring_path or [])
        super().__init__(self.message)

    def __str__(self) -> str:
        chain = format_requiring_path(self.requiring_path)
        if chain:
            return f"{self.message} (required by {chain})"
        return self.message


class InvalidSpecError(DeptreeException):
    """Raised when a package specifier cannot be parsed."""

    def __init__(self, spec: str, reason: str = "") -> None:
        """Initialize the exception.

        Args:
            spec: The raw specifier that failed to parse.
            reason: Optional detail.
        """
        detail = f": {reason}" if reason else ""
        super().__init__(message=f"Invalid package specifier '{spec}'{detail}")
        self.spec = spec


class PackageNotFoundError(DeptreeException):
    """Raised when a requested package does not exist."""

    def __init__(self, package_name: str) -> None:
        """Initialize the exception.

        Args:
            package_name: Name of the package that was not found.
        """
        super().__init__(message=f"Package '{package_name}' not found")
        self.package_name = package_name


class VersionNotFoundError(DeptreeException):
    """Raised when no version of a package satisfies a specifier."""

    def __init__(self, package_name: str, spec: str) -> None:
        """Initialize the exception.

        Args:
            package_name: Name of the package.
            spec: Specifier no version could satisfy.
        """
        super().__init__(
            message=f"No version of package '{package_name}' matches '{spec}'",
        )
        self.package_name = package_name
        self.spec = spec


class ShrinkwrapError(DeptreeException):
    """Raised when a shrinkwrap file cannot be read."""

    def __init__(self, path: str, reason: str) -> None:
        """Initialize the exception.

        Args:
            path: Path of the shrinkwrap file.
            reason: Why it could not be read.
        """
        super().__init__(message=f"Cannot read shrinkwrap '{path}': {reason}")
        self.path = path


class UnresolvableRequirementError(DeptreeException):
    """Raised when a requirement has no matching node and fetching failed."""

    def __init__(
        self,
        name: str,
        spec: str,
        requiring_path: Optional[list[str]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        """Initialize the exception.

        Args:
            name: Required package name.
            spec: Raw specifier that was required.
            requiring_path: Locations from the root to the requiring node.
            cause: Underlying collaborator error.
        """
        reason = f": {cause}" if cause is not None else ""
        super().__init__(
            message=f"Cannot resolve '{name}@{spec}'{reason}",
            requiring_path=requiring_path,
        )
        self.name = name
        self.spec = spec
        self.cause = cause


class OptionalDependencyFailed(UnresolvableRequirementError):
    """An optional dependency that could not be installed.

    Never raised out of the pipeline: it is logged and collected as a warning.
    """


class ConflictingPlacementError(DeptreeException):
    """Raised when the placement planner picks an illegal level.

    The planner guarantees this never happens; seeing it is a bug.
    """

    def __init__(self, name: str, location: str) -> None:
        """Initialize the exception.

        Args:
            name: Package being placed.
            location: Location the planner returned.
        """
        super().__init__(
            message=f"Refusing to place '{name}' at '{location}': not on the requiring path",
        )
        self.name = name
        self.location = location


class PeerDependencyUnmet(DeptreeException):
    """Record of a peer dependency nothing in the tree satisfies."""

    def __init__(self, location: str, name: str, required_range: str) -> None:
        """Initialize the record.

        Args:
            location: Location of the node declaring the peer dependency.
            name: Peer package name.
            required_range: Declared range.
        """
        super().__init__(
            message=f"Peer dependency '{name}@{required_range}' of '{location}' is not met",
        )
        self.location = location
        self.name = name
        self.required_range = required_range


class MissingProductionDependency(DeptreeException):
    """Record of a declared dependency that no node in the tree satisfies."""

    def __init__(self, location: str, name: str, raw_spec: str) -> None:
        """Initialize the record.

        Args:
            location: Location of the node declaring the dependency.
            name: Missing package name.
            raw_spec: Declared specifier.
        """
        super().__init__(
            message=f"Missing dependency '{name}@{raw_spec}' of '{location}'",
        )
        self.location = location
        self.name = name
        self.raw_spec = raw_spec


class DependencyResolutionError(DeptreeException):
    """Raised when dependency resolution fails for one or more requirements."""

    def __init__(
        self,
        message: str,
        errors: Optional[list[DeptreeException]] = None,
        requiring_path: Optional[list[str]] = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Error message describing the resolution failure.
            errors: The individual failures, in discovery order.
            requiring_path: Location chain of the node that was being loaded.
        """
        super().__init__(
            message=f"Dependency resolution failed: {message}",
            requiring_path=requiring_path,
        )
        self.errors = list(errors or [])
