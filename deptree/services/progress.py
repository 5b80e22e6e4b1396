"""Progress reporting for long resolution runs."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger("deptree.progress")


class ProgressTracker(ABC):
    """Hierarchical progress sink.

    Every group or item returned by :meth:`new_group` / :meth:`new_item`
    is itself a tracker and should be finished when its work is done.
    """

    @abstractmethod
    def new_group(self, name: str) -> "ProgressTracker":
        """Open a named sub-group."""
        ...

    @abstractmethod
    def new_item(self, name: str) -> "ProgressTracker":
        """Open a named leaf item."""
        ...

    @abstractmethod
    def warn(self, prefix: str, message: str) -> None:
        ...

    @abstractmethod
    def verbose(self, prefix: str, message: str) -> None:
        ...

    @abstractmethod
    def finish(self) -> None:
        ...


class NullTracker(ProgressTracker):
    """Tracker that reports nothing."""

    def new_group(self, name: str) -> "NullTracker":
        return self

    def new_item(self, name: str) -> "NullTracker":
        return self

    def warn(self, prefix: str, message: str) -> None:
        pass

    def verbose(self, prefix: str, message: str) -> None:
        pass

    def finish(self) -> None:
        pass


class LogTracker(ProgressTracker):
    """Tracker that reports through :mod:`logging`.

    Attributes:
        name: Dotted name of this group (``loadDeps.loadDep:a``).
        finished: Whether :meth:`finish` has been called.
        children: Sub-groups and items opened from this tracker.
    """

    def __init__(self, name: str = "deptree", parent: Optional["LogTracker"] = None) -> None:
        self.name = name if parent is None else f"{parent.name}.{name}"
        self.finished = False
        self.children: list[LogTracker] = []

    def new_group(self, name: str) -> "LogTracker":
        group = LogTracker(name, parent=self)
        self.children.append(group)
        logger.debug(f"[{group.name}] started")
        return group

    def new_item(self, name: str) -> "LogTracker":
        return self.new_group(name)

    def warn(self, prefix: str, message: str) -> None:
        logger.warning(f"{prefix} {message}")

    def verbose(self, prefix: str, message: str) -> None:
        logger.debug(f"{prefix} {message}")

    def finish(self) -> None:
        if self.finished:
            return
        self.finished = True
        logger.debug(f"[{self.name}] finished")
