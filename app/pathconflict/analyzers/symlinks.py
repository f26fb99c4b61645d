"""Symlink resolution with cycle detection and a hop limit."""

import logging
import os
from dataclasses import dataclass, replace

from pathconflict.models.executable import ExecutableInstance, ResolutionState

logger = logging.getLogger(__name__)

MAX_SYMLINK_DEPTH = 40


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of resolving one path.

    Attributes:
        state: How resolution ended.
        resolved_path: Canonical target, or None on cycle/depth limit.
        chain: Paths visited, starting with the input path.
    """

    state: ResolutionState
    resolved_path: str | None
    chain: tuple[str, ...]


class SymlinkResolver:
    """Follows symlink chains one hop at a time."""

    def __init__(self, max_depth: int = MAX_SYMLINK_DEPTH, *, enabled: bool = True) -> None:
        """Initialize the resolver.

        Args:
            max_depth: Maximum number of hops before giving up.
            enabled: When False, paths are returned unresolved with state SKIPPED.
        """
        self._max_depth = max_depth
        self._enabled = enabled

    @staticmethod
    def _canonical(path: str) -> str:
        """Return path with its parent directory fully resolved."""
        if not os.path.isabs(path):
            path = os.path.join(os.getcwd(), path)
        parent, name = os.path.split(path)
        if name in ("", os.curdir, os.pardir):
            return os.path.realpath(path)
        return os.path.join(os.path.realpath(parent), name)

    @staticmethod
    def _visit_key(path: str) -> str:
        return os.path.normcase(path)

    def resolve(self, path: str) -> Resolution:
        """Resolve a path to its final non-symlink target.

        Each hop reads one link and joins relative targets against the
        canonical form of the link's directory, so ``..`` is taken from
        where the link really lives. Revisiting a path ends with CYCLE;
        still being on a link after ``max_depth`` hops ends with
        DEPTH_EXCEEDED.

        Args:
            path: Path to resolve.

        Returns:
            Resolution describing the outcome.
        """
        if not self._enabled:
            return Resolution(state=ResolutionState.SKIPPED, resolved_path=path, chain=())

        chain = [path]
        current = self._canonical(path)
        visited = {self._visit_key(current)}

        for _ in range(self._max_depth):
            try:
                target = os.readlink(current)
            except OSError:
                # Not a link (or unreadable): current is the final target
                break

            current = self._canonical(os.path.join(os.path.dirname(current), target))
            key = self._visit_key(current)
            if key in visited:
                logger.debug("Symlink cycle at %s (from %s)", current, path)
                chain.append(current)
                return Resolution(
                    state=ResolutionState.CYCLE, resolved_path=None, chain=tuple(chain)
                )
            visited.add(key)
            chain.append(current)
        else:
            if os.path.islink(current):
                logger.debug("Symlink chain of %s exceeds %d hops", path, self._max_depth)
                return Resolution(
                    state=ResolutionState.DEPTH_EXCEEDED,
                    resolved_path=None,
                    chain=tuple(chain),
                )

        try:
            resolved = os.path.realpath(current)
        except (OSError, ValueError):
            resolved = os.path.abspath(current)
        return Resolution(
            state=ResolutionState.RESOLVED, resolved_path=resolved, chain=tuple(chain)
        )

    def resolve_instance(self, instance: ExecutableInstance) -> ExecutableInstance:
        """Return a copy of the instance with its resolution filled in."""
        resolution = self.resolve(instance.raw_path)
        return replace(
            instance,
            resolved_path=resolution.resolved_path,
            symlink_chain=resolution.chain,
            resolution_state=resolution.state,
        )
