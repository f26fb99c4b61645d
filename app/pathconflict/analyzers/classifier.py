"""Conflict classification.

Assigns each multi-instance group exactly one ConflictCategory: the first
rule that matches, in the order the rules are listed below.
"""

import logging

from pathconflict.models.conflict import ConflictCategory
from pathconflict.models.executable import ExecutableGroup, ExecutableInstance
from pathconflict.models.path_entry import OriginTag

logger = logging.getLogger(__name__)


def _version_key(instance: ExecutableInstance) -> tuple[int, int, int] | str | None:
    return instance.version.key if instance.version else None


def distinct_versions(group: ExecutableGroup) -> set[tuple[int, int, int] | str | None]:
    """Return the distinct version identities in a group.

    Unknown versions only count as a distinct value when at least one
    instance has a known version; a group with no versions at all has
    a single (unknown) value.
    """
    return {_version_key(i) for i in group.instances}


def manager_names(group: ExecutableGroup, *, version_managers: bool) -> set[str]:
    """Return the distinct version-manager or package-manager names in a group."""
    names = set()
    for instance in group.instances:
        manager = instance.manager
        if manager is None:
            continue
        if manager.is_version_manager == version_managers:
            names.add(manager.name)
    return names


class ConflictClassifier:
    """Rule-based category assignment for executable groups."""

    def classify(self, group: ExecutableGroup) -> ConflictCategory:
        """Classify a group with two or more instances.

        Rules, first match wins:

        1. WSL_VS_WINDOWS: a WSL-native instance and a Windows-side one.
        2. MULTIPLE_VERSION_MANAGERS: two or more distinct version managers.
        3. VERSION_MANAGER_VS_SYSTEM: one version manager and at least one
           instance without a manager.
        4. PACKAGE_MANAGER_VS_SYSTEM: one package manager and at least one
           instance without a manager.
        5. DUPLICATE_VERSIONS: same manager attribution, different versions.
        6. SHADOWED_BINARY: anything else.

        Args:
            group: Group to classify.

        Returns:
            The matching category.

        Raises:
            ValueError: If the group has fewer than two instances.
        """
        if not group.has_conflict:
            msg = f"Cannot classify '{group.binary_name}': only one instance"
            raise ValueError(msg)

        instances = group.instances
        tags = {i.origin_tag for i in instances}
        if OriginTag.WSL in tags and any(t.is_windows for t in tags):
            category = ConflictCategory.WSL_VS_WINDOWS
        else:
            version_managers = manager_names(group, version_managers=True)
            package_managers = manager_names(group, version_managers=False)
            has_unmanaged = any(i.manager is None for i in instances)

            if len(version_managers) >= 2:
                category = ConflictCategory.MULTIPLE_VERSION_MANAGERS
            elif len(version_managers) == 1 and has_unmanaged:
                category = ConflictCategory.VERSION_MANAGER_VS_SYSTEM
            elif len(package_managers) == 1 and has_unmanaged:
                category = ConflictCategory.PACKAGE_MANAGER_VS_SYSTEM
            elif (
                len({i.manager_name for i in instances}) == 1
                and len(distinct_versions(group)) > 1
            ):
                category = ConflictCategory.DUPLICATE_VERSIONS
            else:
                category = ConflictCategory.SHADOWED_BINARY

        logger.debug("Classified %s as %s", group.binary_name, category.value)
        return category
