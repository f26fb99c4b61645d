"""Advisory text for conflicts."""

from pathconflict.analyzers.classifier import manager_names
from pathconflict.models.conflict import ConflictCategory
from pathconflict.models.executable import ExecutableGroup

TEMPLATES: dict[ConflictCategory, str] = {
    ConflictCategory.WSL_VS_WINDOWS: (
        "{name} is available both inside WSL and from Windows. "
        "Use the WSL build ({active}) and drop the Windows directories from the WSL PATH "
        "(appendWindowsPath=false in /etc/wsl.conf)."
    ),
    ConflictCategory.MULTIPLE_VERSION_MANAGERS: (
        "{name} is managed by several version managers ({managers}). "
        "Consolidate on one of them and remove the others' shims from PATH."
    ),
    ConflictCategory.VERSION_MANAGER_VS_SYSTEM: (
        "{name} is provided by {managers} and by a system install. "
        "Make sure the {managers} directory comes first in PATH, or pin the version explicitly."
    ),
    ConflictCategory.PACKAGE_MANAGER_VS_SYSTEM: (
        "{name} is installed by {managers} and by the system. "
        "Keep one installation, or order PATH so the one you want ({active}) comes first."
    ),
    ConflictCategory.DUPLICATE_VERSIONS: (
        "Several versions of {name} are installed ({versions}). "
        "Remove the unused ones or call the one you need by its full path."
    ),
    ConflictCategory.SHADOWED_BINARY: (
        "{name} in {active} shadows {count} other cop{plural}. "
        "Remove the redundant copies if they are not needed."
    ),
}


class RecommendationEngine:
    """Maps conflict categories to advisory text."""

    def recommend(self, category: ConflictCategory, group: ExecutableGroup) -> str:
        """Render the recommendation for a classified group.

        Args:
            category: Category of the conflict.
            group: The conflicting group.

        Returns:
            Recommendation text.
        """
        managers = sorted(
            manager_names(group, version_managers=True)
            | manager_names(group, version_managers=False)
        )
        versions = []
        for instance in group.instances:
            label = str(instance.version) if instance.version else "unknown"
            if label not in versions:
                versions.append(label)
        shadowed = len(group.shadowed)
        return TEMPLATES[category].format(
            name=group.binary_name,
            active=group.active.raw_path,
            managers=", ".join(managers) or "a manager",
            versions=", ".join(versions),
            count=shadowed,
            plural="y" if shadowed == 1 else "ies",
        )
