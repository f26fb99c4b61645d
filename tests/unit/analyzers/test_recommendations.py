"""Unit tests for conflict recommendations."""

from collections.abc import Callable

import pytest
from pathconflict.analyzers.recommendations import TEMPLATES, RecommendationEngine
from pathconflict.models.conflict import ConflictCategory
from pathconflict.models.executable import ExecutableGroup, ExecutableInstance

MakeInstance = Callable[..., ExecutableInstance]


class TestRecommendationEngine:
    """Tests for RecommendationEngine.recommend."""

    def test_every_category_has_a_template(self) -> None:
        """Each category maps to advisory text."""
        assert set(TEMPLATES) == set(ConflictCategory)

    @pytest.mark.parametrize("category", list(ConflictCategory))
    def test_renders_without_placeholders(
        self, make_instance: MakeInstance, category: ConflictCategory
    ) -> None:
        """Rendered text names the binary and leaves no placeholders."""
        group = ExecutableGroup(
            binary_name="node",
            instances=(
                make_instance("/home/u/.nvm/bin/node", 0, version="20.1.0", manager="nvm:vm"),
                make_instance("/usr/bin/node", 1, version="18.19.0"),
            ),
        )

        text = RecommendationEngine().recommend(category, group)

        assert "node" in text
        assert "{" not in text

    def test_manager_and_versions_listed(self, make_instance: MakeInstance) -> None:
        """Manager names and versions are filled in."""
        group = ExecutableGroup(
            binary_name="python",
            instances=(
                make_instance(
                    "/home/u/.pyenv/shims/python", 0, version="3.12.1", manager="pyenv:vm"
                ),
                make_instance("/usr/bin/python", 1, version="3.10.12"),
            ),
        )
        engine = RecommendationEngine()

        vm_text = engine.recommend(ConflictCategory.VERSION_MANAGER_VS_SYSTEM, group)
        dup_text = engine.recommend(ConflictCategory.DUPLICATE_VERSIONS, group)

        assert "pyenv" in vm_text
        assert "3.12.1, 3.10.12" in dup_text

    def test_shadowed_count(self, make_instance: MakeInstance) -> None:
        """The shadowed count is pluralized."""
        group = ExecutableGroup(
            binary_name="ls",
            instances=(
                make_instance("/usr/local/bin/ls", 0),
                make_instance("/usr/bin/ls", 1),
                make_instance("/bin/ls", 2),
            ),
        )

        text = RecommendationEngine().recommend(ConflictCategory.SHADOWED_BINARY, group)

        assert "2 other copies" in text
