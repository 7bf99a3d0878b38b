"""变体规划与产物命名测试。"""

from pathlib import Path

import pytest

from py_image_opt.core.planner import VariantPlanner, plan_variants
from py_image_opt.models.optimization_config import OptimizationConfig
from py_image_opt.models.variant import SourceImage, VariantKind, VariantSpec
from py_image_opt.utils.naming_helpers import FileNamingStrategy, is_artifact_path


class TestVariantPlanner:
    """变体规划器测试"""

    def test_fallback_first_then_ascending_widths(self):
        """回退变体在前，响应式变体宽度升序"""
        specs = plan_variants("cat", ".jpg", [1920, 800, 1280])

        assert specs[0].kind == VariantKind.FALLBACK
        assert [s.width for s in specs[1:]] == [800, 1280, 1920]
        assert [s.filename for s in specs] == [
            "cat-optimized.jpg",
            "cat-800w.webp",
            "cat-1280w.webp",
            "cat-1920w.webp",
        ]

    def test_exactly_one_fallback(self):
        specs = plan_variants("cat", ".png", [800, 800, 1280])

        assert sum(1 for s in specs if s.kind == VariantKind.FALLBACK) == 1
        assert len(specs) == 3

    def test_no_sizes_plans_only_fallback(self):
        specs = plan_variants("cat", ".jpg", [])

        assert len(specs) == 1
        assert specs[0].filename == "cat-optimized.jpg"

    def test_plan_does_not_touch_filesystem(self):
        """源图不存在时也能规划"""
        config = OptimizationConfig(sizes=[800])
        source = SourceImage(path=Path("/nonexistent/dir/Photo.JPG"))

        specs = VariantPlanner().plan(source, config)

        assert [s.filename for s in specs] == ["Photo-optimized.jpg", "Photo-800w.webp"]

    def test_plan_is_deterministic(self):
        assert plan_variants("a", ".gif", [800, 1280]) == plan_variants(
            "a", ".gif", [1280, 800]
        )

    def test_target_formats(self):
        fallback, responsive = plan_variants("cat", ".jpeg", [800])

        assert fallback.target_format == "JPEG"
        assert fallback.mime_type == "image/jpeg"
        assert responsive.target_format == "WEBP"
        assert responsive.mime_type == "image/webp"

    def test_invalid_spec_rejected(self):
        with pytest.raises(ValueError):
            VariantSpec(base_name="cat", kind=VariantKind.RESPONSIVE, original_ext=".jpg")
        with pytest.raises(ValueError):
            VariantSpec(
                base_name="cat", kind=VariantKind.FALLBACK, width=800, original_ext=".jpg"
            )


class TestFileNamingStrategy:
    """产物命名测试"""

    def test_variant_filenames_are_recognized(self):
        responsive = VariantSpec(
            base_name="cat", kind=VariantKind.RESPONSIVE, width=800, original_ext=".jpg"
        )
        fallback = VariantSpec(base_name="cat", kind=VariantKind.FALLBACK, original_ext=".jpg")

        assert FileNamingStrategy.parse_artifact_name(responsive.filename) == ("cat", 800)
        assert FileNamingStrategy.parse_artifact_name(fallback.filename) == ("cat", None)

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("cat-800w.webp", ("cat", 800)),
            ("my-cat-1280w.webp", ("my-cat", 1280)),
            ("cat-optimized.png", ("cat", None)),
            ("cat.jpg", None),
            ("cat-800w.jpg", None),
            ("notes.txt", None),
        ],
    )
    def test_parse_artifact_name(self, filename, expected):
        assert FileNamingStrategy.parse_artifact_name(filename) == expected

    def test_is_artifact_path(self):
        assert is_artifact_path(Path("source/opt-images/cat-800w.webp"))
        assert not is_artifact_path(Path("source/opt-images/README.md"))
