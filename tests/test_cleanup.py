"""产物清理测试。"""

from pathlib import Path

from py_image_opt.core.artifact_store import ArtifactStore
from py_image_opt.core.registry import ArtifactRegistry
from py_image_opt.core.sweeper import CleanupSweeper
from py_image_opt.engine.batch import BatchGenerator


class TestCleanupSweeper:
    """清理器测试"""

    def test_removes_all_artifacts_and_empty_dir(self, site_root: Path, make_config):
        config = make_config(sizes=[800, 1280])
        registry = ArtifactRegistry()
        result = BatchGenerator(ArtifactStore(config, registry)).generate_all()
        paths = [a.output_path for a in result.get_artifacts()]
        assert paths and all(p.exists() for p in paths)

        removed = CleanupSweeper(config, registry).sweep()

        assert removed == len(paths)
        assert not any(p.exists() for p in paths)
        assert not (site_root / "source" / "opt-images").exists()
        assert len(registry) == 0
        assert not registry.has_processed_any()

    def test_keeps_directory_with_unrelated_files(self, site_root: Path, make_config):
        config = make_config(sizes=[800])
        BatchGenerator(ArtifactStore(config)).generate_all()
        output_dir = site_root / "source" / "opt-images"
        (output_dir / "README.md").write_text("keep me")

        removed = CleanupSweeper(config).sweep()

        assert removed == 4
        assert output_dir.is_dir()
        assert [p.name for p in output_dir.iterdir()] == ["README.md"]

    def test_nested_artifacts_and_extra_source_dirs(self, site_root: Path, make_config):
        theme_out = site_root / "themes" / "landscape" / "source" / "opt-images" / "nested"
        theme_out.mkdir(parents=True)
        (theme_out / "bg-800w.webp").write_bytes(b"x")
        (theme_out / "bg-optimized.png").write_bytes(b"x")
        config = make_config(extra_source_dirs=[Path("themes/landscape/source")])

        removed = CleanupSweeper(config).sweep()

        assert removed == 2
        assert not (site_root / "themes" / "landscape" / "source" / "opt-images").exists()
        assert (site_root / "themes" / "landscape" / "source").is_dir()

    def test_source_images_untouched(self, site_root: Path, make_config):
        config = make_config(sizes=[800])
        BatchGenerator(ArtifactStore(config)).generate_all()

        CleanupSweeper(config).sweep()

        assert sorted(p.name for p in (site_root / "source" / "img").iterdir()) == [
            "broken.jpg",
            "cat.jpg",
            "logo.png",
        ]

    def test_nothing_to_clean(self, make_config):
        assert CleanupSweeper(make_config()).sweep() == 0
