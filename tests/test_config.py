"""配置、配置构建与主题发现测试。"""

from pathlib import Path

import pytest

from py_image_opt.config import get_config, reset_config
from py_image_opt.core.discovery import find_source_images, resolve_theme_source_dir
from py_image_opt.engine.config import ConfigBuilder
from py_image_opt.exceptions import ValidationError
from py_image_opt.models.optimization_config import OptimizationConfig


class TestOptimizationConfig:
    """优化配置模型测试"""

    def test_defaults(self):
        config = OptimizationConfig()

        assert config.enable is True
        assert config.quality == 80
        assert config.formats == ["webp", "jpeg"]
        assert config.sizes == [800, 1280, 1920]
        assert config.source_dirs == [Path("source")]
        assert config.skip_existing is True
        assert config.verbose is False
        assert config.replace_img_tags is True
        assert config.output_dir == Path("source") / "opt-images"

    def test_camel_case_keys(self):
        config = OptimizationConfig.model_validate(
            {"skipExisting": False, "replaceImgTags": False, "sourceDirs": ["src", "assets"]}
        )

        assert config.skip_existing is False
        assert config.replace_img_tags is False
        assert config.source_dirs == [Path("src"), Path("assets")]

    def test_sizes_normalized(self):
        assert OptimizationConfig(sizes=[1280, 800, 800]).sizes == [800, 1280]

    def test_formats_normalized(self):
        assert OptimizationConfig(formats=["WEBP", "jpg", "jpeg"]).formats == ["webp", "jpeg"]

    @pytest.mark.parametrize(
        "values",
        [
            {"quality": 0},
            {"quality": 101},
            {"sizes": [0, 800]},
            {"formats": ["bmp"]},
            {"source_dirs": []},
            {"max_workers": 0},
        ],
    )
    def test_invalid_values(self, values):
        with pytest.raises(ValueError):
            OptimizationConfig(**values)

    def test_frozen(self):
        config = OptimizationConfig()
        with pytest.raises(ValueError):
            config.quality = 10

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("IMGOPT_QUALITY", "65")
        monkeypatch.setenv("IMGOPT_MAX_WORKERS", "2")
        reset_config()

        assert get_config().optimization.QUALITY == 65
        config = OptimizationConfig()
        assert config.quality == 65
        assert config.max_workers == 2


class TestConfigBuilder:
    """配置构建器测试"""

    def test_build_from_site_config(self, temp_dir: Path):
        config = ConfigBuilder().build(
            root_dir=temp_dir,
            site_config={"title": "blog", "image_opt": {"quality": 70, "sizes": [640]}},
        )

        assert config.quality == 70
        assert config.sizes == [640]
        assert config.root_dir == temp_dir

    def test_missing_fields_use_defaults(self, temp_dir: Path):
        config = ConfigBuilder().build({"quality": None}, temp_dir)

        assert config.quality == 80
        assert config.sizes == [800, 1280, 1920]

    def test_invalid_config_raises(self, temp_dir: Path):
        with pytest.raises(ValidationError) as exc_info:
            ConfigBuilder().build({"quality": 500}, temp_dir)

        assert "quality" in exc_info.value.message

    def test_non_mapping_config_raises(self, temp_dir: Path):
        with pytest.raises(ValidationError):
            ConfigBuilder().build(site_config={"image_opt": "yes"}, root_dir=temp_dir)

    def test_build_or_default(self, temp_dir: Path):
        config = ConfigBuilder().build_or_default({"sizes": ["abc"]}, temp_dir)

        assert config.sizes == [800, 1280, 1920]
        assert config.root_dir == temp_dir

    def test_theme_dir_added(self, temp_dir: Path):
        (temp_dir / "themes" / "next" / "source").mkdir(parents=True)

        config = ConfigBuilder().build({}, temp_dir, site_config={"theme": "next"})

        assert config.extra_source_dirs == [Path("themes/next/source")]
        assert temp_dir / "themes" / "next" / "source" in config.all_source_dirs

    def test_theme_discovery_disabled(self, temp_dir: Path):
        (temp_dir / "themes" / "next" / "source").mkdir(parents=True)

        config = ConfigBuilder().build({}, temp_dir, discover_theme=False)

        assert config.extra_source_dirs == []


class TestThemeDiscovery:
    """主题目录发现测试"""

    @pytest.fixture
    def themes(self, temp_dir: Path) -> Path:
        for name in ("landscape", "butterfly", "next"):
            (temp_dir / "themes" / name / "source").mkdir(parents=True)
        return temp_dir

    def test_explicit_theme_wins(self, themes: Path):
        assert resolve_theme_source_dir(themes, "next", {"theme": "landscape"}) == (
            themes / "themes" / "next" / "source"
        )

    def test_site_config_theme(self, themes: Path):
        assert resolve_theme_source_dir(themes, site_config={"theme": "landscape"}) == (
            themes / "themes" / "landscape" / "source"
        )

    def test_first_theme_directory(self, themes: Path):
        assert resolve_theme_source_dir(themes) == themes / "themes" / "butterfly" / "source"

    def test_missing_theme(self, temp_dir: Path):
        assert resolve_theme_source_dir(temp_dir) is None
        assert resolve_theme_source_dir(temp_dir, "ghost") is None


class TestSourceDiscovery:
    """源图发现测试"""

    def test_finds_images_and_excludes_artifacts(self, site_root: Path, make_config):
        artifacts = site_root / "source" / "opt-images"
        artifacts.mkdir()
        (artifacts / "cat-800w.webp").write_bytes(b"x")
        (site_root / "source" / "notes.txt").write_text("not an image")
        (site_root / "source" / "img" / "Photo.JPEG").write_bytes(b"x")

        images = find_source_images(make_config())

        assert [p.name for p in images] == ["Photo.JPEG", "broken.jpg", "cat.jpg", "logo.png"]

    def test_extra_source_dirs(self, site_root: Path, make_config):
        theme_source = site_root / "themes" / "next" / "source" / "images"
        theme_source.mkdir(parents=True)
        (theme_source / "bg.png").write_bytes(b"x")

        images = find_source_images(
            make_config(extra_source_dirs=[Path("themes/next/source")])
        )

        assert theme_source / "bg.png" in images
        assert len(images) == 4

    def test_missing_source_dir(self, make_config):
        assert find_source_images(make_config(source_dirs=["nope"])) == []
