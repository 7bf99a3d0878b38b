"""产物存储、编解码与批量生成测试。"""

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from py_image_opt.core.artifact_store import ArtifactStore
from py_image_opt.core.codec import PillowCodec, constrain_width
from py_image_opt.core.planner import plan_variants
from py_image_opt.core.registry import ArtifactRegistry
from py_image_opt.engine.batch import BatchGenerator
from py_image_opt.exceptions import ProcessingError, UnsupportedFormatError
from py_image_opt.models.variant import SourceImage


class TestCodec:
    """编解码器测试"""

    @pytest.mark.parametrize(
        ("original", "target", "expected"),
        [
            ((2000, 1000), 800, (800, 400)),
            ((2000, 1000), 2000, (2000, 1000)),
            ((2000, 1000), 4000, (2000, 1000)),
            ((2000, 1000), None, (2000, 1000)),
            ((3, 1000), 1, (1, 333)),
        ],
    )
    def test_constrain_width(self, original, target, expected):
        assert constrain_width(original, target) == expected

    def test_encode_responsive_webp(self, site_root: Path):
        source = SourceImage(path=site_root / "source" / "img" / "cat.jpg")
        spec = plan_variants("cat", ".jpg", [800])[1]

        encoded = PillowCodec().encode(source, spec, 80)

        with Image.open(BytesIO(encoded.data)) as img:
            assert img.format == "WEBP"
            assert img.size == (800, 400)
        assert encoded.original_dimensions == (2000, 1000)

    def test_encode_transparent_png_fallback(self, site_root: Path):
        source = SourceImage(path=site_root / "source" / "img" / "logo.png")
        spec = plan_variants("logo", ".png", [])[0]

        encoded = PillowCodec().encode(source, spec, 80)

        with Image.open(BytesIO(encoded.data)) as img:
            assert img.format == "PNG"
            assert img.mode == "RGBA"
            assert img.size == (300, 200)

    def test_encode_corrupt_source_raises(self, site_root: Path):
        source = SourceImage(path=site_root / "source" / "img" / "broken.jpg")
        spec = plan_variants("broken", ".jpg", [])[0]

        with pytest.raises(UnsupportedFormatError):
            PillowCodec().encode(source, spec, 80)

    def test_source_dimensions(self, site_root: Path):
        assert SourceImage(path=site_root / "source" / "img" / "cat.jpg").dimensions == (
            2000,
            1000,
        )
        assert SourceImage(path=site_root / "source" / "img" / "broken.jpg").dimensions is None


class TestArtifactStore:
    """产物存储测试"""

    def test_process_image_writes_all_variants(self, site_root: Path, make_config):
        config = make_config(sizes=[800, 1280])
        store = ArtifactStore(config)

        result = store.process_image(site_root / "source" / "img" / "cat.jpg")

        assert result.success
        output_dir = site_root / "source" / "opt-images"
        assert sorted(p.name for p in output_dir.iterdir()) == [
            "cat-1280w.webp",
            "cat-800w.webp",
            "cat-optimized.jpg",
        ]
        assert [a.public_path for a in result.artifacts] == [
            "opt-images/cat-optimized.jpg",
            "opt-images/cat-800w.webp",
            "opt-images/cat-1280w.webp",
        ]
        with Image.open(output_dir / "cat-optimized.jpg") as img:
            assert img.format == "JPEG"
            assert img.size == (2000, 1000)

    def test_never_upscales(self, site_root: Path, make_config):
        """目标宽度大于原图时输出原宽"""
        store = ArtifactStore(make_config(sizes=[800, 4000]))

        result = store.process_image(site_root / "source" / "img" / "cat.jpg")

        widths = {a.spec.width: a.dimensions for a in result.artifacts if a.spec.width}
        assert widths[800] == (800, 400)
        assert widths[4000] == (2000, 1000)
        for artifact in result.artifacts:
            assert artifact.dimensions[0] <= 2000

    def test_skip_existing_reuses_files(self, site_root: Path, make_config, counting_codec):
        """第二次运行不调用编解码器"""
        config = make_config(sizes=[800, 1280])
        image = site_root / "source" / "img" / "cat.jpg"
        ArtifactStore(config).process_image(image)
        before = {
            p.name: p.read_bytes() for p in (site_root / "source" / "opt-images").iterdir()
        }

        result = ArtifactStore(config, codec=counting_codec).process_image(image)

        assert counting_codec.calls == 0
        assert result.success
        assert all(a.cached for a in result.artifacts)
        after = {
            p.name: p.read_bytes() for p in (site_root / "source" / "opt-images").iterdir()
        }
        assert after == before

    def test_skip_existing_disabled_reencodes(
        self, site_root: Path, make_config, counting_codec
    ):
        image = site_root / "source" / "img" / "cat.jpg"
        ArtifactStore(make_config(sizes=[800])).process_image(image)

        store = ArtifactStore(
            make_config(sizes=[800], skip_existing=False), codec=counting_codec
        )
        result = store.process_image(image)

        assert counting_codec.calls == 2
        assert not any(a.cached for a in result.artifacts)

    def test_corrupt_image_yields_no_artifacts(self, site_root: Path, make_config):
        store = ArtifactStore(make_config(sizes=[800]))

        result = store.process_image(site_root / "source" / "img" / "broken.jpg")

        assert not result.success
        assert result.artifacts == []
        assert result.error
        assert not (site_root / "source" / "opt-images" / "broken-optimized.jpg").exists()

    def test_missing_image(self, site_root: Path, make_config):
        result = ArtifactStore(make_config()).process_image(site_root / "missing.jpg")

        assert not result.success

    def test_in_memory_mode(self, site_root: Path, make_config):
        """persist=False 时不写磁盘，产物字节随结果返回"""
        registry = ArtifactRegistry()
        store = ArtifactStore(make_config(sizes=[800], persist=False), registry)

        result = store.process_image(site_root / "source" / "img" / "cat.jpg")

        assert result.success
        assert not (site_root / "source" / "opt-images").exists()
        assert all(a.data for a in result.artifacts)
        assert registry.has_artifact("opt-images/cat-800w.webp")
        assert registry.is_processed(site_root / "source" / "img" / "cat.jpg")
        assert registry.get_dimensions("cat") == (2000, 1000)

    def test_write_failure_raises_processing_error(self, site_root: Path, make_config):
        """产物目录被同名文件占用时写入失败"""
        (site_root / "source" / "opt-images").write_text("occupied")
        store = ArtifactStore(make_config(sizes=[800]))
        source = SourceImage(path=site_root / "source" / "img" / "cat.jpg")

        with pytest.raises(ProcessingError):
            store.ensure(source, plan_variants("cat", ".jpg", [800]))

        assert not store.process_image(source.path).success

    def test_partial_failure_leaves_nothing_behind(self, site_root: Path, make_config):
        """回退产物写入后响应式变体失败：不登记、不留下文件"""

        class ResponsiveFailingCodec(PillowCodec):
            def encode(self, source, spec, quality):
                if spec.is_responsive:
                    raise ProcessingError("编码失败", source.path)
                return super().encode(source, spec, quality)

        registry = ArtifactRegistry()
        store = ArtifactStore(make_config(sizes=[800]), registry, codec=ResponsiveFailingCodec())

        result = store.process_image(site_root / "source" / "img" / "cat.jpg")

        assert not result.success
        assert registry.artifacts == frozenset()
        assert not registry.is_processed(site_root / "source" / "img" / "cat.jpg")
        assert not (site_root / "source" / "opt-images" / "cat-optimized.jpg").exists()


class TestBatchGenerator:
    """批量生成测试"""

    def test_generate_all_isolates_failures(self, site_root: Path, make_config):
        config = make_config(sizes=[800])
        generator = BatchGenerator(ArtifactStore(config))

        result = generator.generate_all()

        assert result.success
        assert result.get_total_count() == 3
        assert result.get_success_count() == 2
        failed = result.get_failed_items()
        assert [r.source_path.name for r in failed] == ["broken.jpg"]
        # 结果按源图路径排序
        assert [r.source_path.name for r in result.results] == [
            "broken.jpg",
            "cat.jpg",
            "logo.png",
        ]

    def test_generated_variants_are_not_reprocessed(self, site_root: Path, make_config):
        config = make_config(sizes=[800])
        BatchGenerator(ArtifactStore(config)).generate_all()

        result = BatchGenerator(ArtifactStore(config)).generate_all()

        sources = [r.source_path for r in result.results]
        assert all("opt-images" not in p.parts for p in sources)

    def test_outputs_for_host(self, site_root: Path, make_config):
        config = make_config(sizes=[800], persist=False)

        outputs = BatchGenerator(ArtifactStore(config)).generate_all().get_outputs()

        paths = sorted(path for path, _ in outputs)
        assert paths == [
            "opt-images/cat-800w.webp",
            "opt-images/cat-optimized.jpg",
            "opt-images/logo-800w.webp",
            "opt-images/logo-optimized.png",
        ]
        assert all(isinstance(data, bytes) and data for _, data in outputs)
