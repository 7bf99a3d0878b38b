"""测试配置文件。

提供测试所需的 fixtures：临时站点目录、合成图片和计数编解码器。
"""

import tempfile
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from py_image_opt.config import reset_config
from py_image_opt.core.codec import PillowCodec
from py_image_opt.models.optimization_config import OptimizationConfig


def _create_photo(path: Path, size: tuple[int, int]) -> None:
    """创建带色块的 JPEG，避免纯色图被过度压缩"""
    img = Image.new("RGB", size, color="white")
    draw = ImageDraw.Draw(img)
    width, height = size
    for i in range(40):
        x, y = (i * 53) % width, (i * 37) % height
        color = (i * 5 % 256, i * 7 % 256, i * 11 % 256)
        draw.rectangle([x, y, x + width // 10, y + height // 10], fill=color)
    path.parent.mkdir(parents=True, exist_ok=True)
    img.save(path, "JPEG", quality=90)


def _create_transparent_png(path: Path, size: tuple[int, int]) -> None:
    img = Image.new("RGBA", size, color=(0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    for i in range(5):
        draw.ellipse([i * 30, i * 20, i * 30 + 80, i * 20 + 80], fill=(255, i * 40, 0, 180))
    path.parent.mkdir(parents=True, exist_ok=True)
    img.save(path, "PNG")


class CountingCodec(PillowCodec):
    """记录调用次数的编解码器"""

    def __init__(self):
        super().__init__()
        self.calls = 0

    def encode(self, source, spec, quality):
        self.calls += 1
        return super().encode(source, spec, quality)


@pytest.fixture(autouse=True)
def fresh_app_config():
    """每个测试使用不受其他测试影响的全局默认配置"""
    yield reset_config()
    reset_config()


@pytest.fixture
def temp_dir():
    """临时目录fixture"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def site_root(temp_dir: Path) -> Path:
    """最小站点：source/img 下的 JPEG、透明 PNG 与损坏文件，以及空的 public/"""
    _create_photo(temp_dir / "source" / "img" / "cat.jpg", (2000, 1000))
    _create_transparent_png(temp_dir / "source" / "img" / "logo.png", (300, 200))
    (temp_dir / "source" / "img" / "broken.jpg").write_bytes(b"this is not an image")
    (temp_dir / "public").mkdir()
    return temp_dir


@pytest.fixture
def make_config(site_root: Path):
    """以 site_root 为根目录创建配置的工厂"""

    def factory(**kwargs) -> OptimizationConfig:
        kwargs.setdefault("root_dir", site_root)
        return OptimizationConfig(**kwargs)

    return factory


@pytest.fixture
def counting_codec() -> CountingCodec:
    return CountingCodec()
