"""处理引擎模块。

包含批量生成、并发执行和配置构建等处理逻辑。
"""

from .batch import BatchGenerator
from .concurrent_executor import ConcurrentExecutor
from .config import ConfigBuilder


__all__ = [
    "BatchGenerator",
    "ConcurrentExecutor",
    "ConfigBuilder",
]
