"""srcset 与 sizes 属性生成。"""

from collections.abc import Iterable


def build_sizes_attribute(widths: Iterable[int]) -> str | None:
    """根据配置宽度生成 sizes 属性

    每个宽度一个媒体条件子句，最后追加最大宽度作为兜底。
    例如 [800, 1280, 1920] 生成::

        (max-width: 1279px) 800px, (min-width: 1280px) and (max-width: 1919px) 1280px,
        (min-width: 1920px) 1920px, 1920px

    Args:
        widths: 配置的目标宽度

    Returns:
        str | None: sizes 属性值，没有宽度时为 None
    """
    ordered = sorted(set(widths))
    if not ordered:
        return None
    if len(ordered) == 1:
        return "100vw"

    clauses = [f"(max-width: {ordered[1] - 1}px) {ordered[0]}px"]
    for current, following in zip(ordered[1:-1], ordered[2:]):
        clauses.append(
            f"(min-width: {current}px) and (max-width: {following - 1}px) {current}px"
        )
    last = ordered[-1]
    clauses.append(f"(min-width: {last}px) {last}px")
    clauses.append(f"{last}px")
    return ", ".join(clauses)


def build_srcset(candidates: Iterable[tuple[int, str]]) -> str:
    """生成 "url 800w, url 1280w" 形式的 srcset，宽度升序"""
    return ", ".join(f"{url} {width}w" for width, url in sorted(candidates))
