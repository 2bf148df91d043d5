"""Page inventory: which documentation pages a run should verify."""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from sitecheck.logging import get_logger

logger = get_logger(__name__)

COMPONENTS_DIR = "components"
EXCLUDED_DIRS = ("overview",)
INTERNAL_MARKER = "_util"
MAX_COMPONENT_DEPTH = 3

# Trailing "/index", ".$tab-design", locale suffix and ".md" extension
_SOURCE_SUFFIX = re.compile(r"(/index)?(\.\$tab-design)?(\.zh-cn|\.en-us)?\.md$", re.IGNORECASE)


def normalize_page_id(path: str) -> str:
    """Turn a markdown source path into a page identifier.

    ``components/button/index.en-US.md`` and ``components/button/index.zh-CN.md``
    both become ``components/button``. Identifiers come back unchanged.
    """
    return _SOURCE_SUFFIX.sub("", path.replace("\\", "/"))


def component_name(identifier: str) -> str:
    """Name used to match a component page heading.

    Every hyphen is dropped, not just the first, so multi-word names such as
    ``date-picker`` match their single-word heading ``DatePicker``.

    Examples:
        >>> component_name("components/button-cn")
        'button'
        >>> component_name("components/Date-Picker")
        'datepicker'
    """
    last = identifier.split("/")[-1].lower()
    return last.replace("-cn", "", 1).replace("-", "")


def _iter_sources(root: Path, components_dir: str, exclude_dirs: Iterable[str]) -> Iterable[str]:
    base = root / components_dir
    if not base.is_dir():
        return
    excluded = set(exclude_dirs)
    for source in base.glob("*/*.md"):
        if source.parent.name in excluded:
            continue
        if source.name.startswith(".") or source.parent.name.startswith("."):
            continue
        if not source.is_file():
            continue
        yield source.relative_to(root).as_posix()


def discover_pages(
    root: str | Path,
    *,
    components_dir: str = COMPONENTS_DIR,
    exclude_dirs: Iterable[str] = EXCLUDED_DIRS,
    internal_marker: str = INTERNAL_MARKER,
) -> list[str]:
    """Collect the page identifiers for every component source file under ``root``.

    Args:
        root: Documentation source root (contains ``components/``).
        components_dir: Directory holding one subdirectory per component.
        exclude_dirs: Component subdirectories to skip.
        internal_marker: Identifiers containing this are internal helpers, not pages.

    Returns:
        Sorted, de-duplicated identifiers. Empty when the root or the
        components directory does not exist.
    """
    pages = {
        normalize_page_id(source)
        for source in _iter_sources(Path(root), components_dir, exclude_dirs)
    }
    result = sorted(page for page in pages if internal_marker not in page)
    logger.debug("pages_discovered", root=str(root), count=len(result))
    return result


def top_level_components(pages: Iterable[str], max_depth: int = MAX_COMPONENT_DEPTH) -> list[str]:
    """Keep component pages, dropping nested sub-pages."""
    return [page for page in pages if len(page.split("/")) < max_depth]
