"""sitecheck - end-to-end verification of a statically built documentation site."""

__version__ = "0.3.0"

from sitecheck.inventory import component_name, discover_pages, normalize_page_id
from sitecheck.render import RenderResult, render
from sitecheck.runner import RunSummary, ScenarioResult, verify_site

__all__ = [
    "normalize_page_id",
    "component_name",
    "discover_pages",
    "RenderResult",
    "render",
    "RunSummary",
    "ScenarioResult",
    "verify_site",
]
