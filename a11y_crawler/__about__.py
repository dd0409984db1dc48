"""Metadata for a11y_crawler."""

__all__ = [
    "__title__",
    "__version__",
    "__description__",
    "__credits__",
    "__requires_python__",
]

__title__ = "a11y_crawler"
__version__ = "0.1.0"
__description__ = (
    "Crawl a website's internal pages and report accessibility violations found by axe-core and Lighthouse."
)
__credits__ = [
    {"name": "Matthew D. Martin", "email": "matthewdeanmartin@users.noreply.github.com"}
]
__requires_python__ = ">=3.9"
