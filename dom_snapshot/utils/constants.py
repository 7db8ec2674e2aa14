"""
Shared constants for the snapshot pipeline.

Contains common configuration values used across multiple modules.
"""

# Default user agent string for all HTTP requests
# Used by both the browser renderer and asset fetcher
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

# Raster image load timeout in milliseconds
DEFAULT_IMAGE_TIMEOUT_MS = 5000

# Total timeout for a single HTTP request in seconds
DEFAULT_REQUEST_TIMEOUT = 30

# Default page load timeout in milliseconds (for Playwright)
DEFAULT_PAGE_TIMEOUT = 30000

# Id of the off-tree staging container used while inlining
SANDBOX_ID = "dom-snapshot-sandbox"

# Attributes stamped onto live elements by the browser renderer
STAMP_BACKGROUND_ATTR = "data-snapshot-bg"
STAMP_WIDTH_ATTR = "data-snapshot-width"
STAMP_HEIGHT_ATTR = "data-snapshot-height"
STAMP_ATTR_PREFIX = "data-snapshot-"

SVG_NS = "http://www.w3.org/2000/svg"
XHTML_NS = "http://www.w3.org/1999/xhtml"

SVG_DATA_PREFIX = "data:image/svg+xml;charset=utf-8,"
