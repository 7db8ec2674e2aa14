"""
URL and data-reference utilities for the snapshot pipeline.

Provides URL resolution, origin comparison, CSS url() extraction and
data URL encoding.
"""

import base64
import mimetypes
import re
from typing import Optional
from urllib.parse import urlparse, urljoin, quote


# CSS url() payload, quoted or bare
CSS_URL_PATTERN = re.compile(r'url\(\s*(["\']?)(.*?)\1\s*\)', re.IGNORECASE | re.DOTALL)

# SVG file references, tolerant of query strings
SVG_URL_PATTERN = re.compile(r'\.svg(\?.*)?$', re.IGNORECASE)

# Existing percent escapes
PERCENT_ESCAPE_PATTERN = re.compile(r'%[0-9A-Fa-f]{2}')

# Characters left untouched by encodeURI-style escaping
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#[]"

# Characters left untouched by encodeURIComponent-style escaping
_COMPONENT_SAFE = "-_.!~*'()"

USE_CREDENTIALS = "use-credentials"
ANONYMOUS = "anonymous"


def resolve_url(url: str, base_url: Optional[str] = None) -> str:
    """
    Resolve a possibly relative reference against the document URL.
    
    Args:
        url: Reference to resolve
        base_url: Document URL, if known
        
    Returns:
        Absolute URL, or the stripped reference when it cannot be resolved
    """
    url = url.strip()
    if url.startswith('data:'):
        return url
    if url.startswith('//'):
        scheme = urlparse(base_url).scheme if base_url else 'https'
        return f"{scheme or 'https'}:{url}"
    if base_url:
        return urljoin(base_url, url)
    return url


def get_origin(url: str) -> Optional[str]:
    """
    Get the scheme://host[:port] origin of an absolute URL.
    
    Returns:
        Origin string, or None for opaque or relative references
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme.lower()}://{parsed.netloc.lower()}"


def get_cross_origin_mode(url: str, base_url: Optional[str] = None) -> str:
    """
    Decide the credentials mode for loading a reference.
    
    Same-origin references send credentials; everything else, including
    references that cannot be parsed, loads anonymously.
    
    Args:
        url: Asset reference
        base_url: Document URL
        
    Returns:
        USE_CREDENTIALS or ANONYMOUS
    """
    if not base_url:
        return ANONYMOUS
    document_origin = get_origin(base_url)
    asset_origin = get_origin(resolve_url(url, base_url))
    if document_origin and asset_origin == document_origin:
        return USE_CREDENTIALS
    return ANONYMOUS


def is_data_image(src: str) -> bool:
    """Check whether a reference is already an embedded image."""
    return src.startswith('data:image/')


def is_svg_url(src: str) -> bool:
    """Check whether a reference points at an SVG file."""
    return bool(SVG_URL_PATTERN.search(src))


def extract_url(value: str) -> Optional[str]:
    """
    Extract the payload of the first url(...) in a CSS value.
    
    Args:
        value: CSS value such as 'url("a.png")'
        
    Returns:
        The URL payload, or None if the value has no url()
    """
    match = CSS_URL_PATTERN.search(value)
    if not match:
        return None
    payload = match.group(2).strip()
    return payload or None


def safe_encode_uri(uri: str) -> str:
    """
    Percent-encode a URI unless it already carries escapes.
    
    Args:
        uri: URI to encode
        
    Returns:
        Encoded URI
    """
    if PERCENT_ESCAPE_PATTERN.search(uri):
        return uri
    return quote(uri, safe=_URI_SAFE)


def encode_uri_component(text: str) -> str:
    """Percent-encode text for use as a URI component."""
    return quote(text, safe=_COMPONENT_SAFE)


def to_data_url(body: bytes, mime_type: str) -> str:
    """
    Encode binary content as a base64 data URL.
    
    Args:
        body: Raw bytes
        mime_type: Media type of the content
        
    Returns:
        data: URL string
    """
    encoded = base64.b64encode(body).decode('ascii')
    return f"data:{mime_type};base64,{encoded}"


def svg_to_data_url(svg_text: str) -> str:
    """Wrap SVG markup into a percent-encoded data URL."""
    return f"data:image/svg+xml;charset=utf-8,{encode_uri_component(svg_text)}"


def guess_mime_type(url: str, default: str = 'application/octet-stream') -> str:
    """
    Guess a media type from a URL's extension.
    
    Args:
        url: URL to inspect
        default: Fallback type
        
    Returns:
        Media type string
    """
    path = urlparse(url).path.lower()
    font_types = {
        '.woff2': 'font/woff2',
        '.woff': 'font/woff',
        '.ttf': 'font/ttf',
        '.otf': 'font/otf',
        '.eot': 'application/vnd.ms-fontobject',
    }
    for ext, mime in font_types.items():
        if path.endswith(ext):
            return mime
    guessed, _ = mimetypes.guess_type(path)
    return guessed or default
