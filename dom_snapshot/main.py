#!/usr/bin/env python3
"""
DOM Snapshot - capture an element as a self-contained image.

Loads a page (live with Playwright, or a local HTML file), captures one
element with all its images, backgrounds and fonts inlined, and writes it
as SVG, PNG, JPEG or WebP.

Usage:
    python -m dom_snapshot.main --url https://example.com --selector main -o main.png
"""

import argparse
import asyncio
import logging
import os
import sys
from urllib.parse import urlparse

from .api import snapdom
from .core.errors import SnapshotError
from .export.renderer import BrowserRenderer, parse_html
from .utils.constants import DEFAULT_IMAGE_TIMEOUT_MS
from .utils.log import (
    setup_logger,
    print_error,
    print_info,
    print_success,
    print_warning,
)


def parse_arguments(argv=None) -> argparse.Namespace:
    """
    Parse command line arguments.
    
    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog='dom-snapshot',
        description='Capture an element as a self-contained snapshot image',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --url https://example.com --selector "#hero" -o hero.png
    %(prog)s --file page.html --base-url https://example.com/ -s .card -o card.svg
    %(prog)s --url https://example.com -s main -o main.jpg --scale 2 --embed-fonts
        """
    )
    
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        '--url', '-u',
        type=str,
        help='URL of the page to render with a headless browser'
    )
    source.add_argument(
        '--file', '-f',
        type=str,
        help='Local HTML file to capture from'
    )
    
    parser.add_argument(
        '--selector', '-s',
        type=str,
        default='body',
        help='CSS selector of the element to capture (default: body)'
    )
    
    parser.add_argument(
        '--output', '-o',
        type=str,
        default='snapshot.svg',
        help='Output file; the extension selects svg, png, jpg or webp (default: snapshot.svg)'
    )
    
    parser.add_argument(
        '--base-url',
        type=str,
        default=None,
        help='Document URL used to resolve relative references of --file input'
    )
    
    parser.add_argument('--scale', type=float, default=1.0, help='Output scale (default: 1)')
    parser.add_argument('--width', type=float, default=None, help='Output width override')
    parser.add_argument('--height', type=float, default=None, help='Output height override')
    parser.add_argument('--quality', type=float, default=None, help='Lossy quality, 0-1')
    parser.add_argument('--background', type=str, default=None, help='Background color for raster output')
    
    parser.add_argument(
        '--embed-fonts',
        action='store_true',
        help='Inline @font-face sources'
    )
    
    parser.add_argument(
        '--no-compress',
        action='store_true',
        help='Do not share classes between identical styles or add base CSS'
    )
    
    parser.add_argument(
        '--proxy',
        type=str,
        default=None,
        help='Proxy URL prefix used when an image is blocked (e.g. https://proxy.example/?url=)'
    )
    
    parser.add_argument(
        '--exclude',
        action='append',
        default=[],
        help='CSS selector of elements to leave out (repeatable)'
    )
    
    parser.add_argument(
        '--timeout',
        type=int,
        default=DEFAULT_IMAGE_TIMEOUT_MS,
        help=f'Image load timeout in milliseconds (default: {DEFAULT_IMAGE_TIMEOUT_MS})'
    )
    
    parser.add_argument('--no-headless', action='store_true', help='Show the browser window')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')
    parser.add_argument('--quiet', '-q', action='store_true', help='Suppress output except errors')
    
    return parser.parse_args(argv)


def validate_url(url: str) -> str:
    """
    Validate and normalize the input URL.
    
    Raises:
        ValueError: If URL is invalid
    """
    if not url.startswith(('http://', 'https://')):
        url = 'https://' + url
    parsed = urlparse(url)
    if not parsed.netloc:
        raise ValueError(f"Invalid URL: {url}")
    return url


async def main(argv=None) -> int:
    """
    Main entry point for the snapshot CLI.
    
    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_arguments(argv)
    
    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    setup_logger(level=log_level)
    
    options = dict(
        scale=args.scale,
        width=args.width,
        height=args.height,
        quality=args.quality,
        background_color=args.background,
        embed_fonts=args.embed_fonts,
        compress=not args.no_compress,
        use_proxy=args.proxy,
        exclude=args.exclude,
        timeout_ms=args.timeout,
        debug=args.verbose,
    )
    
    renderer = BrowserRenderer(headless=not args.no_headless)
    try:
        if args.url:
            url = validate_url(args.url)
            if not args.quiet:
                print_info(f"Rendering {url}")
            loaded = await renderer.load_element(url, args.selector)
            element, base_url = loaded.element, loaded.url
        else:
            with open(args.file, 'r', encoding='utf-8') as f:
                document = parse_html(f.read())
            element = document.select_one(args.selector)
            if element is None:
                raise ValueError(f"No element matches selector {args.selector!r}")
            base_url = args.base_url
            if not base_url and not args.quiet:
                print_warning("No --base-url given; relative references will not resolve")
        
        result = await snapdom(element, base_url=base_url, renderer=renderer, **options)
        path = await result.save(args.output)
        
        if not args.quiet:
            print_success(f"Snapshot written to: {os.path.abspath(path)}")
        return 0
        
    except KeyboardInterrupt:
        print_error("\nCapture interrupted by user")
        return 1
    except (ValueError, OSError) as e:
        print_error(f"Invalid input: {e}")
        return 1
    except SnapshotError as e:
        print_error(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1
    finally:
        await renderer.stop()


def run() -> None:
    """Entry point wrapper for running as module."""
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    run()
