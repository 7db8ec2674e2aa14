"""
Asset resolvers.

Contains the HTTP fetcher, the image resolver and the background layer
resolver, plus the Resolution result type used by fan-out stages.
"""

from .fetch import AssetFetcher, FetchedAsset
from .image import ImageResolver
from .background import BackgroundResolver, is_gradient
from .outcome import Resolution, settle

__all__ = [
    "AssetFetcher",
    "FetchedAsset",
    "ImageResolver",
    "BackgroundResolver",
    "is_gradient",
    "Resolution",
    "settle",
]
