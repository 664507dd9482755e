"""Publisher library: public API for IIIF artifact publishing.

Provides the publishing configuration, path/URI derivation, and the
object storage backends that generated manifests and tiles are uploaded to.
"""

from iiif_publish.lib.publisher.config import (
    DEFAULT_IMAGE_DIRECTORY_NAME,
    DEFAULT_OUTPUT_DIRECTORY,
    DEFAULT_THUMBNAIL_SIZE,
    DEFAULT_TILE_SCALE_FACTORS,
    DEFAULT_TILE_WIDTH,
    DEFAULT_URL,
    PublishConfig,
    PublishOptions,
    UnknownFileTypeError,
    canonical_key,
    content_type_for,
    relative_key,
    with_defaults,
)
from iiif_publish.lib.publisher.storage import (
    ObjectStore,
    S3ObjectStore,
    StoreError,
    StoreInitError,
    create_s3_client,
)
from iiif_publish.lib.publisher.types import ContentType, Redirect, Upload

__all__ = [
    "DEFAULT_IMAGE_DIRECTORY_NAME",
    "DEFAULT_OUTPUT_DIRECTORY",
    "DEFAULT_THUMBNAIL_SIZE",
    "DEFAULT_TILE_SCALE_FACTORS",
    "DEFAULT_TILE_WIDTH",
    "DEFAULT_URL",
    "ContentType",
    "ObjectStore",
    "PublishConfig",
    "PublishOptions",
    "Redirect",
    "S3ObjectStore",
    "StoreError",
    "StoreInitError",
    "UnknownFileTypeError",
    "Upload",
    "canonical_key",
    "content_type_for",
    "create_s3_client",
    "relative_key",
    "with_defaults",
]
