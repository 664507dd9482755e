"""IIIF publishing configuration, path derivation and S3 upload dispatch."""

from iiif_publish.core.logging import setup_logging
from iiif_publish.lib.publisher import PublishConfig, with_defaults

__all__ = ["PublishConfig", "setup_logging", "with_defaults"]
