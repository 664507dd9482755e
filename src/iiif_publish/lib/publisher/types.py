"""Publisher data types for IIIF artifact publishing.

Content types understood by the object store and the records returned by
upload and redirect dispatch.
"""

import enum
from dataclasses import dataclass


class ContentType(enum.StrEnum):
    """MIME types of the artifacts the publishing pipeline produces."""

    JSON = "application/json"
    IMAGE = "image/jpeg"


@dataclass(frozen=True)
class Upload:
    """A file transfer dispatched to the object store."""

    key: str
    local_path: str
    content_type: ContentType


@dataclass(frozen=True)
class Redirect:
    """An extension-less alias pointing at a published object."""

    from_key: str
    to_url: str
