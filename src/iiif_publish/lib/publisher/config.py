"""Publishing configuration for IIIF tile and manifest generation.

``PublishConfig`` holds the generation parameters (tile geometry, variant
sizes, output paths, URI rules) shared by a publishing run, derives on-disk
locations and public URIs from them, and forwards generated artifacts to an
``ObjectStore`` when uploading is enabled.  With uploading disabled, the
upload and redirect methods are no-ops so the same pipeline code runs in
local-only and publish modes.
"""

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator, model_validator

from iiif_publish.lib.publisher.storage import ObjectStore, S3ObjectStore
from iiif_publish.lib.publisher.types import ContentType, Redirect, Upload

# The default URL to prepend to all IDs.
DEFAULT_URL = "http://0.0.0.0"
# The name of the subdirectory where generated images live.
DEFAULT_IMAGE_DIRECTORY_NAME = "images"
# The default path for writing generated images and data files.
DEFAULT_OUTPUT_DIRECTORY = "./build"
# The default tile width/height in pixels.
DEFAULT_TILE_WIDTH = 512
# The default tile scaling factors, one pyramid level each.
DEFAULT_TILE_SCALE_FACTORS = (1, 2, 4, 8)
# The default thumbnail size in pixels.
DEFAULT_THUMBNAIL_SIZE = 250

_EXTENSION_CONTENT_TYPES = {
    "": ContentType.JSON,
    ".json": ContentType.JSON,
    ".jpg": ContentType.IMAGE,
}

StoreFactory = Callable[[], ObjectStore]


class UnknownFileTypeError(ValueError):
    """Raised when a generated artifact has an extension that cannot be published.

    Args:
        filename: Path of the rejected file.
    """

    def __init__(self, filename: str) -> None:
        self.filename = filename
        self.extension = "." if filename.endswith(".") else Path(filename).suffix
        super().__init__(f"Cannot identify file type of {filename!r} (extension {self.extension!r})")


class PublishOptions(BaseModel):
    """Validated options bag for ``PublishConfig``.

    Every key is optional; ``None`` values count as absent and unknown keys
    are ignored.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    base_uri: str | None = Field(default=None, min_length=1)
    use_extensions: bool = True
    output_dir: str = Field(default=DEFAULT_OUTPUT_DIRECTORY, min_length=1)
    prefix: str = ""
    image_directory_name: str = Field(default=DEFAULT_IMAGE_DIRECTORY_NAME, min_length=1)
    tile_width: int = Field(default=DEFAULT_TILE_WIDTH, gt=0)
    tile_scale_factors: tuple[PositiveInt, ...] = DEFAULT_TILE_SCALE_FACTORS
    variants: dict[str, PositiveInt] = Field(default_factory=dict)
    upload_to_s3: bool = False
    thumbnail_size: int = Field(default=DEFAULT_THUMBNAIL_SIZE, gt=0)
    verbose: bool = False

    @model_validator(mode="before")
    @classmethod
    def drop_unset(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator("verbose", mode="before")
    @classmethod
    def coerce_verbose(cls, v: Any) -> bool:
        return bool(v)

    @field_validator("prefix")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        if v and not v.startswith("/"):
            return f"/{v}"
        return v


def relative_key(filename: str, output_dir: str) -> str:
    """Return the object key for a file written under ``output_dir``.

    Args:
        filename: Path of a generated file.
        output_dir: Root directory of the build.

    Returns:
        The path relative to ``output_dir`` with any leading slash removed.
    """
    key = filename.removeprefix(output_dir)
    return key.removeprefix("/")


def canonical_key(key: str) -> str:
    """Strip the final ``.``-separated segment from a key, if it has one."""
    if "." not in key:
        return key
    return key.rsplit(".", 1)[0]


def content_type_for(filename: str) -> ContentType | None:
    """Classify a generated file by extension.

    ``.json`` and extension-less files are JSON documents, ``.jpg`` files are
    images; anything else, including a name ending in a bare ``.``, returns None.
    """
    name = Path(filename).name
    if name.endswith(".") and name.strip("."):
        return None
    return _EXTENSION_CONTENT_TYPES.get(Path(filename).suffix)


class PublishConfig:
    """Configuration for a single IIIF publishing run.

    All fields are read-only except ``verbose``.  When ``upload_to_s3`` is
    set, an object store is created at construction time and ``base_uri``
    defaults to the bucket URL.

    Args:
        options: Options bag; see ``PublishOptions`` for the recognised keys.
        store_factory: Callable creating the object store when uploading.
            Defaults to ``S3ObjectStore.from_settings``.
        **overrides: Options given as keyword arguments; these win over
            ``options``.

    Raises:
        pydantic.ValidationError: If an option is out of range.
        StoreInitError: If uploading is enabled and the store cannot be created.
    """

    def __init__(
        self,
        options: Mapping[str, Any] | None = None,
        *,
        store_factory: StoreFactory | None = None,
        **overrides: Any,
    ) -> None:
        opts = PublishOptions.model_validate({**(options or {}), **overrides})

        self._upload_to_s3 = opts.upload_to_s3
        self._store: ObjectStore | None = None
        if self._upload_to_s3:
            self._store = (store_factory or S3ObjectStore.from_settings)()

        if opts.base_uri is not None:
            self._base_uri = opts.base_uri
        elif self._store is not None:
            self._base_uri = self._store.bucket_url()
        else:
            self._base_uri = DEFAULT_URL

        self._use_extensions = opts.use_extensions
        self._output_dir = opts.output_dir
        self._prefix = opts.prefix
        self._image_directory_name = opts.image_directory_name
        self._tile_width = opts.tile_width
        self._tile_scale_factors = opts.tile_scale_factors
        self._variants = dict(opts.variants)
        self._thumbnail_size = opts.thumbnail_size
        self._verbose = opts.verbose

    @property
    def base_uri(self) -> str:
        """The protocol, domain and port used for generating URIs."""
        return self._base_uri

    @property
    def use_extensions(self) -> bool:
        """Whether generated IDs and files carry a ``.json`` extension."""
        return self._use_extensions

    @property
    def output_dir(self) -> str:
        """Local directory where output files are written."""
        return self._output_dir

    @property
    def prefix(self) -> str:
        """Path segment inserted between the base URI (or output dir) and the id."""
        return self._prefix

    @property
    def image_directory_name(self) -> str:
        return self._image_directory_name

    @property
    def tile_width(self) -> int:
        """Width (and height) of each tile in pixels."""
        return self._tile_width

    @property
    def tile_scale_factors(self) -> tuple[int, ...]:
        return self._tile_scale_factors

    @property
    def variants(self) -> dict[str, int]:
        """Variant name to maximum pixel size of the longest side."""
        return dict(self._variants)

    @property
    def upload_to_s3(self) -> bool:
        return self._upload_to_s3

    @property
    def thumbnail_size(self) -> int:
        """Maximum thumbnail width in pixels."""
        return self._thumbnail_size

    @property
    def store(self) -> ObjectStore | None:
        """The object store receiving uploads, or None when not uploading."""
        return self._store

    @property
    def verbose(self) -> bool:
        """Whether diagnostics are logged for each redirect."""
        return self._verbose

    @verbose.setter
    def verbose(self, value: Any) -> None:
        self._verbose = bool(value)

    def build_location(self, id: str) -> str:
        """Return the on-disk location of a resource's root document."""
        return f"{self.output_dir}{self.prefix}/{id}"

    def build_image_location(self, id: str, page_number: int | str) -> str:
        """Return the on-disk root for one page's tiles and variants."""
        return f"{self.output_dir}{self.prefix}/{self.image_directory_name}/{id}-{page_number}"

    def build_uri(self, id: str) -> str:
        """Return the public URI of a resource's root document."""
        return f"{self.base_uri}{self.prefix}/{id}"

    def build_image_uri(self, id: str, page_number: int | str) -> str:
        """Return the public URI of one page's image root."""
        return f"{self.base_uri}{self.prefix}/{self.image_directory_name}/{id}-{page_number}"

    def document_name(self, name: str) -> str:
        """Append ``.json`` to a document name when extensions are in use."""
        return f"{name}.json" if self.use_extensions else name

    def add_file_to_s3(self, filename: str) -> Upload | None:
        """Upload a generated file, keyed by its path under ``output_dir``.

        Args:
            filename: Path of a file written under ``output_dir``.

        Returns:
            The dispatched upload, or None when uploading is disabled.

        Raises:
            UnknownFileTypeError: If the file is not JSON, extension-less or JPEG.
            StoreError: If the store rejects the transfer.
        """
        if self._store is None:
            return None

        content_type = content_type_for(filename)
        if content_type is None:
            raise UnknownFileTypeError(filename)

        upload = Upload(
            key=relative_key(filename, self.output_dir),
            local_path=filename,
            content_type=content_type,
        )
        self._store.put_object(upload.key, upload.local_path, upload.content_type)
        return upload

    def add_default_redirect(self, filename: str) -> Redirect | None:
        """Alias a published file's extension-less key to its full URL.

        Lets clients address ``{base_uri}/book1`` when ``book1.json`` was
        uploaded.  Files without an extension get no redirect.

        Args:
            filename: Path of a file written under ``output_dir``.

        Returns:
            The created redirect, or None when nothing was created.

        Raises:
            StoreError: If the store rejects the redirect.
        """
        if self._store is None:
            return None

        key = relative_key(filename, self.output_dir)
        name_key = canonical_key(key)
        if name_key == key:
            return None

        redirect = Redirect(from_key=name_key, to_url=f"{self.base_uri}/{key}")
        if self.verbose:
            logger.info("adding redirect from {} to {}", redirect.from_key, redirect.to_url)
        self._store.add_redirect(redirect.from_key, redirect.to_url)
        return redirect

    def _fields(self) -> tuple[Any, ...]:
        return (
            self._base_uri,
            self._use_extensions,
            self._output_dir,
            self._prefix,
            self._image_directory_name,
            self._tile_width,
            self._tile_scale_factors,
            self._variants,
            self._upload_to_s3,
            self._thumbnail_size,
            self._verbose,
            self._store,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PublishConfig):
            return NotImplemented
        return self._fields() == other._fields()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"PublishConfig(base_uri={self.base_uri!r}, output_dir={self.output_dir!r}, "
            f"prefix={self.prefix!r}, image_directory_name={self.image_directory_name!r}, "
            f"tile_width={self.tile_width}, tile_scale_factors={self.tile_scale_factors}, "
            f"variants={self._variants}, thumbnail_size={self.thumbnail_size}, "
            f"use_extensions={self.use_extensions}, upload_to_s3={self.upload_to_s3}, "
            f"verbose={self.verbose}, store={self._store!r})"
        )


def with_defaults(
    partial: Mapping[str, Any] | None = None,
    *,
    store_factory: StoreFactory | None = None,
) -> PublishConfig:
    """Build a fully-defaulted ``PublishConfig`` from a partial options bag."""
    return PublishConfig(partial, store_factory=store_factory)
