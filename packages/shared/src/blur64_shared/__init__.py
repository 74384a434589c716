"""
Shared option types and networking for blur placeholder generation

The package is a dependency of the converter, backend and CLI:
- Converter uses it for options, results, errors and remote fetching
- Backend and CLI use it to parse and validate request options

Deployment:
    pip install blur64
"""

from .protocol import (
    SUPPORTED_FITS,
    SUPPORTED_FORMATS,
    SUPPORTED_KERNELS,
    Blur64Error,
    Blur64ImageData,
    Blur64Options,
    BlurOptions,
    Dimensions,
    MetadataError,
    ValidationError,
    parse_options,
    validate_options,
)
from .http import (
    BodyTooLarge,
    FetchError,
    FetchPolicy,
    FetchTimeout,
    HTTPStatusError,
    RequestsTransport,
    Transport,
    TransportResponse,
    fetch_buffer,
)
from .files import (
    ALLOWED_IMG_EXTS,
    as_codec_source,
    has_image_ext,
    is_remote_url,
)

__all__ = [
    # Protocol
    "SUPPORTED_FORMATS",
    "SUPPORTED_FITS",
    "SUPPORTED_KERNELS",
    "Blur64Error",
    "ValidationError",
    "MetadataError",
    "Dimensions",
    "BlurOptions",
    "Blur64Options",
    "Blur64ImageData",
    "parse_options",
    "validate_options",
    # HTTP
    "FetchError",
    "HTTPStatusError",
    "FetchTimeout",
    "BodyTooLarge",
    "FetchPolicy",
    "Transport",
    "TransportResponse",
    "RequestsTransport",
    "fetch_buffer",
    # Files
    "ALLOWED_IMG_EXTS",
    "is_remote_url",
    "has_image_ext",
    "as_codec_source",
]
