"""Placeholder generation service shared by the HTTP routes."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping

import requests

from blur64_converter import ImageCodec, PillowCodec, blur64_image
from blur64_shared.http import RequestsTransport, Transport
from blur64_shared.protocol import Blur64ImageData, MetadataError, Source, parse_options

from ..config import Config

logger = logging.getLogger(__name__)


class PlaceholderService:
    """
    Adapts requests onto blur64_image.

    Configured fetch defaults sit underneath each request's options, and
    one HTTP session is reused across requests. Remote bodies are capped
    at the upload size limit. Undecodable images come back as an empty
    placeholder; ValidationError propagates so routes can answer 400.
    """

    def __init__(
        self,
        config: Config,
        codec: ImageCodec | None = None,
        transport: Transport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._config = config
        self._codec = codec or PillowCodec()
        self._transport = transport or RequestsTransport(
            requests.Session(), max_bytes=config.max_upload_bytes,
        )
        self._sleep = sleep

    def generate(self, src: Source, options: Mapping[str, Any] | None = None) -> Blur64ImageData:
        merged = {**self._config.option_defaults(), **(options or {})}
        opts = parse_options({**merged, "src": src})

        try:
            return blur64_image(
                opts,
                codec=self._codec,
                transport=self._transport,
                sleep=self._sleep,
            )
        except MetadataError as e:
            logger.warning("Placeholder skipped: %s", e)
            return Blur64ImageData()
