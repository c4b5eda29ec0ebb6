# utils/image_loader.py

import base64
import binascii
import io
import logging
import os
from typing import Optional

import httpx
from PIL import Image, UnidentifiedImageError

from badgeprint.constants import FETCH_TIMEOUT
from badgeprint.exceptions import ImageLoadError

logger = logging.getLogger(__name__)


class ImageLoader:
    """
    Resolves opaque image references to decoded RGBA images.

    Supported references:
      - data URIs (``data:image/png;base64,...``)
      - ``http://`` / ``https://`` URLs
      - file paths; relative paths and ``/images/<name>`` references are
        resolved under ``image_root``
    """

    def __init__(self, image_root: Optional[str] = None, client: Optional[httpx.Client] = None,
                 timeout: float = FETCH_TIMEOUT):
        self.image_root = image_root
        self.timeout = timeout
        self._client = client

    def load(self, ref: str) -> Image.Image:
        if not ref:
            raise ImageLoadError('', 'empty reference')
        data = self._read_bytes(ref)
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except (UnidentifiedImageError, OSError) as e:
            raise ImageLoadError(ref, f'not a decodable image ({e})') from e
        return img.convert('RGBA')

    def _read_bytes(self, ref: str) -> bytes:
        if ref.startswith('data:'):
            return self._decode_data_uri(ref)
        if ref.startswith(('http://', 'https://')):
            return self._fetch_url(ref)
        return self._read_file(ref)

    @staticmethod
    def _decode_data_uri(ref: str) -> bytes:
        header, sep, payload = ref.partition(',')
        if not sep:
            raise ImageLoadError(ref, 'malformed data URI')
        if not header.endswith(';base64'):
            raise ImageLoadError(ref, 'only base64 data URIs are supported')
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageLoadError(ref, f'bad base64 payload ({e})') from e

    def _fetch_url(self, ref: str) -> bytes:
        try:
            if self._client is not None:
                response = self._client.get(ref, timeout=self.timeout)
            else:
                response = httpx.get(ref, timeout=self.timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ImageLoadError(ref, str(e)) from e
        logger.debug(f"ImageLoader._fetch_url: Fetched {len(response.content)} bytes from {ref}")
        return response.content

    def resolve_path(self, ref: str) -> str:
        if self.image_root:
            # Server-style '/images/name.png' references live under the image root
            if ref.startswith('/images/'):
                return os.path.join(self.image_root, ref[len('/images/'):])
            if not os.path.isabs(ref):
                return os.path.join(self.image_root, ref)
        return ref

    def _read_file(self, ref: str) -> bytes:
        path = self.resolve_path(ref)
        try:
            with open(path, 'rb') as f:
                return f.read()
        except OSError as e:
            raise ImageLoadError(ref, f'cannot read {path} ({e.strerror or e})') from e
