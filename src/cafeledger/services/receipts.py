"""Receipt image encoding into inline data URIs."""

from __future__ import annotations

import base64
from typing import BinaryIO, Union

from ..errors import ReceiptError

DEFAULT_MAX_BYTES = 2 * 1024 * 1024

ReceiptSource = Union[bytes, BinaryIO]


def encode_receipt(
    source: ReceiptSource, mimetype: str | None, *, max_bytes: int = DEFAULT_MAX_BYTES
) -> str:
    """Return ``data:<mime>;base64,<payload>`` for an uploaded image.

    Raises ``ReceiptError`` when the upload is not an image, is empty, exceeds
    ``max_bytes`` or cannot be read.
    """

    mime = (mimetype or "").split(";")[0].strip().lower()
    if not mime.startswith("image/"):
        raise ReceiptError("Receipt must be an image file.")
    if isinstance(source, (bytes, bytearray)):
        payload = bytes(source)
    else:
        try:
            payload = source.read(max_bytes + 1)
        except OSError as exc:
            raise ReceiptError("Receipt could not be read.") from exc
    if not payload:
        raise ReceiptError("Receipt file is empty.")
    if len(payload) > max_bytes:
        raise ReceiptError(f"Receipt is larger than {max_bytes // 1024} KB.")
    return f"data:{mime};base64,{base64.b64encode(payload).decode('ascii')}"


__all__ = ["DEFAULT_MAX_BYTES", "encode_receipt"]
