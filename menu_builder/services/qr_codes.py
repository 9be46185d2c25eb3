from __future__ import annotations

import base64
import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from io import BytesIO
from typing import Callable

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from menu_builder.core.config import QR_RENDER_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)
QR_PREFIX = "[QR]"

_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="qr-render")


class QRRenderError(Exception):
    """QR rendering failed or did not finish in time."""


def render_qr_png(url: str) -> bytes:
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, box_size=8, border=2)
    qr.add_data(url)
    qr.make(fit=True)
    image = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    image.save(buffer)
    return buffer.getvalue()


def png_data_url(png_bytes: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


class QRCodeRenderer:
    def __init__(
        self,
        render: Callable[[str], bytes] = render_qr_png,
        timeout_seconds: float = QR_RENDER_TIMEOUT_SECONDS,
    ) -> None:
        self._render = render
        self._timeout_seconds = timeout_seconds

    def render_data_url(self, url: str) -> str:
        future = _executor.submit(self._render, url)
        try:
            png_bytes = future.result(timeout=self._timeout_seconds)
        except FutureTimeoutError as exc:
            future.cancel()
            logger.warning("%s render timed out after %ss", QR_PREFIX, self._timeout_seconds)
            raise QRRenderError("QR rendering timed out") from exc
        except Exception as exc:
            logger.warning("%s render failed: %s", QR_PREFIX, exc)
            raise QRRenderError("QR rendering failed") from exc
        return png_data_url(png_bytes)
