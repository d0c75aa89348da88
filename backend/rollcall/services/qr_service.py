"""QR code rendering for enrollment and attendance links."""
import io
import base64

import qrcode


class QRService:
    """Service for QR code operations."""

    @staticmethod
    def render_png(data: str, box_size: int = 10, border: int = 4) -> bytes:
        """Render ``data`` as a PNG QR code."""
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_H,
            box_size=box_size,
            border=border,
        )
        qr.add_data(data)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffered = io.BytesIO()
        img.save(buffered)
        return buffered.getvalue()

    @staticmethod
    def render_data_uri(data: str) -> str:
        """PNG QR code as a ``data:`` URI for inline display."""
        img_str = base64.b64encode(QRService.render_png(data)).decode()
        return f"data:image/png;base64,{img_str}"
