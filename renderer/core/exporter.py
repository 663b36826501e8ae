import io
import logging
import os

from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "birthday-template.png"


# ─────────────────────────────────────────────
# PNG
# ─────────────────────────────────────────────

def encode_png(image: Image.Image) -> bytes:
    """Serialize the rendered canvas to a PNG byte stream."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def download_png(image: Image.Image, folder: str, filename: str = EXPORT_FILENAME) -> str:
    """Write the canvas as ``folder/filename`` and return the path."""
    if folder:
        os.makedirs(folder, exist_ok=True)
    path = os.path.join(folder, filename)
    with open(path, "wb") as f:
        f.write(encode_png(image))
    logger.info("Template image saved: %s", path)
    return path


# ─────────────────────────────────────────────
# PDF (one letter page, image kept in proportion)
# ─────────────────────────────────────────────

def export_pdf(image: Image.Image, output_path: str) -> str:
    if image is None:
        raise ValueError("Nothing to export: the canvas is empty.")

    folder = os.path.dirname(output_path)
    if folder:
        os.makedirs(folder, exist_ok=True)

    pdf = canvas.Canvas(output_path, pagesize=letter)
    page_w, page_h = letter

    reader = ImageReader(image.convert("RGB"))
    pdf.drawImage(reader, 0, 0, width=page_w, height=page_h, preserveAspectRatio=True)
    pdf.showPage()
    pdf.save()
    logger.info("PDF saved: %s", output_path)
    return output_path
