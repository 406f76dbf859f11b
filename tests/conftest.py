"""
Test Configuration and Fixtures
"""
import io
import os
import pytest
from app import create_app
from app.utils.config import ExtractionSettings

BOUNDARY = "----WebKitFormBoundary7MA4YWxkTrZu0gW"


def build_multipart(parts, boundary=BOUNDARY, preamble=b"", epilogue=b""):
    """Assemble a multipart body from (field, filename, content_type, content) tuples"""
    b = boundary.encode()
    out = preamble
    for field, filename, content_type, content in parts:
        out += b"--" + b + b"\r\n"
        disposition = f'Content-Disposition: form-data; name="{field}"'
        if filename is not None:
            disposition += f'; filename="{filename}"'
        out += disposition.encode("utf-8") + b"\r\n"
        if content_type:
            out += f"Content-Type: {content_type}\r\n".encode()
        out += b"\r\n" + content + b"\r\n"
    out += b"--" + b + b"--\r\n" + epilogue
    return out


@pytest.fixture
def multipart():
    return build_multipart


@pytest.fixture
def content_type():
    return f"multipart/form-data; boundary={BOUNDARY}"


@pytest.fixture
def tmp_upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def settings(tmp_upload_dir):
    return ExtractionSettings(min_chars=10, tmp_dir=str(tmp_upload_dir), timeout_seconds=0)


@pytest.fixture
def app(tmp_upload_dir):
    """Create application for testing"""
    os.environ['FLASK_ENV'] = 'testing'

    app = create_app('testing', EXTRACT_TMP_DIR=str(tmp_upload_dir))
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app):
    """Create test client"""
    return app.test_client()


@pytest.fixture
def text_pdf():
    """One-page PDF with a real text layer"""
    from reportlab.pdfgen import canvas

    buf = io.BytesIO()
    c = canvas.Canvas(buf)
    c.drawString(72, 720, "Hello World from a text based resume")
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture
def blank_pdf():
    """PDF without any text layer, like a scan with no OCR"""
    from PyPDF2 import PdfWriter

    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


@pytest.fixture
def docx_bytes():
    import docx

    document = docx.Document()
    document.add_paragraph("Senior engineer with ten years of Python experience")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Skills"
    table.rows[0].cells[1].text = "Flask, PyPDF2"
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


@pytest.fixture
def scanned_pdf():
    """Image-only page; the image sits inside a form XObject, as scanner software often writes it"""
    from PIL import Image
    from reportlab.lib.utils import ImageReader
    from reportlab.pdfgen import canvas

    png = io.BytesIO()
    Image.new("RGB", (60, 80), "white").save(png, "PNG")
    png.seek(0)

    buf = io.BytesIO()
    c = canvas.Canvas(buf)
    c.beginForm("scan")
    c.drawImage(ImageReader(png), 72, 400, width=300, height=400)
    c.endForm()
    c.doForm("scan")
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture
def encrypt_pdf():
    """Re-save a PDF with the given user password"""
    from PyPDF2 import PdfReader, PdfWriter

    def _encrypt(data, user_password):
        writer = PdfWriter()
        for page in PdfReader(io.BytesIO(data)).pages:
            writer.add_page(page)
        writer.encrypt(user_password, "owner-secret")
        buf = io.BytesIO()
        writer.write(buf)
        return buf.getvalue()

    return _encrypt
