# tests/conftest.py
"""
Pytest configuration and fixtures for the document operators test suite.
"""

import os
import sys
import pytest
from unittest.mock import MagicMock, patch
from io import BytesIO

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient


@pytest.fixture
def test_client():
    """Create a FastAPI test client."""
    from main import app
    return TestClient(app)


@pytest.fixture
def local_storage(tmp_path):
    """Route all storage to a temporary local directory."""
    out_dir = tmp_path / "_out"
    out_dir.mkdir()
    with patch('services.storage.AZURE_CONN_STR', None), \
            patch('services.storage.LOCAL_SAVE_DIR', str(out_dir)), \
            patch('services.storage.PUBLIC_BASE_URL', 'http://testserver'), \
            patch('routes.common.LOCAL_SAVE_DIR', str(out_dir)):
        yield out_dir


@pytest.fixture
def temp_dir(tmp_path):
    """Scratch directory used by every operator for intermediate files."""
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    with patch('services.pdf_generator.TEMP_DIR', str(scratch)), \
            patch('services.word_generator.TEMP_DIR', str(scratch)), \
            patch('services.markdown_generator.TEMP_DIR', str(scratch)), \
            patch('services.text_extractor.TEMP_DIR', str(scratch)):
        yield scratch


@pytest.fixture
def mock_azure_storage():
    """Mock Azure storage client."""
    with patch('services.storage.BlobServiceClient') as mock:
        mock_client = MagicMock()
        mock.return_value = mock_client
        mock.from_connection_string.return_value = mock_client

        mock_container = MagicMock()
        mock_client.get_container_client.return_value = mock_container

        yield mock


@pytest.fixture
def fake_render_pdf():
    """Replace WeasyPrint rendering with a stub that writes a tiny PDF."""
    def _render(html_content, options, output_path):
        with open(output_path, "wb") as f:
            f.write(b"%PDF-1.4\n%stub\n")
        return 2

    with patch('services.pdf_generator.render_pdf', side_effect=_render) as mock:
        yield mock


@pytest.fixture
def sample_html():
    """HTML covering the block types the Word translator handles."""
    return """
    <html><head><title>Report</title><style>p { color: red; }</style></head>
    <body>
      <h1>Quarterly Report</h1>
      <p>Prepared for <strong>{{company}}</strong> by <em>Finance</em>.</p>
      <h2>Summary</h2>
      <ul>
        <li>Revenue up</li>
        <li>Costs down
          <ol><li>Travel</li><li>Hosting</li></ol>
        </li>
      </ul>
      <table>
        <thead><tr><th>Region</th><th>Total</th></tr></thead>
        <tbody><tr><td>North</td><td>10 &amp; 20</td></tr></tbody>
      </table>
      <pre>line one
line two</pre>
      <hr>
      <script>alert('x')</script>
    </body></html>
    """


@pytest.fixture
def sample_docx_bytes():
    """A small .docx with a paragraph, a table and another paragraph."""
    from docx import Document

    doc = Document()
    doc.add_paragraph("First paragraph")
    table = doc.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Name"
    table.cell(0, 1).text = "Value"
    table.cell(1, 0).text = "alpha"
    table.cell(1, 1).text = "1"
    doc.add_paragraph("Last paragraph")

    bio = BytesIO()
    doc.save(bio)
    return bio.getvalue()


@pytest.fixture
def sample_xlsx_bytes():
    """A two-sheet workbook with an empty row and numeric cells."""
    from openpyxl import Workbook

    wb = Workbook()
    ws = wb.active
    ws.title = "Sales"
    ws.append(["Region", "Total"])
    ws.append([None, None])
    ws.append(["North", 42])
    ws2 = wb.create_sheet("Notes")
    ws2.append(["checked", None, "ok"])

    bio = BytesIO()
    wb.save(bio)
    return bio.getvalue()
