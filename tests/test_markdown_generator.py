# tests/test_markdown_generator.py
"""Tests for Markdown processing, validation and generation."""

import re
import pytest
from unittest.mock import patch, MagicMock

from services.errors import OperatorError
from services.markdown_generator import (
    process_markdown,
    count_lines,
    validate_markdown_syntax,
    generate_markdown,
)


class TestProcessMarkdown:
    """Tests for process_markdown function."""

    def test_normalises_and_trims(self):
        assert process_markdown("a  \r\nb\t\rc") == "a\nb\nc\n"

    def test_keeps_single_trailing_newline(self):
        assert process_markdown("a\n") == "a\n"

    @pytest.mark.parametrize("ending", ["\n", "\r\n", "\r"])
    def test_requested_line_ending(self, ending):
        assert process_markdown("# T\n\ntext", ending) == f"# T{ending}{ending}text{ending}"


class TestCountLines:

    def test_count(self):
        assert count_lines("a\nb\n") == 2
        assert count_lines("a\r\nb\r\n") == 2
        assert count_lines("a\rb\r") == 2

    def test_empty(self):
        assert count_lines("") == 0


class TestValidateMarkdownSyntax:
    """Tests for validate_markdown_syntax function."""

    def test_clean_document(self):
        result = validate_markdown_syntax("# Title\n\n- item\n* other\n\n[link](http://x)\n")
        assert result["isValid"] is True
        assert result["issueCount"] == 0
        assert result["summary"] == {"errors": 0, "warnings": 0}

    def test_heading_space(self):
        result = validate_markdown_syntax("#Title\n## ok")
        assert [(i["line"], i["code"]) for i in result["issues"]] == [(1, "HEADING_SPACE")]
        assert result["isValid"] is True

    def test_list_space(self):
        result = validate_markdown_syntax("text\n-item\n+item")
        assert [(i["line"], i["code"]) for i in result["issues"]] == [(2, "LIST_SPACE"), (3, "LIST_SPACE")]

    @pytest.mark.parametrize("line", ["---", "***", "* * *", "**bold** start", "*em* start"])
    def test_rules_and_emphasis_are_not_lists(self, line):
        assert validate_markdown_syntax(line)["issueCount"] == 0

    def test_empty_link(self):
        result = validate_markdown_syntax("see [here]() and [there]( ) and [ok](x)")
        codes = [i["code"] for i in result["issues"]]
        assert codes == ["EMPTY_LINK", "EMPTY_LINK"]
        assert result["summary"]["warnings"] == 2

    def test_line_count(self):
        assert validate_markdown_syntax("a\nb\nc")["lineCount"] == 3


class TestGenerateMarkdown:
    """Tests for generate_markdown function."""

    def test_generates_file(self, local_storage, temp_dir):
        result = generate_markdown("# {{title}}  \n\nBody", {"title": "Notes"}, file_name="notes")

        assert result["success"] is True
        assert re.fullmatch(r"notes_[0-9a-f]{8}\.md", result["fileName"])
        assert result["lineCount"] == 3
        assert result["blobPath"].startswith("markdown-documents/")
        stored = (local_storage / result["blobPath"]).read_bytes()
        assert stored == b"# Notes\n\nBody\n"
        assert result["fileSize"] == len(stored)
        assert list((temp_dir / "markdown-generator").iterdir()) == []

    def test_crlf_output(self, local_storage, temp_dir):
        result = generate_markdown("a\nb", line_ending="\r\n")
        assert (local_storage / result["blobPath"]).read_bytes() == b"a\r\nb\r\n"
        assert result["lineCount"] == 2

    def test_without_data_keeps_mustache(self, local_storage, temp_dir):
        result = generate_markdown("{{untouched}}")
        assert (local_storage / result["blobPath"]).read_bytes() == b"{{untouched}}\n"
        assert re.fullmatch(r"markdown_\d+_[0-9a-f]{8}\.md", result["fileName"])

    def test_template_from_file(self, local_storage, temp_dir, tmp_path):
        """Test a single-line file path is read before filling."""
        template = tmp_path / "templates" / "greeting.md"
        template.parent.mkdir()
        template.write_text("Hello {{name}}", encoding="utf-8")

        result = generate_markdown(str(template), {"name": "Ann"})
        assert (local_storage / result["blobPath"]).read_bytes() == b"Hello Ann\n"

    def test_template_from_url(self, local_storage, temp_dir):
        response = MagicMock()
        response.text = "# {{title}}"
        response.encoding = "utf-8"
        with patch('services.templating.requests.get', return_value=response) as mock_get:
            result = generate_markdown("https://example.com/t.md", {"title": "Remote"})

        mock_get.assert_called_once()
        assert mock_get.call_args.args[0] == "https://example.com/t.md"
        assert (local_storage / result["blobPath"]).read_bytes() == b"# Remote\n"

    def test_template_fetch_failure_is_kept(self, local_storage, temp_dir):
        err = OperatorError("Failed to download template: 404", "TEMPLATE_FETCH_FAILED", 400)
        with patch('services.markdown_generator.resolve_template_source', side_effect=err):
            with pytest.raises(OperatorError) as exc:
                generate_markdown("https://example.com/missing.md")
        assert exc.value.code == "TEMPLATE_FETCH_FAILED"

    def test_storage_failure(self, local_storage, temp_dir):
        with patch('services.markdown_generator.store_document', side_effect=RuntimeError("disk full")):
            with pytest.raises(OperatorError) as exc:
                generate_markdown("x")
        assert exc.value.code == "MARKDOWN_GENERATION_FAILED"
        assert list((temp_dir / "markdown-generator").iterdir()) == []
