"""Tests for content-type table construction and lookup."""

import pytest

from s3content.sync.content_types import (
    DEFAULT_CONTENT_TYPES,
    build_content_types,
    extension_of,
    resolve_content_type,
)


class TestDefaultTable:
    """Tests for the built-in table."""

    @pytest.mark.parametrize(
        "extension,expected",
        [
            (".html", "text/html"),
            (".htm", "text/html"),
            (".css", "text/css"),
            (".scss", "text/less"),
            (".ico", "image/x-icon"),
            (".jpeg", "image/jpeg"),
            (".js", "application/javascript"),
            (".svg", "image/svg+xml"),
            (".ts", "application/typescript"),
            (".woff2", "font/woff2"),
            (".xml", "application/xml"),
        ],
    )
    def test_defaults(self, extension, expected):
        assert DEFAULT_CONTENT_TYPES[extension] == expected

    def test_has_all_defaults(self):
        assert len(DEFAULT_CONTENT_TYPES) == 19

    def test_defaults_are_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_CONTENT_TYPES[".md"] = "text/markdown"  # type: ignore[index]


class TestBuildContentTypes:
    """Tests for merging overrides on top of the defaults."""

    def test_no_overrides_returns_defaults(self):
        assert dict(build_content_types()) == dict(DEFAULT_CONTENT_TYPES)

    def test_override_wins(self):
        table = build_content_types({".html": "text/html; charset=utf-8"})
        assert resolve_content_type(table, ".html") == "text/html; charset=utf-8"

    def test_override_adds_extension(self):
        table = build_content_types({".md": "text/markdown"})
        assert resolve_content_type(table, ".md") == "text/markdown"
        assert resolve_content_type(table, ".png") == "image/png"

    def test_later_source_wins(self):
        table = build_content_types({".md": "text/plain"}, {".md": "text/markdown"})
        assert table[".md"] == "text/markdown"

    def test_none_source_is_skipped(self):
        table = build_content_types(None, {".md": "text/markdown"})
        assert table[".md"] == "text/markdown"

    def test_does_not_modify_defaults(self):
        build_content_types({".css": "text/plain"})
        assert DEFAULT_CONTENT_TYPES[".css"] == "text/css"

    def test_result_is_read_only(self):
        table = build_content_types()
        with pytest.raises(TypeError):
            table[".md"] = "text/markdown"  # type: ignore[index]


class TestResolveContentType:
    """Tests for lookup and extension handling."""

    def test_unknown_extension_is_empty(self):
        assert resolve_content_type(build_content_types(), ".bin") == ""

    def test_lookup_is_case_sensitive(self):
        assert resolve_content_type(build_content_types(), ".HTML") == ""

    def test_extension_of(self):
        assert extension_of("/srv/site/img/b.png") == ".png"
        assert extension_of("archive.tar.gz") == ".gz"
        assert extension_of("Makefile") == ""
        assert extension_of("C:\\site\\INDEX.HTML") == ".HTML"
