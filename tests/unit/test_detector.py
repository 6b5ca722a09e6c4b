"""
MarkPort v1 - Format Detector Tests
"""

import pytest

from importer import ImportFormat, detect


class TestCanonicalFixtures:
    """Each sample export is detected as its own format."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("bookmarks.html", ImportFormat.NETSCAPE),
            ("pinboard.json", ImportFormat.PINBOARD),
            ("pocket.csv", ImportFormat.POCKET),
            ("instapaper.csv", ImportFormat.INSTAPAPER),
        ],
    )
    def test_fixture_detected(self, load_fixture, name, expected):
        assert detect(load_fixture(name)) == expected


class TestNetscape:
    """Netscape HTML detection."""

    def test_doctype_without_entries(self):
        """The doctype alone is enough."""
        assert detect("<!DOCTYPE NETSCAPE-Bookmark-file-1>\n<DL></DL>") == ImportFormat.NETSCAPE

    def test_entry_without_doctype(self):
        """An anchor inside a DT marks the file as Netscape."""
        content = '<DL><p>\n<DT><A HREF="https://example.com">Example</A>\n</DL>'
        assert detect(content) == ImportFormat.NETSCAPE

    def test_case_insensitive(self):
        content = '<dl>\n<dt>  <a href="https://example.com">Example</a>\n</dl>'
        assert detect(content) == ImportFormat.NETSCAPE

    def test_leading_whitespace(self):
        assert detect("\n\n   <!doctype netscape-bookmark-file-1>") == ImportFormat.NETSCAPE

    def test_plain_html_not_netscape(self):
        assert detect('<html><body><a href="https://example.com">x</a></body></html>') is None


class TestPinboard:
    """Pinboard JSON detection."""

    def test_array_with_href(self):
        assert detect('[{"href": "https://example.com"}]') == ImportFormat.PINBOARD

    def test_empty_array_rejected(self):
        assert detect("[]") is None

    def test_array_without_href_rejected(self):
        assert detect('[{"url": "https://example.com"}]') is None

    def test_array_of_scalars_rejected(self):
        assert detect("[1, 2, 3]") is None

    def test_json_object_rejected(self):
        assert detect('{"href": "https://example.com"}') is None

    def test_invalid_json_falls_through(self):
        """A bracket that is not JSON is not Pinboard and matches nothing else."""
        assert detect("[not json") is None

    def test_deeply_nested_array(self):
        """Nesting past the JSON decoder's recursion limit is just unrecognized."""
        assert detect("[" * 100000) is None


class TestCsv:
    """CSV header detection."""

    def test_pocket_header(self):
        assert detect("url,title,tags,time_added\n") == ImportFormat.POCKET

    def test_pocket_given_url_header(self):
        assert detect("given_url,given_title,time_added\nhttps://a.com,A,1") == ImportFormat.POCKET

    def test_instapaper_header(self):
        assert detect("URL,Title,Selection,Folder\n") == ImportFormat.INSTAPAPER

    def test_header_case_and_spacing(self):
        assert detect(" Url , Folder \nhttps://a.com,Tech") == ImportFormat.INSTAPAPER

    def test_pocket_wins_over_instapaper(self):
        """Rules are evaluated in order; Pocket comes first."""
        assert detect("url,folder,time_added\n") == ImportFormat.POCKET

    def test_url_alone_not_enough(self):
        assert detect("url,title\nhttps://example.com,Example") is None

    def test_quoted_header(self):
        assert detect('"url","title","time_added"\n') == ImportFormat.POCKET

    def test_leading_bom(self):
        assert detect("\ufeffurl,title,tags,time_added\nhttps://a.com,A,,1\n") == ImportFormat.POCKET
        assert detect("\ufeffURL,Title,Selection,Folder\n") == ImportFormat.INSTAPAPER


class TestUnrecognized:
    """Content that matches no format."""

    @pytest.mark.parametrize("content", ["", "   ", "\n\t\n"])
    def test_blank(self, content):
        assert detect(content) is None

    def test_none(self):
        assert detect(None) is None

    def test_plain_text(self):
        assert detect("just some notes\nhttps://example.com") is None
