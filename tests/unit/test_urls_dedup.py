"""
MarkPort v1 - URL Helper and Deduplicator Tests
"""

import pytest

from importer import ParsedBookmark, base_url, collect_base_urls, is_valid_http_url, partition


class TestIsValidHttpUrl:
    """http(s) URL validation."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com",
            "http://example.com/path?q=1#frag",
            "HTTPS://EXAMPLE.COM",
            "http://localhost:8080/",
            "https://[::1]/",
            "  https://example.com/padded  ",
        ],
    )
    def test_valid(self, url):
        assert is_valid_http_url(url)

    @pytest.mark.parametrize(
        "url",
        [
            "",
            "   ",
            "javascript:void(0)",
            "ftp://files.example.com/a.zip",
            "mailto:someone@example.com",
            "example.com/no-scheme",
            "https://",
            "http://example.com:99999/",
            "not-a-url",
            None,
            42,
        ],
    )
    def test_invalid(self, url):
        assert not is_valid_http_url(url)


class TestBaseUrl:
    """Base URL normalization."""

    def test_drops_query_and_fragment(self):
        assert base_url("https://example.com/a?utm_source=x#top") == "https://example.com/a"

    def test_lowercases_scheme_and_host(self):
        assert base_url("HTTPS://Example.COM/Path") == "https://example.com/Path"

    def test_empty_path_becomes_slash(self):
        assert base_url("https://example.com?x=1") == "https://example.com/"
        assert base_url("https://example.com") == base_url("https://example.com/")

    def test_default_port_dropped(self):
        assert base_url("https://example.com:443/a") == "https://example.com/a"
        assert base_url("http://example.com:80/a") == "http://example.com/a"

    def test_other_port_kept(self):
        assert base_url("http://example.com:8080/a") == "http://example.com:8080/a"
        assert base_url("https://example.com:80/a") == "https://example.com:80/a"

    def test_ipv6_host(self):
        assert base_url("https://[::1]:8443/x") == "https://[::1]:8443/x"

    def test_scheme_distinguishes(self):
        assert base_url("http://example.com/a") != base_url("https://example.com/a")

    def test_trailing_slash_distinguishes(self):
        assert base_url("https://example.com/a") != base_url("https://example.com/a/")

    def test_invalid_returns_none(self):
        assert base_url("javascript:void(0)") is None
        assert base_url("") is None


class TestCollectBaseUrls:
    def test_normalizes_and_ignores_invalid(self):
        urls = ["https://Example.com/a?x=1", "https://example.com/a", "not a url", "https://b.com"]
        assert collect_base_urls(urls) == {"https://example.com/a", "https://b.com/"}


class TestPartition:
    """Splitting parsed bookmarks into new and skipped."""

    def test_skips_existing_by_base_url(self):
        parsed = [
            ParsedBookmark(url="https://example.com/a?ref=feed"),
            ParsedBookmark(url="https://example.com/b"),
        ]
        result = partition(parsed, {"https://example.com/a"})

        assert result.skipped_count == 1
        assert [b.url for b in result.new] == ["https://example.com/b"]

    def test_preserves_order(self):
        urls = [f"https://example.com/{i}" for i in range(5)]
        result = partition([ParsedBookmark(url=u) for u in urls], {"https://example.com/2"})
        assert [b.url for b in result.new] == [u for u in urls if not u.endswith("/2")]

    def test_in_file_duplicates_all_kept(self):
        """Entries sharing a URL within one file are not collapsed."""
        parsed = [ParsedBookmark(url="https://example.com/a"), ParsedBookmark(url="https://example.com/a#x")]
        result = partition(parsed, set())
        assert len(result.new) == 2
        assert result.skipped_count == 0

    def test_in_file_duplicates_all_skipped_when_existing(self):
        parsed = [ParsedBookmark(url="https://example.com/a"), ParsedBookmark(url="https://example.com/a?b=1")]
        result = partition(parsed, {"https://example.com/a"})
        assert result.new == []
        assert result.skipped_count == 2

    def test_invalid_url_never_matches(self):
        parsed = [ParsedBookmark(url="not a url")]
        result = partition(parsed, {"not a url"})
        assert len(result.new) == 1

    def test_counts_add_up(self, load_fixture):
        from importer import parse_bookmark_file

        bookmarks = parse_bookmark_file(load_fixture("pinboard.json")).bookmarks
        existing = collect_base_urls(["https://example.com/pinboard-one", "http://example.com/pinboard-five"])
        result = partition(bookmarks, existing)

        assert result.skipped_count == 2
        assert len(result.new) + result.skipped_count == len(bookmarks)

    def test_empty_input(self):
        result = partition([], {"https://example.com/"})
        assert result.new == []
        assert result.skipped_count == 0
