"""Tests for Link header generation."""

from urllib.parse import parse_qs, urlparse

from keyset_pagination.models.page import PageInfo
from keyset_pagination.pagination.links import create_link_header


def parse_links(header):
    links = {}
    for part in header.split(", "):
        url, rel = part.split("; ")
        links[rel.split('"')[1]] = url.strip("<>")
    return links


class TestCreateLinkHeader:
    """Test RFC 8288 Link headers."""

    def test_no_links(self):
        page_info = PageInfo(has_next_page=False, has_previous_page=False)
        assert create_link_header("/items", {"limit": 10}, page_info) is None

    def test_next_link(self):
        page_info = PageInfo(has_next_page=True, has_previous_page=False, start_cursor="s", end_cursor="e")

        links = parse_links(create_link_header("/items", {"limit": 10}, page_info))

        assert list(links) == ["next"]
        assert parse_qs(urlparse(links["next"]).query) == {"limit": ["10"], "after": ["e"]}

    def test_next_and_prev_links(self):
        page_info = PageInfo(has_next_page=True, has_previous_page=True, start_cursor="s", end_cursor="e")

        links = parse_links(create_link_header("/items", {"limit": 10, "order": "name"}, page_info))

        assert urlparse(links["next"]).path == "/items"
        assert parse_qs(urlparse(links["next"]).query)["after"] == ["e"]
        assert parse_qs(urlparse(links["prev"]).query) == {"limit": ["10"], "order": ["name"], "before": ["s"]}

    def test_request_cursors_are_replaced(self):
        """Cursors of the current request do not leak into the links."""
        page_info = PageInfo(has_next_page=True, has_previous_page=True, start_cursor="s", end_cursor="e")

        links = parse_links(create_link_header("/items", {"after": "old", "before": None}, page_info))

        assert parse_qs(urlparse(links["next"]).query) == {"after": ["e"]}
        assert parse_qs(urlparse(links["prev"]).query) == {"before": ["s"]}

    def test_cursors_are_url_encoded(self):
        page_info = PageInfo(has_next_page=True, has_previous_page=False, end_cursor="WzEsMl0=")

        header = create_link_header("/items", {}, page_info)

        assert "after=WzEsMl0%3D" in header
