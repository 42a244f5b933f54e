"""RFC 8288 Link headers for paginated responses."""

from typing import Any, Dict, Optional
from urllib.parse import urlencode

from ..models.page import PageInfo


def create_link_header(
    base_url: str,
    params: Dict[str, Any],
    page_info: PageInfo
) -> Optional[str]:
    """Create Link header for pagination as per RFC 8288.

    Args:
        base_url: Base URL for the resource
        params: Current query parameters
        page_info: Page info of the page being returned

    Returns:
        Link header value or None if no links
    """
    # Cursors from the current request never carry over to the next one
    params = {k: v for k, v in params.items() if k not in ("after", "before") and v is not None}
    links = []

    if page_info.has_next_page and page_info.end_cursor:
        next_url = f"{base_url}?" + urlencode({**params, "after": page_info.end_cursor})
        links.append(f'<{next_url}>; rel="next"')

    if page_info.has_previous_page and page_info.start_cursor:
        prev_url = f"{base_url}?" + urlencode({**params, "before": page_info.start_cursor})
        links.append(f'<{prev_url}>; rel="prev"')

    return ", ".join(links) if links else None
