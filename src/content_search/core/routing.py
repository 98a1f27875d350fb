"""URL routing for content pages."""

from typing import Dict, Union

from ..models.content import ContentType

BASE_URLS: Dict[ContentType, str] = {
    ContentType.PORTFOLIO: "/portfolio",
    ContentType.BLOG: "/workshop/blog",
    ContentType.PLUGIN: "/workshop/plugins",
    ContentType.DOWNLOAD: "/workshop/downloads",
    ContentType.TOOL: "/tools",
    ContentType.PROFILE: "/about/profile",
    ContentType.PAGE: "",
}


def content_url(content_type: Union[ContentType, str], content_id: str) -> str:
    """
    Compute the page URL of a content item.

    Types without a route of their own map to ``/<type>/<id>``.
    """
    try:
        content_type = ContentType(content_type)
    except ValueError:
        return f"/{content_type}/{content_id}"

    base = BASE_URLS.get(content_type)
    if base is None:
        return f"/{content_type.value}/{content_id}"
    return f"{base}/{content_id}"
