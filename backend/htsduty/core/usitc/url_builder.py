"""Build USITC RestStop URLs, directly or through a proxy.

Endpoints:
- Search: GET /search?keyword={term}
- Export: GET /exportList?from={code10}&to={code10}&format=JSON

A proxy base containing "?" (e.g. "/api/hts-proxy?path=") receives the
path+query percent-encoded as its last parameter; any other proxy base
is used as a plain prefix.
"""

from urllib.parse import quote, urlencode

from htsduty.config import settings


class UrlBuilder:
    """Default URL strategy. Anything with build() and breaker_prefix works."""

    def __init__(self, base_url: str | None = None, proxy_base_url: str | None = None):
        self.base_url = (base_url or settings.USITC_BASE_URL).rstrip("/")
        self.proxy_base_url = proxy_base_url

    @property
    def breaker_prefix(self) -> str:
        return self.proxy_base_url or self.base_url

    def build(self, path_with_query: str) -> str:
        path = path_with_query if path_with_query.startswith("/") else f"/{path_with_query}"
        proxy = self.proxy_base_url
        if not proxy:
            return f"{self.base_url}{path}"
        if "?" in proxy:
            return f"{proxy}{quote(path.lstrip('/'), safe='')}"
        return f"{proxy.rstrip('/')}{path}"

    @staticmethod
    def search_path(keyword: str) -> str:
        return f"/search?{urlencode({'keyword': keyword})}"

    @staticmethod
    def export_list_path(code_from: str, code_to: str) -> str:
        return f"/exportList?{urlencode({'from': code_from, 'to': code_to, 'format': 'JSON'})}"
