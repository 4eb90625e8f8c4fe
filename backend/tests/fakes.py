"""Test doubles for the USITC RestStop API."""

import httpx

from htsduty.core.normalization.pipeline import to_code10


FOOTWEAR_RECORDS = [
    {"htsno": "6404.11", "description": "Sports footwear", "general": ""},
    {
        "htsno": "6404.11.20.00",
        "description": "Sneakers of textile uppers, valued not over $3/pair",
        "general": "48%",
    },
    {
        "htsno": "6404.11.90.00",
        "description": "Sneakers of textile uppers, valued over $12/pair",
        "general": "20%",
    },
    {
        "htsno": "6404.19.90.00",
        "description": "Footwear with outer soles of rubber, nesoi",
        "general": "37.5%",
    },
]


class FakeUsitc:
    """Stand-in for the RestStop API, served through httpx.MockTransport.

    search_results maps keyword -> records (missing keywords return []).
    export_records are filtered by the requested from/to code range.
    fail_keywords answer 500 for those keywords.
    """

    def __init__(self, search_results=None, export_records=None, fail_keywords=()):
        self.search_results = dict(search_results or {})
        self.export_records = list(export_records or [])
        self.fail_keywords = set(fail_keywords)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        params = request.url.params

        if path.endswith("/search"):
            keyword = params.get("keyword", "")
            if keyword in self.fail_keywords:
                return httpx.Response(500, text="Internal Server Error")
            return httpx.Response(200, json=self.search_results.get(keyword, []))

        if path.endswith("/exportList"):
            lo, hi = params.get("from", ""), params.get("to", "")
            rows = [r for r in self.export_records if lo <= to_code10(r["htsno"]) <= hi]
            return httpx.Response(200, json=rows)

        return httpx.Response(404, text="Not Found")

    def paths(self) -> list[str]:
        return [r.url.path.rsplit("/", 1)[-1] for r in self.requests]


def always(status: int, text: str = ""):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, text=text)
    return handler
