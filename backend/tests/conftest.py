import httpx
import pytest

from htsduty.core.context import ResolverContext
from htsduty.core.search import HtsSearchEngine
from htsduty.core.usitc import UsitcClient

from fakes import FOOTWEAR_RECORDS


@pytest.fixture
def footwear():
    return [dict(r) for r in FOOTWEAR_RECORDS]


@pytest.fixture
def context():
    return ResolverContext(cache_max_entries=50)


@pytest.fixture
def make_client():
    """UsitcClient over a MockTransport; no retries or backoff unless asked."""
    def factory(handler, breakers=None, **kwargs) -> UsitcClient:
        kwargs.setdefault("max_retries", 0)
        kwargs.setdefault("backoff_base_s", 0)
        return UsitcClient(
            breakers=breakers,
            transport=httpx.MockTransport(handler),
            **kwargs,
        )
    return factory


@pytest.fixture
def make_engine(make_client, context):
    def factory(handler, ctx=None, **client_kwargs) -> HtsSearchEngine:
        ctx = ctx or context
        client = make_client(handler, breakers=ctx.breakers, **client_kwargs)
        return HtsSearchEngine(client=client, context=ctx)
    return factory
