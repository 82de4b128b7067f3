import asyncio

import httpx
import pytest

from listing_aggregator.catalog import get_source
from listing_aggregator.errors import SourceUnavailable
from listing_aggregator.sources import FileSourceProvider, HttpSourceProvider, SourceKind, SourceRef
from listing_aggregator.sources.files import resolve_dataset_path
from listing_aggregator.sources.payload import parse_records


def test_parse_records_accepts_list_and_wrapped_object():
    assert parse_records("s", b'[{"a": 1}]', 100) == [{"a": 1}]
    assert parse_records("s", b'{"properties": [{"a": 1}]}', 100) == [{"a": 1}]


@pytest.mark.parametrize(
    "payload",
    [b"{not json", b'{"listings": []}', b'"text"', b"\xff\xfe"],
)
def test_parse_records_rejects_bad_payloads(payload):
    with pytest.raises(SourceUnavailable):
        parse_records("s", payload, 100)


def test_parse_records_enforces_max_bytes():
    with pytest.raises(SourceUnavailable) as excinfo:
        parse_records("s", b"[" + b" " * 200 + b"]", 100)
    assert excinfo.value.source_id == "s"


def test_resolve_dataset_path_stays_inside_data_dir(tmp_path):
    assert resolve_dataset_path(tmp_path, "a/b.json") == (tmp_path / "a" / "b.json").resolve()
    for bad in ("../secrets.json", "a/../../x.json", "evil\u202ejson", ""):
        with pytest.raises(ValueError):
            resolve_dataset_path(tmp_path, bad)


def test_file_provider_reads_fixture(datasets_dir):
    provider = FileSourceProvider(datasets_dir)
    batch = asyncio.run(provider.fetch(get_source("aggregator_miami_lease")))
    assert batch.kind is SourceKind.AGGREGATOR_LEASE
    assert batch.records[0]["id"] == "7001"


def test_file_provider_missing_and_broken_files(datasets_dir):
    provider = FileSourceProvider(datasets_dir)
    with pytest.raises(SourceUnavailable, match="cannot read"):
        asyncio.run(provider.fetch(get_source("commercial_houston")))
    with pytest.raises(SourceUnavailable, match="malformed JSON"):
        asyncio.run(provider.fetch(get_source("commercial_miami_beach")))


def test_file_provider_rejects_escaping_path(tmp_path):
    provider = FileSourceProvider(tmp_path)
    source = SourceRef("evil", "../outside.json", SourceKind.COMMERCIAL_EXPORT)
    with pytest.raises(SourceUnavailable):
        asyncio.run(provider.fetch(source))


def _http_provider(handler, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpSourceProvider("https://data.example.com/datasets", client=client, **kwargs)


def test_http_provider_fetches_relative_to_base_url():
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200, json=[{"zpid": 1}])

    provider = _http_provider(handler)
    batch = asyncio.run(provider.fetch(get_source("residential_miami_sale")))
    assert batch.records == [{"zpid": 1}]
    assert seen == ["https://data.example.com/datasets/residential/sale/miami_sale.json"]


def test_http_provider_maps_errors_to_source_unavailable():
    def not_found(request):
        return httpx.Response(404)

    def broken(request):
        raise httpx.ConnectError("refused", request=request)

    source = get_source("commercial_combined")
    with pytest.raises(SourceUnavailable, match="HTTP 404"):
        asyncio.run(_http_provider(not_found).fetch(source))
    with pytest.raises(SourceUnavailable, match="ConnectError"):
        asyncio.run(_http_provider(broken).fetch(source))


def test_http_provider_enforces_max_bytes():
    def big(request):
        return httpx.Response(200, content=b"[" + b" " * 500 + b"]")

    with pytest.raises(SourceUnavailable):
        asyncio.run(_http_provider(big, max_bytes=100).fetch(get_source("commercial_combined")))


def test_parse_records_rejects_deeply_nested_json():
    data = b"[" * 200_000 + b"]" * 200_000
    with pytest.raises(SourceUnavailable, match="nested too deeply"):
        parse_records("s", data, len(data))


def test_http_provider_drops_its_own_client_on_close():
    def handler(request):
        return httpx.Response(200, json=[])

    provider = HttpSourceProvider(
        "https://data.example.com", transport=httpx.MockTransport(handler)
    )
    source = get_source("commercial_combined")

    async def fetch_and_close():
        await provider.fetch(source)
        client = provider._client
        await provider.aclose()
        return client

    client = asyncio.run(fetch_and_close())
    assert client.is_closed
    assert provider._client is None

    shared = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    borrowed = HttpSourceProvider("https://data.example.com", client=shared)
    asyncio.run(borrowed.aclose())
    assert not shared.is_closed
