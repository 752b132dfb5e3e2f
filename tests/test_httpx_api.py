import json
from datetime import datetime

import httpx
import pytest

from restclient import ApiPayload, HttpxApi
from restclient.exceptions import DecodeError, HttpError, NetworkError
from restclient.models import ApiResponseType, FileItem, FileList

BASE_URL = "http://localhost:19333"

COUNTRIES = [
    {"id": "CN", "name": "China", "creation": "1949-10-1"},
    {"id": "NZ", "name": "New Zealand", "creation": "1907-9-26"},
]


def build_api(handler, **options) -> tuple[HttpxApi, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def recording_handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
    return HttpxApi(base_url=BASE_URL, client=client, **options), requests


def json_response(data, status=200, **headers):
    return httpx.Response(
        status,
        headers={"Content-Type": "application/json", **headers},
        content=json.dumps(data).encode(),
    )


@pytest.mark.asyncio
async def test_get_json_list():
    api, sent = build_api(lambda request: json_response(COUNTRIES))

    result = await api.get("/Customer/CountryList")

    assert len(result) == 2
    assert str(sent[0].url) == f"{BASE_URL}/Customer/CountryList"


@pytest.mark.asyncio
async def test_empty_json_body_maps_to_default_value():
    api, _ = build_api(
        lambda request: httpx.Response(200, headers={"Content-Type": "application/json"})
    )

    assert await api.get("/Customer/CountryList") is None
    assert await api.get("/Customer/CountryList", default_value=[]) == []


@pytest.mark.asyncio
async def test_post_with_params_date_fields_and_observers():
    api, sent = build_api(
        lambda request: json_response(COUNTRIES, **{"Content-Type": "application/json; charset=utf-8"})
    )
    events = []
    api.on_request = lambda data: events.append(("request", data.url))
    api.on_complete = lambda data, response: events.append(("complete", response.status_code))
    api.on_response = lambda data, response: events.append(("response", data.url))

    payload = ApiPayload(params={"id": 2, "name": "test"}, date_fields=["creation"])
    result = await api.post("/Customer/CountryList", {"id": 1}, payload)

    assert [name for name, _ in events] == ["request", "complete", "response"]
    assert "id=2" in events[2][1] and "name=test" in events[2][1]
    assert sent[0].url.params["id"] == "2"
    assert json.loads(sent[0].content) == {"id": 1}
    assert sent[0].headers["content-type"] == "application/json; charset=utf-8"
    assert result[0]["creation"] == datetime(1949, 10, 1)



@pytest.mark.asyncio
async def test_not_found_without_status_text():
    def handler(request):
        response = json_response({"title": "Not Found"}, status=404)
        response.extensions["reason_phrase"] = b""
        return response

    api, _ = build_api(handler)
    seen = []

    result = await api.get("/Customer/CountryList", on_error=seen.append)

    assert result is None
    assert str(seen[0]) == "Not Found"
    assert isinstance(seen[0], HttpError)
    assert api.last_error.data.url == "/Customer/CountryList"


@pytest.mark.asyncio
async def test_connect_error_is_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    api, _ = build_api(handler)
    completed = []
    api.on_complete = lambda data, response: completed.append(response)

    with pytest.raises(NetworkError) as excinfo:
        await api.get("/x")

    assert excinfo.value.status_code == -1
    assert str(excinfo.value) == "connection refused"
    assert completed == [None]


@pytest.mark.asyncio
async def test_malformed_json_is_decode_error():
    api, _ = build_api(
        lambda request: httpx.Response(
            200, headers={"Content-Type": "application/json"}, content=b"{oops"
        )
    )

    with pytest.raises(DecodeError) as excinfo:
        await api.get("/x")

    assert excinfo.value.depth == 3
    assert isinstance(excinfo.value.source, json.JSONDecodeError)


@pytest.mark.asyncio
async def test_file_list_is_posted_as_multipart():
    api, sent = build_api(lambda request: httpx.Response(204))
    files = FileList([FileItem("a.txt", b"hello", "text/plain")])

    await api.post("/upload", files)

    request = sent[0]
    assert request.headers["content-type"].startswith("multipart/form-data")
    assert b'name="files"; filename="a.txt"' in request.content


@pytest.mark.asyncio
async def test_stream_shape_returns_async_iterator():
    api, _ = build_api(lambda request: httpx.Response(200, content=b"abcdef"))

    stream = await api.get("/file", response_type=ApiResponseType.STREAM)

    assert b"".join([chunk async for chunk in stream]) == b"abcdef"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "headers"),
    [(204, {}), (200, {"Content-Length": "0"})],
)
async def test_empty_stream_maps_to_default_value(status, headers):
    api, _ = build_api(lambda request: httpx.Response(status, headers=headers))

    assert await api.get("/file", response_type="stream", default_value=[]) == []
    assert api.last_error is None


@pytest.mark.asyncio
async def test_charset_follows_other_content_type_parameters():
    odata = "application/json; odata.metadata=minimal; charset=utf-8"
    api, _ = build_api(lambda request: json_response({"id": 1}, **{"Content-Type": odata}))

    assert await api.get("/x") == {"id": 1}
    assert api.last_error is None


@pytest.mark.asyncio
@pytest.mark.parametrize("data", [[{"id": 1}, {"id": 2}], [1, 2, 3]])
async def test_sequence_body_is_posted_as_json(data):
    api, sent = build_api(lambda request: json_response({"saved": True}))

    result = await api.post("/x", data)

    assert result == {"saved": True}
    assert json.loads(sent[0].content) == data
    assert sent[0].headers["content-type"] == "application/json; charset=utf-8"


@pytest.mark.asyncio
async def test_text_and_blob_shapes():
    api, _ = build_api(
        lambda request: httpx.Response(200, headers={"Content-Type": "text/plain"}, content=b"hi")
    )

    assert await api.get("/t", response_type=ApiResponseType.TEXT) == "hi"
    assert await api.get("/b", response_type=ApiResponseType.BLOB) == b"hi"


@pytest.mark.asyncio
async def test_content_disposition_from_response():
    api, _ = build_api(
        lambda request: httpx.Response(
            200,
            headers={"Content-Disposition": 'attachment; filename="report.csv"'},
            content=b"a,b",
        )
    )
    payload = ApiPayload(response_type=ApiResponseType.BLOB, keep_response=True)

    await api.get("/report", payload=payload)
    disposition = api.get_content_disposition(payload.response)

    assert disposition.filename == "report.csv"


@pytest.mark.asyncio
async def test_get_json_helper():
    api, _ = build_api(lambda request: json_response({"query": "101.98.49.5"}))

    assert await api.get_json("http://ip-api.com/json") == {"query": "101.98.49.5"}


@pytest.mark.asyncio
async def test_context_manager_closes_owned_client():
    async with HttpxApi(base_url=BASE_URL) as api:
        client = api._client

    assert client.is_closed
