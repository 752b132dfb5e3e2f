from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from restclient import ApiBase, ApiPayload, HttpxApi, RequestsApi, create_client
from restclient.exceptions import FormatError, HttpError, NetworkError, ParseError
from restclient.http import decode_content
from restclient.models import ApiMethod, ApiResponse, ApiResponseType


@dataclass
class FakeResponse:
    status: int = 200
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)
    reason: str = ""


class FakeApi(ApiBase[FakeResponse]):
    """In-memory transport returning queued responses."""

    def __init__(self, *responses: FakeResponse | Exception, **options: Any) -> None:
        super().__init__(**options)
        self.responses = list(responses)
        self.calls: list[tuple[ApiMethod, str, Any, Any, Mapping[str, Any]]] = []

    async def create_response(self, method, url, headers, data, response_type, rest):
        self.calls.append((method, url, headers, data, rest))
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def response_data(self, response, response_type=None, date_fields=None, default_value=None):
        return decode_content(
            self.transform_response(response),
            response.body,
            response_type=response_type,
            date_fields=date_fields,
            default_value=default_value,
        )

    def transform_response(self, response):
        return ApiResponse.from_status(response.headers, response.status, response.reason)

    async def get_json(self, url):  # pragma: no cover - not used
        return None


def ok(body: bytes = b"{}", **headers) -> FakeResponse:
    return FakeResponse(200, body, {"Content-Type": "application/json", **headers})


@pytest.mark.asyncio
async def test_format_error_skips_transport():
    api = FakeApi(ok())
    seen = []

    result = await api.get("/x", {"id": 1}, params={"page": 1}, on_error=seen.append)

    assert result is None
    assert api.calls == []
    assert isinstance(seen[0], FormatError)
    assert seen[0].depth == 0
    assert api.last_error is seen[0]


@pytest.mark.asyncio
async def test_unhandled_error_is_raised():
    api = FakeApi(FakeResponse(500, b"", {}, "Server Error"))

    with pytest.raises(HttpError) as excinfo:
        await api.get("/x")

    assert str(excinfo.value) == "Server Error"
    assert api.last_error is excinfo.value


@pytest.mark.asyncio
async def test_local_handler_returning_false_skips_global():
    global_seen = []
    api = FakeApi(OSError("unreachable"), on_error=global_seen.append)

    result = await api.get("/x", on_error=lambda error: False)

    assert result is None
    assert global_seen == []
    assert isinstance(api.last_error, NetworkError)


@pytest.mark.asyncio
async def test_global_handler_runs_after_local_handler():
    order = []
    api = FakeApi(OSError(""), on_error=lambda error: order.append("global"))

    await api.get("/x", on_error=lambda error: order.append("local"))

    assert order == ["local", "global"]
    assert str(api.last_error) == "Network Error"


@pytest.mark.asyncio
async def test_global_handler_alone_suppresses_raise():
    seen = []
    api = FakeApi(FakeResponse(404, b'{"message": "No such customer"}'), on_error=seen.append)

    assert await api.get("/Customer/1") is None
    assert str(seen[0]) == "No such customer"


@pytest.mark.asyncio
async def test_parser_error_has_depth_two():
    api = FakeApi(ok(b'{"id": "x"}'))
    seen = []

    def parser(data):
        return ValueError("id must be numeric"), None

    result = await api.get("/x", parser=parser, on_error=seen.append)

    assert result is None
    assert isinstance(seen[0], ParseError)
    assert seen[0].depth == 2
    assert str(seen[0]) == "id must be numeric"


@pytest.mark.asyncio
async def test_parser_message_error_has_depth_two():
    api = FakeApi(ok(b'{"id": "x"}'))
    seen = []

    result = await api.get("/x", parser=lambda data: ("id must be numeric", None), on_error=seen.append)

    assert result is None
    assert isinstance(seen[0], ParseError)
    assert seen[0].depth == 2
    assert str(seen[0]) == "id must be numeric"


@pytest.mark.asyncio
async def test_parser_value_or_default():
    api = FakeApi(ok(b'{"id": 3}'), ok(b'{"id": 3}'))

    parsed = await api.get("/x", parser=lambda data: (None, data["id"] * 2))
    fallback = await api.get("/x", parser=lambda data: (None, None), default_value=0)

    assert parsed == 6
    assert fallback == 0


@pytest.mark.asyncio
async def test_execute_returns_result_without_handlers():
    api = FakeApi(FakeResponse(503, b"", {}, "Unavailable"), ok(b"[1]"))

    failed = await api.execute("get", "/x")
    succeeded = await api.execute(ApiMethod.GET, "/x")

    assert not failed.ok
    assert isinstance(failed.error, HttpError)
    with pytest.raises(HttpError):
        failed.unwrap()
    assert succeeded.ok
    assert succeeded.unwrap() == [1]
    assert api.last_error is None


@pytest.mark.asyncio
async def test_last_error_is_reset_by_next_call():
    api = FakeApi(OSError("down"), ok())

    await api.get("/x", on_error=lambda error: None)
    assert api.last_error is not None

    await api.get("/x")
    assert api.last_error is None


@pytest.mark.asyncio
async def test_observer_failure_does_not_change_outcome(caplog):
    def broken(data):
        raise RuntimeError("observer broke")

    api = FakeApi(ok(b'{"a": 1}'), on_request=broken)

    with caplog.at_level("ERROR", logger="restclient.base"):
        result = await api.get("/x")

    assert result == {"a": 1}
    assert "observer" in caplog.text


@pytest.mark.asyncio
async def test_local_call_bypasses_base_url():
    api = FakeApi(ok(), ok(), base_url="https://api.test")

    await api.get("/x")
    await api.get("/x", local=True)

    assert [call[1] for call in api.calls] == ["https://api.test/x", "/x"]


@pytest.mark.asyncio
async def test_rest_options_reach_transport_without_headers():
    api = FakeApi(ok(), config={"timeout": 4, "headers": {"Accept": "application/json"}})

    await api.post("/x", {"a": 1}, config={"extensions": {"trace": True}})

    _, _, headers, data, rest = api.calls[0]
    assert rest == {"timeout": 4, "extensions": {"trace": True}}
    assert headers["Accept"] == "application/json"
    assert data == '{"a":1}'


@pytest.mark.asyncio
async def test_payload_and_keywords_are_exclusive():
    api = FakeApi(ok())

    with pytest.raises(TypeError):
        await api.get("/x", payload=ApiPayload(), default_value=1)


@pytest.mark.asyncio
async def test_show_loading_and_response_type_recorded():
    api = FakeApi(ok(b"hi", **{"Content-Type": "text/plain"}))
    records = []
    api.on_request = records.append

    result = await api.get("/x", show_loading=True, response_type=ApiResponseType.TEXT)

    assert result == "hi"
    assert records[0].show_loading is True
    assert records[0].response_type is ApiResponseType.TEXT


def test_authorize_and_content_language_on_defaults():
    api = FakeApi()

    api.authorize("Bearer", "abc")
    api.set_content_language("en-NZ")
    api.authorize("Bearer", None)

    headers = api.config.defaults["headers"]
    assert api.get_header_value(headers, "authorization") is None
    assert api.get_header_value(headers, "content-language") == "en-NZ"


def test_create_client_picks_transport():
    assert isinstance(create_client(), HttpxApi)
    requests_api = create_client("requests", base_url="https://api.test")
    assert isinstance(requests_api, RequestsApi)
    assert requests_api.base_url == "https://api.test"
    with pytest.raises(ValueError):
        create_client("urllib")
