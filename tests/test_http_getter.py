import httpx
import pytest

from bytecache.api.errors import LoaderError, SourceNotFound, SourceUnavailable
from bytecache.api.http_getter import HttpGetter
from bytecache.group.group import Group

BASE_URL = "https://source.test/scores"

# --- FIXTURES ---


@pytest.fixture
def getter():
    g = HttpGetter(BASE_URL)
    yield g
    g.close()


# --- TESTS ---


def test_get_returns_body(getter, respx_mock):
    route = respx_mock.get(f"{BASE_URL}/Tom").mock(return_value=httpx.Response(200, content=b"630"))
    assert getter.get("Tom") == b"630"
    assert route.call_count == 1


def test_key_is_url_quoted(getter, respx_mock):
    route = respx_mock.get(f"{BASE_URL}/b%20c").mock(return_value=httpx.Response(200, content=b"ok"))
    assert getter.get("b c") == b"ok"
    assert route.called
    assert getter._url_for("a/b") == "/a%2Fb"


def test_404_is_source_not_found(getter, respx_mock):
    respx_mock.get(f"{BASE_URL}/ghost").mock(return_value=httpx.Response(404))
    with pytest.raises(SourceNotFound) as excinfo:
        getter.get("ghost")
    assert excinfo.value.key == "ghost"


@pytest.mark.parametrize("status", [429, 500, 503])
def test_server_errors_are_unavailable(getter, respx_mock, status):
    respx_mock.get(f"{BASE_URL}/Tom").mock(return_value=httpx.Response(status))
    with pytest.raises(SourceUnavailable) as excinfo:
        getter.get("Tom")
    assert excinfo.value.status_code == status
    assert f"status={status}" in str(excinfo.value)


def test_other_client_errors_are_loader_errors(getter, respx_mock):
    respx_mock.get(f"{BASE_URL}/Tom").mock(return_value=httpx.Response(403))
    with pytest.raises(LoaderError) as excinfo:
        getter.get("Tom")
    assert not isinstance(excinfo.value, (SourceNotFound, SourceUnavailable))


def test_transport_error_is_unavailable(getter, respx_mock):
    respx_mock.get(f"{BASE_URL}/Tom").mock(side_effect=httpx.ConnectError("refused"))
    with pytest.raises(SourceUnavailable) as excinfo:
        getter.get("Tom")
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


@pytest.mark.parametrize(
    "error",
    [httpx.TooManyRedirects("redirect loop"), httpx.DecodingError("bad gzip"), httpx.ReadTimeout("slow")],
)
def test_any_request_error_is_unavailable(getter, respx_mock, error):
    respx_mock.get(f"{BASE_URL}/Tom").mock(side_effect=error)
    with pytest.raises(SourceUnavailable) as excinfo:
        getter.get("Tom")
    assert excinfo.value.__cause__ is error
    assert excinfo.value.key == "Tom"


def test_group_over_http_loads_once(getter, respx_mock):
    route = respx_mock.get(f"{BASE_URL}/Tom").mock(return_value=httpx.Response(200, content=b"910"))
    group = Group("scores", 2 << 10, getter)

    assert str(group.get("Tom")) == "910"
    assert str(group.get("Tom")) == "910"
    assert route.call_count == 1


def test_group_over_http_does_not_cache_errors(getter, respx_mock):
    route = respx_mock.get(f"{BASE_URL}/ghost").mock(return_value=httpx.Response(404))
    group = Group("scores", 2 << 10, getter)

    for _ in range(2):
        with pytest.raises(SourceNotFound):
            group.get("ghost")
    assert route.call_count == 2
