import pytest

from datera_client.exceptions import UnexpectedResponseError
from datera_client.models import (
    ApiErrorResponse,
    ApiListOuter,
    ApiOuter,
    ListParams,
    ListRangeParams,
)


def test_list_params_omit_zero_and_empty_fields():
    assert ListParams().to_map() == {}
    assert ListParams(limit=10, sort="name").to_map() == {"limit": "10", "sort": "name"}


def test_list_params_round_trip():
    params = ListParams(filter="match(name,vol.*)", limit=25, sort="-name", offset=50)

    assert ListParams.from_map(params.to_map()) == params


def test_list_params_from_map_defaults_and_base_prefix():
    params = ListParams.from_map({"offset": "0x10"})

    assert params == ListParams(offset=16)
    assert params.is_windowed
    assert not ListParams.from_map({"filter": "x"}).is_windowed


def test_list_params_from_map_rejects_garbage():
    with pytest.raises(ValueError):
        ListParams.from_map({"limit": "ten"})


def test_range_params_round_trip():
    params = ListRangeParams(since="2h", from_="2024-01-01", to="2024-01-02", limit=5)

    mapped = params.to_map()

    assert mapped == {"limit": "5", "since": "2h", "from": "2024-01-01", "to": "2024-01-02"}
    assert ListRangeParams.from_map(mapped) == params


def test_error_response_decodes_wire_names():
    eresp = ApiErrorResponse.from_json(
        {
            "name": "NotFoundError",
            "code": 1002,
            "http": 404,
            "connInfo": {"refs": "1"},
            "api_req_id": 77,
            "errors": ["missing"],
        }
    )

    assert eresp.conn_info == {"refs": "1"}
    assert eresp.api_req_id == 77
    assert eresp.to_json()["connInfo"] == {"refs": "1"}
    assert "message" not in eresp.to_json()
    assert "NotFoundError (http 404)" in eresp.describe()


def test_list_envelope_total_count():
    envelope = ApiListOuter.from_json({"data": [1, 2], "metadata": {"total_count": 120.0}})

    assert envelope.total_count == 120
    assert ApiListOuter.from_json({"data": []}).total_count is None


def test_envelopes_reject_wrong_shapes():
    with pytest.raises(UnexpectedResponseError):
        ApiOuter.from_json({"data": [1, 2]})
    with pytest.raises(UnexpectedResponseError):
        ApiListOuter.from_json({"data": {"a": 1}})
    with pytest.raises(UnexpectedResponseError):
        ApiOuter.from_json(["not", "an", "object"])
