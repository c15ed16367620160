import pytest

from trestleflow.errors import MissingFieldError, NodeOperationError
from trestleflow.executors.base import SKIP
from trestleflow.http_client import RemoteServiceError

PHONE_URL = "https://api.trestleiq.com/3.0/phone_intel"
CONTACT_URL = "https://api.trestleiq.com/1.1/real_contact"


# Phone validation

def test_phone_validation_minimal_url(executor, make_context):
    ctx = make_context([{"phone": "2069735100"}])
    request = executor.build_request(ctx.items[0], 0, ctx)
    assert request.method == "GET"
    assert request.url == f"{PHONE_URL}?phone=2069735100"
    assert request.body is None


@pytest.mark.parametrize("params, suffix", [
    ({"includeLitigatorCheck": True}, "&addons=litigator_check"),
    ({"countryHint": "US"}, "&phone.country_hint=US"),
    ({"countryHint": "US", "includeLitigatorCheck": True}, "&phone.country_hint=US&addons=litigator_check"),
])
def test_phone_validation_optional_query(executor, make_context, params, suffix):
    ctx = make_context([{"phone": "2069735100"}], params)
    request = executor.build_request(ctx.items[0], 0, ctx)
    assert request.url == f"{PHONE_URL}?phone=2069735100{suffix}"


def test_phone_is_uri_component_encoded(executor, make_context):
    ctx = make_context([{"phone": "+1 (206) 973-5100"}])
    request = executor.build_request(ctx.items[0], 0, ctx)
    assert request.url == f"{PHONE_URL}?phone=%2B1%20(206)%20973-5100"


def test_phone_field_mapping(executor, make_context):
    ctx = make_context([{"mobile": "2069735100"}], {"phoneField": "mobile"})
    request = executor.build_request(ctx.items[0], 0, ctx)
    assert request.url == f"{PHONE_URL}?phone=2069735100"


def test_missing_phone_names_configured_field(executor, make_context):
    ctx = make_context([{"phone": ""}], {"phoneField": "phone"})
    with pytest.raises(MissingFieldError) as exc:
        executor.build_request(ctx.items[0], 0, ctx)
    assert exc.value.field_name == "phone"
    assert str(exc.value) == "Phone number not found in field 'phone'"


def test_batch_validate_is_skipped(executor, make_context, fake_http):
    ctx = make_context([{"phone": "2069735100"}], {"operation": "batchValidate"})
    assert executor.execute(ctx) == []
    fake_http.request_with_authentication.assert_not_called()


# Real contact

def test_real_contact_minimal_body(executor, make_context):
    ctx = make_context([{"name": "Jane Doe", "phone": "2069735100"}], {"resource": "realContact"})
    request = executor.build_request(ctx.items[0], 0, ctx)
    assert request.method == "POST"
    assert request.url == CONTACT_URL
    assert request.headers == {"Content-Type": "application/json"}
    assert request.body == {"name": "Jane Doe", "phone": "2069735100"}


def test_real_contact_addons_and_optional_fields(executor, make_context):
    item = {
        "name": "Jane Doe",
        "phone": "2069735100",
        "mail": "jane@example.com",
        "ip": "",
        "city": "Seattle",
        "postal_code": "98101",
    }
    params = {
        "resource": "realContact",
        "emailField": "mail",
        "includeEmailDeliverability": True,
        "includeLitigatorCheck": True,
    }
    ctx = make_context([item], params)
    request = executor.build_request(item, 0, ctx)
    assert request.body == {
        "name": "Jane Doe",
        "phone": "2069735100",
        "email": "jane@example.com",
        "city": "Seattle",
        "postal_code": "98101",
        "addons": "email_deliverability,litigator_check",
    }


def test_real_contact_name_checked_before_phone(executor, make_context):
    ctx = make_context([{}], {"resource": "realContact", "nameField": "full_name"})
    with pytest.raises(MissingFieldError) as exc:
        executor.build_request(ctx.items[0], 0, ctx)
    assert str(exc.value) == "Name not found in field 'full_name'"


def test_real_contact_missing_phone(executor, make_context):
    ctx = make_context([{"name": "Jane Doe"}], {"resource": "realContact", "phoneField": "cell"})
    with pytest.raises(MissingFieldError) as exc:
        executor.build_request(ctx.items[0], 0, ctx)
    assert str(exc.value) == "Phone number not found in field 'cell'"


@pytest.mark.parametrize("params", [
    {"resource": "realContact", "operation": "validate"},
    {"resource": "phoneValidation", "operation": "verify"},
    {"resource": "emailValidation", "operation": "validate"},
])
def test_unknown_combination_is_skipped(executor, make_context, params):
    ctx = make_context([{"name": "Jane Doe", "phone": "2069735100"}], params)
    assert executor.build_request(ctx.items[0], 0, ctx) is None
    assert executor.process_item(ctx.items[0], 0, ctx) is SKIP


# Batch loop

def test_results_correlate_with_input_and_skip_unmatched(executor, make_context, fake_http):
    items = [
        {"phone": "1", "resource": "phoneValidation"},
        {"phone": "2", "resource": "other"},
        {"phone": "3", "resource": "phoneValidation"},
    ]
    ctx = make_context(items, {"resource": "={{ $json.resource }}", "operation": "validate"})
    results = executor.execute(ctx)

    assert [r.item_index for r in results] == [0, 2]
    assert results[0].json["url"] == f"{PHONE_URL}?phone=1"
    assert results[1].json["url"] == f"{PHONE_URL}?phone=3"
    assert fake_http.request_with_authentication.call_count == 2


def test_uses_trestle_credential(executor, make_context, fake_http):
    executor.execute(make_context([{"phone": "2069735100"}]))
    credential_type, _ = fake_http.request_with_authentication.call_args.args
    assert credential_type == "trestleApi"
    assert fake_http.request_with_authentication.call_args.kwargs == {"credential_name": None}


def test_strict_mode_aborts_on_second_failure(executor, make_context, mocker):
    http = mocker.MagicMock()
    http.request_with_authentication.side_effect = [
        {"id": "a"},
        RemoteServiceError("SERVICE_HTTP_ERROR", "Service returned HTTP 500", 500),
        {"id": "c"},
    ]
    items = [{"phone": "1"}, {"phone": "2"}, {"phone": "3"}]
    build = mocker.spy(executor, "build_request")

    with pytest.raises(NodeOperationError) as exc:
        executor.execute(make_context(items, http=http))

    assert http.request_with_authentication.call_count == 2
    assert build.call_count == 2
    assert exc.value.item_index == 1
    assert isinstance(exc.value.__cause__, RemoteServiceError)
    assert str(exc.value) == "Service returned HTTP 500"
    assert [r.json for r in exc.value.partial_results] == [{"id": "a"}]


def test_strict_mode_missing_field_keeps_error_type(executor, make_context, fake_http):
    items = [{"phone": "1"}, {}]
    with pytest.raises(MissingFieldError) as exc:
        executor.execute(make_context(items))
    assert exc.value.item_index == 1
    assert fake_http.request_with_authentication.call_count == 1


def test_tolerant_mode_records_error_and_continues(executor, make_context, fake_http):
    items = [{"phone": "1"}, {"number": "2"}, {"phone": "3"}]
    results = executor.execute(make_context(items, continue_on_fail=True))

    assert [r.item_index for r in results] == [0, 1, 2]
    failed = results[1]
    assert failed.json == {"error": "Phone number not found in field 'phone'"}
    assert isinstance(failed.error, MissingFieldError)
    assert results[0].error is None and results[2].error is None
    assert fake_http.request_with_authentication.call_count == 2


def test_tolerant_mode_remote_error_message_passed_through(executor, make_context, mocker):
    http = mocker.MagicMock()
    http.request_with_authentication.side_effect = RemoteServiceError("SERVICE_UNREACHABLE", "connection refused")
    results = executor.execute(make_context([{"phone": "1"}], continue_on_fail=True, http=http))
    assert results[0].json == {"error": "connection refused"}
    assert results[0].to_dict()["error"] == {"type": "RemoteServiceError", "message": "connection refused"}


def test_execute_is_repeatable(executor, make_context):
    items = [{"phone": "1"}, {"phone": ""}, {"phone": "3"}]
    first = [r.to_dict() for r in executor.execute(make_context(items, continue_on_fail=True))]
    second = [r.to_dict() for r in executor.execute(make_context(items, continue_on_fail=True))]
    assert first == second
    assert items == [{"phone": "1"}, {"phone": ""}, {"phone": "3"}]


def test_describe_lists_properties(executor):
    desc = executor.describe()
    assert desc["name"] == "trestle"
    assert desc["version"] == 2
    assert desc["credentials"] == ["trestleApi"]
    names = [p["name"] for p in desc["properties"]]
    assert names.count("operation") == 2
    assert "postalCodeField" in names


@pytest.mark.parametrize("phone, encoded", [
    (2069735100, "2069735100"),
    (2069735100.0, "2069735100"),
    (True, "true"),
])
def test_non_string_values_encoded_like_javascript(executor, make_context, phone, encoded):
    ctx = make_context([{"phone": phone}])
    request = executor.build_request(ctx.items[0], 0, ctx)
    assert request.url == f"{PHONE_URL}?phone={encoded}"
