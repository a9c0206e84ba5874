import pytest


class FakeClient:
    """Answers CRM calls from a {method: response | [responses]} script."""

    def __init__(self, script):
        self.script = script
        self.calls = []

    def call(self, method, params=None):
        self.calls.append((method, params))
        response = self.script[method]
        if isinstance(response, list):
            return response.pop(0)
        return response


def test_create_lead_wraps_fields():
    from crm.service import create_lead

    client = FakeClient({"crm.lead.add": {"result": 77}})
    assert create_lead({"TITLE": "Bayut call"}, client=client) == 77
    assert client.calls == [("crm.lead.add", {"fields": {"TITLE": "Bayut call"}})]


def test_create_contact_wraps_fields():
    from crm.service import create_contact

    client = FakeClient({"crm.contact.add": {"result": 9}})
    assert create_contact({"NAME": "Asha"}, client=client) == 9
    assert client.calls[0] == ("crm.contact.add", {"fields": {"NAME": "Asha"}})


@pytest.mark.parametrize("func_name, method", [
    ("register_call", "telephony.externalcall.register"),
    ("finish_call", "telephony.externalcall.finish"),
    ("attach_record", "telephony.externalcall.attachRecord"),
])
def test_telephony_calls_pass_fields_through(func_name, method):
    from crm import service

    client = FakeClient({method: {"result": {"CALL_ID": "ext.1"}}})
    fields = {"USER_ID": 3, "PHONE_NUMBER": "+97150"}
    assert getattr(service, func_name)(fields, client=client) == {"CALL_ID": "ext.1"}
    assert client.calls == [(method, fields)]


def test_error_response_returns_none():
    from crm.service import create_lead

    client = FakeClient({"crm.lead.add": {"error": "ACCESS_DENIED", "error_description": "nope"}})
    assert create_lead({}, client=client) is None


def test_get_user_id_merges_active_filter():
    from crm.service import get_user_id

    client = FakeClient({"user.get": {"result": [{"ID": "15"}, {"ID": "16"}]}})
    assert get_user_id({"EMAIL": "agent@example.com"}, client=client) == 15
    assert client.calls[0] == ("user.get", {"filter": {"EMAIL": "agent@example.com", "ACTIVE": "Y"}})


@pytest.mark.parametrize("response", [
    {"error": "QUERY_LIMIT_EXCEEDED", "error_description": "slow down"},
    {"result": []},
    {"result": [{"NAME": "no id"}]},
])
def test_get_user_id_none_cases(response):
    from crm.service import get_user_id

    assert get_user_id({"EMAIL": "x"}, client=FakeClient({"user.get": response})) is None


def _listing(**fields):
    return {"result": {"items": [fields]}}


def test_responsible_person_prefers_owner_id():
    from crm.service import get_responsible_person

    client = FakeClient({"crm.item.list": _listing(ufCrm6OwnerId="42", ufCrm6ListingOwner="Ravi Kumar")})
    assert get_responsible_person("REF-1", "reference", client=client) == 42

    method, params = client.calls[0]
    assert method == "crm.item.list"
    assert params["entityTypeId"] == 1036
    assert params["filter"] == {"ufCrm6ReferenceNumber": "REF-1"}


def test_responsible_person_by_owner_name():
    from crm.service import get_responsible_person

    client = FakeClient({
        "crm.item.list": _listing(ufCrm6OwnerId=None, ufCrm6ListingOwner="  Ravi Kumar Shah "),
        "user.get": {"result": [{"ID": "31"}]},
    })
    assert get_responsible_person("REF-2", "reference", client=client) == 31
    assert client.calls[1] == ("user.get", {"filter": {
        "%NAME": "Ravi", "%LAST_NAME": "Kumar Shah", "!ID": 8, "ACTIVE": "Y",
    }})


def test_responsible_person_by_agent_email():
    from crm.service import get_responsible_person

    client = FakeClient({
        "crm.item.list": _listing(ufCrm6AgentEmail="agent@example.com"),
        "user.get": {"result": [{"ID": 12}]},
    })
    assert get_responsible_person("REF-3", "reference", client=client) == 12
    assert client.calls[1][1]["filter"] == {"EMAIL": "agent@example.com", "!ID": 8, "ACTIVE": "Y"}


@pytest.mark.parametrize("response", [
    {"error": "NOT_FOUND", "error_description": "missing"},
    {"result": {"items": []}},
    _listing(ufCrm6ReferenceNumber="REF-4"),
])
def test_responsible_person_falls_back_to_default(monkeypatch, response):
    from crm import service

    monkeypatch.setattr(service.config.crm, "default_assigned_user_id", 1893)
    client = FakeClient({"crm.item.list": response})
    assert service.get_responsible_person("REF-4", "reference", client=client) == 1893


def test_responsible_person_by_phone():
    from crm.service import get_responsible_person

    client = FakeClient({"user.get": {"result": [{"ID": "4"}]}})
    assert get_responsible_person("+971501234567", "phone", client=client) == 4
    assert client.calls[0][1]["filter"]["%PERSONAL_MOBILE"] == "+971501234567"


def test_responsible_person_unknown_type(monkeypatch):
    from crm import service

    monkeypatch.setattr(service.config.crm, "default_assigned_user_id", 7)
    client = FakeClient({})
    assert service.get_responsible_person("x", "email", client=client) == 7
    assert client.calls == []


def test_property_price():
    from crm.service import get_property_price

    client = FakeClient({"crm.item.list": [_listing(ufCrm6Price=1250000), {"result": {"items": []}}]})
    assert get_property_price("REF-9", client=client) == 1250000
    assert get_property_price("REF-10", client=client) is None
    assert client.calls[0][1]["select"] == ["ufCrm6Price"]


def test_default_client_is_built_once(monkeypatch):
    from crm import service

    built = []

    class StubClient:
        def __init__(self):
            built.append(self)

        def call(self, method, params=None):
            return {"result": 1}

    monkeypatch.setattr(service, "_client", None)
    monkeypatch.setattr(service, "CRestClient", StubClient)
    assert service.create_lead({}) == 1
    assert service.create_contact({}) == 1
    assert len(built) == 1


@pytest.mark.parametrize("owner_id", ["42", 42, "42.0", 42.0])
def test_responsible_person_numeric_owner_id_forms(owner_id):
    from crm.service import get_responsible_person

    client = FakeClient({"crm.item.list": _listing(ufCrm6OwnerId=owner_id, ufCrm6ListingOwner="Ravi Kumar")})
    assert get_responsible_person("REF-5", "reference", client=client) == 42
    assert len(client.calls) == 1


@pytest.mark.parametrize("owner_id", ["n/a", "0", ""])
def test_responsible_person_non_numeric_owner_id_uses_name(owner_id):
    from crm.service import get_responsible_person

    client = FakeClient({
        "crm.item.list": _listing(ufCrm6OwnerId=owner_id, ufCrm6ListingOwner="Ravi Kumar"),
        "user.get": {"result": [{"ID": "31"}]},
    })
    assert get_responsible_person("REF-6", "reference", client=client) == 31


@pytest.mark.parametrize("result", [{"0": {"ID": "15"}}, "15", ["not a user"]])
def test_get_user_id_unexpected_result_shape(result):
    from crm.service import get_user_id

    assert get_user_id({"EMAIL": "x"}, client=FakeClient({"user.get": {"result": result}})) is None
