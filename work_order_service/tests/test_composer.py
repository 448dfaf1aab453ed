import asyncio

import pytest

from work_order_service.app.schemas.create import CreateWorkOrderBody, CreateWorkOrderRow
from work_order_service.app.services import composer
from work_order_service.app.services.odoo_client import OdooError
from work_order_service.app.services.result import AdapterError
from work_order_service.tests import factories
from work_order_service.tests.factories import FakeOdooClient

TEAM = "Vitvarureperatör Mimer"


def _body(**kwargs) -> CreateWorkOrderBody:
    return CreateWorkOrderBody.model_validate(factories.create_work_order_body(**kwargs))


def _create(client, body):
    return asyncio.run(composer.create_work_order(client, body, TEAM))


def test_summarize_several_appliances_in_laundry_room():
    rows = [
        CreateWorkOrderRow(LocationCode="TV", PartOfBuildingCode="TM", Description="Startar inte"),
        CreateWorkOrderRow(LocationCode="TV", PartOfBuildingCode="TT", Description="Blir inte varm"),
    ]

    summary = composer.summarize_rows(rows)

    assert summary.title == "Felanmälda vitvaror - Tvättmaskin, Torktumlare"
    assert summary.space_codes == ["TV"]
    assert summary.equipment_codes == ["TM", "TT"]
    assert summary.description == "Tvättmaskin: Startar inte\nTorktumlare: Blir inte varm"
    assert summary.category_name == "Tvättstuga"


def test_summarize_single_kitchen_appliance():
    rows = [CreateWorkOrderRow(LocationCode="KÖ", PartOfBuildingCode="DM", Description="Läcker")]

    summary = composer.summarize_rows(rows)

    assert summary.title == "Felanmäld kök - Diskmaskin"
    assert summary.description == "Läcker"
    assert summary.category_name == "Vitvaror"


def test_create_work_order_creates_records_in_order():
    client = FakeOdooClient()
    body = _body(
        rows=[
            factories.create_work_order_row(PartOfBuildingCode="TM"),
            factories.create_work_order_row(PartOfBuildingCode="TT"),
        ]
    )

    result = _create(client, body)

    assert result.ok
    created_models = [call[1] for call in client.calls if call[0] == "create"]
    assert created_models == [
        "maintenance.rental.property",
        "maintenance.lease",
        "maintenance.tenant",
        "maintenance.maintenance.unit",
        "maintenance.request",
    ]
    assert result.data == client._next_id

    (request_values,) = client.created("maintenance.request")
    assert request_values["name"] == "Felanmälda vitvaror - Tvättmaskin, Torktumlare"
    assert request_values["space_code"] == "TV"
    assert request_values["equipment_code"] == "TM, TT"
    assert request_values["master_key"] is True
    assert request_values["creation_origin"] == "mimer-nu"
    assert request_values["maintenance_unit_id"] == 104

    searches = [call for call in client.calls if call[0] == "search"]
    assert searches[0][1:] == ("maintenance.team", [["name", "=", TEAM]])
    assert searches[1][1:] == ("maintenance.request.category", [["name", "=", "Tvättstuga"]])


def test_laundry_room_address_comes_from_maintenance_unit():
    client = FakeOdooClient()

    _create(client, _body())

    (rental_property,) = client.created("maintenance.rental.property")
    assert rental_property["address"] == "Stentorpsgatan 7 C"
    assert rental_property["name"] == "705-022-04-0201"
    (lease,) = client.created("maintenance.lease")
    assert lease["lease_start_date"] == "2024-01-01"
    assert lease["lease_end_date"] is False


def test_address_comes_from_any_maintenance_unit():
    client = FakeOdooClient()
    payload = factories.create_work_order_body()
    payload["rentalProperty"]["maintenanceUnits"][0]["caption"] = "Stentorpsgatan 9 A förråd"

    _create(client, CreateWorkOrderBody.model_validate(payload))

    (rental_property,) = client.created("maintenance.rental.property")
    assert rental_property["address"] == "Stentorpsgatan 9 A förråd"


def test_address_without_maintenance_unit_is_property_address():
    client = FakeOdooClient()

    _create(client, _body(maintenance_units=False))

    (rental_property,) = client.created("maintenance.rental.property")
    assert rental_property["address"] == "STENTORPSGATAN 9 A"


def test_unsupported_location_code_creates_nothing():
    client = FakeOdooClient()
    body = _body(rows=[factories.create_work_order_row(LocationCode="XX")])

    result = _create(client, body)

    assert not result.ok
    assert result.err == AdapterError.validation_error
    assert "XX" in result.message
    assert client.calls == []


def test_protected_identity_gets_placeholder_name():
    client = FakeOdooClient()

    _create(client, _body(firstName=None, lastName=None))

    (tenant,) = client.created("maintenance.tenant")
    assert tenant["name"] == "Skyddad identitet"
    assert tenant["contact_code"] == "P158769"


def test_no_maintenance_unit_skips_unit_record():
    client = FakeOdooClient()
    body = _body(
        maintenance_units=False,
        rows=[factories.create_work_order_row(LocationCode="KÖ", PartOfBuildingCode="DM")],
    )

    result = _create(client, body)

    assert result.ok
    assert client.created("maintenance.maintenance.unit") == []
    (request_values,) = client.created("maintenance.request")
    assert request_values["maintenance_unit_id"] is False
    category_search = [c for c in client.calls if c[0] == "search"][-1]
    assert category_search[2] == [["name", "=", "Vitvaror"]]


def test_missing_maintenance_team_raises():
    client = FakeOdooClient(search_results={"maintenance.team": []})

    with pytest.raises(OdooError):
        _create(client, _body())

    assert client.created("maintenance.rental.property") == []


def test_create_body_requires_at_least_one_row():
    with pytest.raises(ValueError):
        _body(rows=[])
