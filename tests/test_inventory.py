"""Buildings, floors, rooms, storage and deployment tests."""

import uuid

import pytest

from app.core.errors import BusinessRuleError
from app.models.building import Floor
from app.models.storage import DeploymentRecord, StorageItem
from app.services.storage_service import deploy_item, serial_required
from conftest import auth_headers


@pytest.fixture
def item(db):
    def _make(quantity=5, item_type="COMPUTER_PART", sub_type="MONITOR", serials=None, name="Dell 24in"):
        i = StorageItem(
            id=str(uuid.uuid4()), name=name, item_type=item_type, sub_type=sub_type,
            quantity=quantity, serial_numbers=list(serials or []),
        )
        db.add(i)
        db.commit()
        return i
    return _make


class TestBuildings:
    def test_name_required(self, client) -> None:
        r = client.post("/api/buildings", json={"code": "X"})
        assert r.status_code == 400
        assert r.json() == {"error": "Building name is required"}

    def test_nested_tree(self, client) -> None:
        b = client.post("/api/buildings", json={"name": "Science", "code": "SCI"}).json()
        f = client.post("/api/floors", json={"buildingId": b["id"], "number": 2}).json()
        client.post("/api/rooms", json={"floorId": f["id"], "number": "204"})
        client.post("/api/rooms", json={"floorId": f["id"], "number": "201"})

        tree = client.get(f"/api/buildings/{b['id']}").json()
        assert tree["name"] == "Science"
        assert [fl["number"] for fl in tree["floors"]] == [2]
        assert [r["number"] for r in tree["floors"][0]["rooms"]] == ["201", "204"]

        listing = client.get("/api/buildings").json()
        assert [x["id"] for x in listing] == [b["id"]]

    def test_update_and_delete(self, client) -> None:
        b = client.post("/api/buildings", json={"name": "Old"}).json()
        r = client.patch(f"/api/buildings/{b['id']}", json={"name": "New", "address": "Main St"})
        assert r.json()["name"] == "New"
        assert r.json()["address"] == "Main St"
        assert client.patch(f"/api/buildings/{b['id']}", json={"name": ""}).status_code == 400
        assert client.delete(f"/api/buildings/{b['id']}").json() == {"success": True}
        assert client.get(f"/api/buildings/{b['id']}").status_code == 404

    def test_delete_reaching_deployments_is_409_json(self, foreign_keys, client, db, item, room) -> None:
        i = item(quantity=2, item_type="CABLE", sub_type=None)
        deploy_item(db, storage_item_id=i.id, quantity=1, room_id=room.id)
        building_id = db.get(Floor, room.floor_id).building_id

        r = client.delete(f"/api/buildings/{building_id}")
        assert r.status_code == 409
        assert r.headers["content-type"].startswith("application/json")
        assert r.json()["error"] == "Operation conflicts with related records"
        assert client.get(f"/api/rooms/{room.id}").status_code == 200


class TestFloors:
    def test_unknown_building(self, client) -> None:
        r = client.post("/api/floors", json={"buildingId": "nope", "number": 1})
        assert r.status_code == 404
        assert r.json() == {"error": "Building not found"}

    def test_required_fields(self, client) -> None:
        r = client.post("/api/floors", json={"number": 1})
        assert r.status_code == 400

    def test_filter_by_building(self, client, room) -> None:
        other = client.post("/api/buildings", json={"name": "Annex"}).json()
        client.post("/api/floors", json={"buildingId": other["id"], "number": 1})
        floors = client.get("/api/floors", params={"buildingId": other["id"]}).json()
        assert len(floors) == 1
        assert floors[0]["building"]["name"] == "Annex"
        assert len(client.get("/api/floors").json()) == 2


class TestRooms:
    def test_type_defaults_to_classroom(self, client, room) -> None:
        r = client.post("/api/rooms", json={"floorId": room.floor_id, "number": "303"})
        assert r.status_code == 201
        assert r.json()["type"] == "CLASSROOM"

    def test_unknown_floor(self, client) -> None:
        r = client.post("/api/rooms", json={"floorId": "nope", "number": "1"})
        assert r.status_code == 404
        assert r.json() == {"error": "Floor not found"}

    def test_list_includes_location(self, client, room) -> None:
        rooms = client.get("/api/rooms", params={"type": "LAB"}).json()
        assert rooms[0]["floor"]["building"]["name"] == "Main Building"
        assert client.get("/api/rooms", params={"type": "OFFICE"}).json() == []

    def test_delete_with_deployed_items_refused(self, foreign_keys, client, db, item, room) -> None:
        i = item(quantity=2, item_type="CABLE", sub_type=None)
        deploy_item(db, storage_item_id=i.id, quantity=1, room_id=room.id)
        r = client.delete(f"/api/rooms/{room.id}")
        assert r.status_code == 400
        assert r.json() == {"error": "Cannot delete room with deployed items. Please relocate all items first."}
        assert client.get(f"/api/rooms/{room.id}").status_code == 200

    def test_delete_empty_room(self, foreign_keys, client, room) -> None:
        assert client.delete(f"/api/rooms/{room.id}").json() == {"success": True}
        assert client.get(f"/api/rooms/{room.id}").status_code == 404

    def test_room_schedules(self, client, schedule) -> None:
        data = client.get(f"/api/rooms/{schedule.room_id}/schedules").json()
        assert [s["title"] for s in data] == ["Math 101"]
        assert data[0]["user"]["firstName"] == "Ada"


class TestStorage:
    def test_required_fields(self, client) -> None:
        r = client.post("/api/storage", json={"name": "Cable"})
        assert r.status_code == 400
        assert r.json() == {"error": "Name and item type are required"}

    def test_create_and_filter(self, client) -> None:
        client.post("/api/storage", json={"name": "HDMI", "itemType": "CABLE", "quantity": 10, "unit": "pcs"})
        client.post("/api/storage", json={"name": "Mouse", "itemType": "PERIPHERAL", "quantity": 4})
        cables = client.get("/api/storage", params={"itemType": "CABLE"}).json()
        assert [c["name"] for c in cables] == ["HDMI"]
        assert cables[0]["quantity"] == 10

    def test_negative_quantity_on_create(self, client) -> None:
        r = client.post("/api/storage", json={"name": "HDMI", "itemType": "CABLE", "quantity": -3})
        assert r.status_code == 400
        assert "quantity" in r.json()["details"]
        assert client.get("/api/storage").json() == []

    def test_negative_quantity_rejected(self, client, item) -> None:
        i = item()
        r = client.patch(f"/api/storage/{i.id}", json={"quantity": -1})
        assert r.status_code == 400

    def test_delete_with_history_refused(self, client, db, item, room) -> None:
        i = item(quantity=3, item_type="CABLE", sub_type=None)
        deploy_item(db, storage_item_id=i.id, quantity=1, room_id=room.id)
        r = client.delete(f"/api/storage/{i.id}")
        assert r.status_code == 400
        assert "deployment history" in r.json()["error"]

    def test_delete_without_history(self, client, item) -> None:
        i = item()
        assert client.delete(f"/api/storage/{i.id}").json() == {"success": True}
        assert client.get(f"/api/storage/{i.id}").status_code == 404
        assert client.delete(f"/api/storage/{i.id}").status_code == 404


class TestDeploy:
    def test_serial_required_flags(self, item) -> None:
        assert serial_required(item(sub_type="SYSTEM_UNIT"))
        assert not serial_required(item(sub_type="KEYBOARD"))
        assert not serial_required(item(item_type="PERIPHERAL", sub_type="MONITOR"))

    def test_serialized_deploy(self, client, db, item, room) -> None:
        i = item(quantity=3, sub_type="MONITOR", serials=["SN1", "SN2", "SN3"])
        r = client.post("/api/deployments", json={
            "storageItemId": i.id, "quantity": 1, "roomId": room.id, "serialNumber": "SN2",
        })
        assert r.status_code == 200
        record = r.json()["deploymentRecord"]
        assert record["serialNumber"] == "SN2"
        assert record["deployedBy"] == "System User"

        db.expire_all()
        stored = db.get(StorageItem, i.id)
        assert stored.quantity == 2
        assert stored.serial_numbers == ["SN1", "SN3"]

    def test_deployer_name_from_caller(self, client, item, room, make_user) -> None:
        make_user("idp_tech", role="technician", first_name="Lee", last_name="Tan")
        i = item(item_type="CABLE", sub_type=None)
        r = client.post("/api/deployments", json={"storageItemId": i.id, "quantity": 2, "roomId": room.id},
                        headers=auth_headers("idp_tech"))
        assert r.json()["deploymentRecord"]["deployedBy"] == "Lee Tan"

    @pytest.mark.parametrize("kwargs,message", [
        ({"quantity": 9}, "Not enough quantity available"),
        ({"serial_number": None}, "Serial number is required for MONITOR"),
        ({"serial_number": "SN9"}, "Invalid serial number"),
        ({"quantity": 2}, "Can only deploy one item when specifying a serial number"),
        ({"room_id": "nowhere"}, "Room not found"),
        ({"storage_item_id": "missing"}, "Storage item not found"),
    ])
    def test_rules_leave_stock_untouched(self, db, item, room, kwargs, message) -> None:
        i = item(quantity=3, serials=["SN1", "SN2", "SN3"])
        args = {"storage_item_id": i.id, "quantity": 1, "room_id": room.id, "serial_number": "SN1"}
        args.update(kwargs)
        with pytest.raises(BusinessRuleError, match=message):
            deploy_item(db, **args)

        db.expire_all()
        stored = db.get(StorageItem, i.id)
        assert stored.quantity == 3
        assert stored.serial_numbers == ["SN1", "SN2", "SN3"]
        assert db.query(DeploymentRecord).count() == 0

    def test_rule_failure_is_400(self, client, item, room) -> None:
        i = item(quantity=1, item_type="CABLE", sub_type=None)
        r = client.post("/api/deployments", json={"storageItemId": i.id, "quantity": 5, "roomId": room.id})
        assert r.status_code == 400
        assert r.json() == {"error": "Not enough quantity available"}

    def test_listing_and_room_view(self, client, db, item, room) -> None:
        i = item(quantity=4, item_type="CABLE", sub_type=None, name="LAN cable")
        deploy_item(db, storage_item_id=i.id, quantity=1, room_id=room.id, deployed_by="Ops")
        deploy_item(db, storage_item_id=i.id, quantity=2, room_id=room.id)

        listed = client.get("/api/deployments", params={"storageItemId": i.id}).json()
        assert sorted(d["quantity"] for d in listed) == [1, 2]

        in_room = client.get(f"/api/rooms/{room.id}/deployments").json()
        assert {d["storageItemName"] for d in in_room} == {"LAN cable"}
        assert {d["deployedBy"] for d in in_room} == {"Ops", "System User"}


class TestComputerParts:
    def test_create(self, client) -> None:
        r = client.post("/api/storage/computer-part", json={
            "name": "Dell 24in", "subType": "MONITOR", "quantity": 2, "serialNumbers": ["SN1", "SN2"],
        })
        assert r.status_code == 201
        assert r.json()["itemType"] == "COMPUTER_PART"
        assert r.json()["serialNumbers"] == ["SN1", "SN2"]

    def test_serials_must_cover_quantity(self, client) -> None:
        r = client.post("/api/storage/computer-part", json={
            "name": "Dell 24in", "subType": "MONITOR", "quantity": 3, "serialNumbers": ["SN1"],
        })
        assert r.status_code == 400
        assert r.json() == {"error": "MONITOR requires a serial number for each unit (1/3)"}
        assert client.get("/api/storage").json() == []

    def test_unserialized_sub_type(self, client) -> None:
        r = client.post("/api/storage/computer-part", json={"name": "Logitech K120", "subType": "KEYBOARD", "quantity": 5})
        assert r.status_code == 201

    def test_required_fields(self, client) -> None:
        r = client.post("/api/storage/computer-part", json={"name": "Part"})
        assert r.status_code == 400
        assert r.json() == {"error": "Name and subType are required"}

    def test_update_overwrites(self, client) -> None:
        created = client.post("/api/storage/computer-part", json={
            "name": "APC 650", "subType": "UPS", "quantity": 1, "unit": "pcs", "serialNumbers": ["U1"],
        }).json()
        r = client.patch(f"/api/storage/computer-part/{created['id']}", json={
            "name": "APC 650VA", "subType": "UPS", "quantity": 2, "serialNumbers": ["U1", "U2"],
        })
        assert r.status_code == 200
        assert (r.json()["name"], r.json()["quantity"], r.json()["unit"]) == ("APC 650VA", 2, None)

        r = client.patch(f"/api/storage/computer-part/{created['id']}", json={
            "name": "APC 650VA", "subType": "UPS", "quantity": 4, "serialNumbers": ["U1"],
        })
        assert r.json() == {"error": "UPS requires a serial number for each unit (1/4)"}
        assert client.get(f"/api/storage/{created['id']}").json()["quantity"] == 2

        r = client.patch("/api/storage/computer-part/missing", json={"name": "x", "subType": "UPS"})
        assert r.status_code == 404


class TestCsv:
    def test_template(self, client) -> None:
        r = client.get("/api/download-csv", params={"filename": "storage-template.csv"})
        assert r.status_code == 200
        assert r.headers["content-type"] == "text/csv; charset=utf-8"
        assert r.headers["content-disposition"] == 'attachment; filename="storage-template.csv"'
        assert r.headers["cache-control"] == "no-store"
        assert r.text.splitlines() == [
            "Name,ItemType,Quantity,Unit,Remarks",
            "Example Item,Equipment,10,pcs,New items",
            "Medical Supply,Consumable,50,boxes,For emergency use",
            "Office Supply,Stationery,100,pcs,General use",
        ]

    def test_unknown_template(self, client) -> None:
        r = client.get("/api/download-csv", params={"template": "assets"})
        assert r.text == "No template available for this type"
        assert r.headers["content-disposition"] == 'attachment; filename="download.csv"'

    def test_import(self, client, make_user) -> None:
        make_user("idp_tech", role="technician")
        content = (
            "Name,ItemType,Quantity,Unit,Remarks\n"
            "HDMI cable,CABLE,10,pcs,Spare\n"
            ",CABLE,3,pcs,\n"
            "Mouse,PERIPHERAL,lots,,\n"
            "Keyboard,PERIPHERAL,,,\n"
        )
        r = client.post("/api/import-csv", params={"type": "storage"}, content=content,
                        headers={**auth_headers("idp_tech"), "content-type": "text/csv"})
        assert r.status_code == 200
        assert r.json() == {"message": "Import successful", "imported": 2, "total": 4}

        items = {i["name"]: i for i in client.get("/api/storage").json()}
        assert set(items) == {"HDMI cable", "Mouse"}
        assert (items["HDMI cable"]["quantity"], items["HDMI cable"]["unit"]) == (10, "pcs")
        assert items["Mouse"]["quantity"] == 0

    @pytest.mark.parametrize("params,content,message", [
        ({"type": "users"}, "Name\nx\n", "Import type 'users' not supported"),
        ({}, "", "No file provided"),
        ({}, "Name,ItemType,Quantity\n", "Invalid CSV format"),
        ({}, "Name,ItemType,Quantity\n,CABLE,1\n", "No valid items found in CSV"),
    ])
    def test_import_rejections(self, client, make_user, params, content, message) -> None:
        make_user("idp_tech", role="technician")
        r = client.post("/api/import-csv", params=params, content=content,
                        headers={**auth_headers("idp_tech"), "content-type": "text/csv"})
        assert r.status_code == 400
        assert r.json() == {"error": message}

    def test_import_needs_storage_rights(self, client, make_user) -> None:
        make_user("idp_member")
        body = "Name,ItemType,Quantity\nHDMI,CABLE,1\n"
        r = client.post("/api/import-csv", content=body,
                        headers={**auth_headers("idp_member"), "content-type": "text/csv"})
        assert r.status_code == 403
        r = client.post("/api/import-csv", content=body, headers={"content-type": "text/csv"})
        assert r.status_code == 401

    def test_export(self, client, item) -> None:
        item(quantity=7, item_type="CABLE", sub_type=None, name="LAN cable")
        item(quantity=2, name="Dell 24in")
        r = client.get("/api/storage/export-csv", params={"itemType": "CABLE"})
        assert r.headers["content-disposition"] == 'attachment; filename="storage.csv"'
        assert r.text.splitlines() == ["Name,ItemType,Quantity,Unit,Remarks", "LAN cable,CABLE,7,,"]


class TestAssets:
    def test_create_and_filter(self, client, room) -> None:
        r = client.post("/api/assets", json={
            "assetType": "COMPUTER", "roomId": room.id, "assetTag": "PC-01", "systemUnit": "SU1",
        })
        assert r.status_code == 201
        assert r.json()["status"] == "WORKING"
        client.post("/api/assets", json={"assetType": "PROJECTOR", "roomId": room.id, "status": "NEEDS_REPAIR"})

        listing = client.get("/api/assets").json()
        assert {a["assetType"] for a in listing} == {"COMPUTER", "PROJECTOR"}
        assert listing[0]["room"]["floor"]["building"]["name"] == "Main Building"

        broken = client.get("/api/assets", params={"status": "NEEDS_REPAIR"}).json()
        assert [a["assetType"] for a in broken] == ["PROJECTOR"]
        computers = client.get("/api/assets", params={"assetType": "COMPUTER"}).json()
        assert [a["assetTag"] for a in computers] == ["PC-01"]
        assert client.get("/api/assets", params={"roomId": "elsewhere"}).json() == []

    def test_required_fields_and_unknown_room(self, client, room) -> None:
        r = client.post("/api/assets", json={"assetType": "COMPUTER"})
        assert r.status_code == 400
        assert r.json() == {"error": "Room ID and asset type are required"}
        r = client.post("/api/assets", json={"assetType": "COMPUTER", "roomId": "nowhere"})
        assert r.status_code == 404
        assert r.json() == {"error": "Room not found"}
        r = client.post("/api/assets", json={"assetType": "TOASTER", "roomId": room.id})
        assert r.status_code == 400
