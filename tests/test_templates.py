"""Assessment template endpoints."""

import copy


async def create_template(client, headers, payload) -> dict:
    response = await client.post("/api/templates", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def test_create_template(client, provider, provider_headers, template_payload):
    template = await create_template(client, provider_headers, template_payload)

    assert template["version"] == 1
    assert template["is_active"] is True
    assert template["question_count"] == 9
    assert template["created_by"] == str(provider.id)
    smoker = template["sections"][0]["questions"][1]
    assert [o["value"] for o in smoker["options"]] == ["true", "false"]


async def test_missing_ids_are_generated(client, provider_headers):
    payload = {
        "name": "Quick check",
        "sections": [{"title": "Intro", "questions": [{"text": "Anything to report?"}]}],
    }

    template = await create_template(client, provider_headers, payload)

    section = template["sections"][0]
    assert section["id"]
    assert section["questions"][0]["id"]
    assert section["questions"][0]["type"] == "text"


async def test_forward_dependency_is_rejected(client, provider_headers, template_payload):
    payload = copy.deepcopy(template_payload)
    payload["sections"][0]["questions"][0]["conditional_logic"] = {
        "depends_on": "smoker",
        "show_when": {"value": True},
    }

    response = await client.post("/api/templates", headers=provider_headers, json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid template"
    assert "not an earlier question" in body["details"][0]


async def test_duplicate_option_values_are_rejected(client, provider_headers):
    payload = {
        "name": "Broken",
        "sections": [{
            "id": "s1",
            "title": "Section",
            "questions": [{
                "id": "q1",
                "text": "Pick one",
                "type": "multipleChoice",
                "options": [{"value": "a", "label": "A"}, {"value": "a", "label": "Also A"}],
            }],
        }],
    }

    response = await client.post("/api/templates", headers=provider_headers, json=payload)

    assert response.status_code == 400
    assert response.json()["details"] == ['Question "Pick one" has duplicate option values']


async def test_staff_cannot_create(client, staff_headers, template_payload):
    response = await client.post("/api/templates", headers=staff_headers, json=template_payload)
    assert response.status_code == 403


async def test_list_filters(client, provider_headers, staff_headers, template_payload):
    await create_template(client, provider_headers, template_payload)
    await create_template(client, provider_headers, {"name": "Fall Risk", "is_active": False})

    response = await client.get("/api/templates", headers=staff_headers, params={"active": True})
    assert [t["name"] for t in response.json()["templates"]] == ["Annual Wellness Visit"]

    response = await client.get("/api/templates", headers=staff_headers, params={"name": "fall"})
    data = response.json()
    assert data["total"] == 1
    assert data["templates"][0]["is_active"] is False


async def test_update_bumps_version(client, provider_headers, template_payload):
    template = await create_template(client, provider_headers, template_payload)

    response = await client.put(
        f"/api/templates/{template['id']}",
        headers=provider_headers,
        json={"name": "AWV 2025", "description": None},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["version"] == 2
    assert data["name"] == "AWV 2025"
    assert data["description"] is None
    assert data["question_count"] == 9


async def test_duplicate_is_inactive_copy(client, provider_headers, template_payload):
    template = await create_template(client, provider_headers, template_payload)
    await client.put(f"/api/templates/{template['id']}", headers=provider_headers, json={"is_active": True})

    response = await client.post(f"/api/templates/{template['id']}/duplicate", headers=provider_headers)

    assert response.status_code == 201
    copy_ = response.json()
    assert copy_["id"] != template["id"]
    assert copy_["name"] == "Annual Wellness Visit (Copy)"
    assert copy_["is_active"] is False
    assert copy_["version"] == 1
    assert copy_["sections"] == template["sections"]


async def test_delete_blocked_by_open_visit(
    client, admin_headers, provider_headers, staff_headers, template_payload, patient_payload
):
    template = await create_template(client, provider_headers, template_payload)
    patient = (await client.post("/api/patients", headers=staff_headers, json=patient_payload)).json()
    visit = (await client.post(
        "/api/visits",
        headers=provider_headers,
        json={"patient_id": patient["id"], "template_id": template["id"], "scheduled_date": "2030-05-01T10:00:00"},
    )).json()

    response = await client.delete(f"/api/templates/{template['id']}", headers=admin_headers)
    assert response.status_code == 409
    assert "1 scheduled or in-progress visit(s)" in response.json()["error"]

    await client.post(f"/api/visits/{visit['id']}/cancel", headers=provider_headers, json={})

    response = await client.delete(f"/api/templates/{template['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Template deleted successfully"

    response = await client.get(f"/api/templates/{template['id']}", headers=admin_headers)
    assert response.status_code == 404


async def test_only_admin_deletes(client, provider_headers, template_payload):
    template = await create_template(client, provider_headers, template_payload)

    response = await client.delete(f"/api/templates/{template['id']}", headers=provider_headers)

    assert response.status_code == 403
