"""API tests for the webhook-driven function endpoints."""

import pytest

from specforge.errors.exceptions import PublishExecutionError, UpstreamError

from conftest import load_fixture


async def _upload(client, headers, project_id):
    response = await client.post(
        f"/api/v1/projects/{project_id}/specs",
        json={"file_content": load_fixture("petstore_v1.json")},
        headers=headers,
    )
    return response.json()["version"]


def _webhook_body(version, project_id):
    return {
        "type": "INSERT",
        "table": "spec_versions",
        "record": {
            "id": version["version_id"],
            "project_id": project_id,
            "version": version["version"],
            "file_content": load_fixture("petstore_v1.json"),
        },
    }


@pytest.mark.asyncio
async def test_generate_client_from_webhook(client, auth_headers, project, publisher):
    project_id = project["project_id"]
    version = await _upload(client, auth_headers, project_id)

    response = await client.post("/api/v1/functions/generate-client", json=_webhook_body(version, project_id))

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["published"] is True
    assert body["version"] == "1.0.0"
    assert publisher.calls[0]["manifest"]["name"] == "petstore-client"


@pytest.mark.asyncio
async def test_generate_client_raw_payload_with_publish_failure(client, auth_headers, project, publisher):
    project_id = project["project_id"]
    version = await _upload(client, auth_headers, project_id)
    publisher.error = PublishExecutionError("npm ERR! code E403")

    response = await client.post(
        "/api/v1/functions/generate-client",
        json={"spec_id": version["version_id"], "project_id": project_id, "version": "1.0.0"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["published"] is False
    assert body["publish_error"] == "npm ERR! code E403"
    assert body["client_id"].startswith("cli_")


@pytest.mark.asyncio
async def test_generate_client_missing_fields(client):
    response = await client.post("/api/v1/functions/generate-client", json={"project_id": "proj_x"})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields", "missing": ["spec_id"]}


@pytest.mark.asyncio
async def test_generate_client_upstream_failure(client, auth_headers, project, generator):
    project_id = project["project_id"]
    version = await _upload(client, auth_headers, project_id)
    generator.error = UpstreamError("gemini", "Gemini API error: 500")

    response = await client.post(
        "/api/v1/functions/generate-client",
        json={"spec_id": version["version_id"], "project_id": project_id},
    )
    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Client generation failed"
    assert body["details"] == "Gemini API error: 500"
    assert body["code"] == "UPSTREAM_ERROR"


@pytest.mark.asyncio
async def test_generate_client_unknown_version(client, project):
    response = await client.post(
        "/api/v1/functions/generate-client",
        json={"spec_id": "ver_missing", "project_id": project["project_id"]},
    )
    assert response.status_code == 500
    assert response.json()["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_non_json_body(client):
    response = await client.post(
        "/api/v1/functions/publish-client", content=b"not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_publish_client_after_generation(client, auth_headers, project, publisher):
    project_id = project["project_id"]
    version = await _upload(client, auth_headers, project_id)
    await client.post(
        f"/api/v1/projects/{project_id}/versions/{version['version_id']}/generate",
        params={"publish": "false"},
        headers=auth_headers,
    )

    response = await client.post(
        "/api/v1/functions/publish-client",
        json={"type": "UPDATE", "record": {"id": version["version_id"], "project_id": project_id}},
    )
    assert response.status_code == 200
    assert response.json()["package"] == {"name": "petstore-client", "version": "1.0.0"}
    assert len(publisher.calls) == 1


@pytest.mark.asyncio
async def test_publish_client_not_ready(client, auth_headers, project):
    project_id = project["project_id"]
    version = await _upload(client, auth_headers, project_id)
    response = await client.post(
        "/api/v1/functions/publish-client",
        json={"spec_id": version["version_id"], "project_id": project_id},
    )
    assert response.status_code == 500
    assert response.json()["details"] == "Client is not marked as ready for publishing"


@pytest.mark.asyncio
async def test_publish_npm_specific_client(client, auth_headers, project, publisher):
    project_id = project["project_id"]
    version = await _upload(client, auth_headers, project_id)
    generated = await client.post(
        f"/api/v1/projects/{project_id}/versions/{version['version_id']}/generate",
        params={"publish": "false"},
        headers=auth_headers,
    )
    client_id = generated.json()["client_id"]

    response = await client.post(
        "/api/v1/functions/publish-npm",
        json={"spec_id": version["version_id"], "project_id": project_id, "version": "1.0.0", "client_id": client_id},
    )
    assert response.status_code == 200
    assert response.json()["client_id"] == client_id
    assert publisher.calls[0]["manifest"]["version"] == "1.0.0"


@pytest.mark.asyncio
async def test_publish_npm_requires_all_fields(client):
    response = await client.post("/api/v1/functions/publish-npm", json={"spec_id": "ver_1", "project_id": "proj_1"})
    assert response.status_code == 400
    assert response.json()["missing"] == ["version", "client_id"]


@pytest.mark.asyncio
async def test_webhook_secret_enforced(client, settings, auth_headers, project):
    settings.webhook_secret = "s3cret"
    body = {"spec_id": "ver_1", "project_id": project["project_id"]}

    response = await client.post("/api/v1/functions/generate-client", json=body)
    assert response.status_code == 401

    response = await client.post(
        "/api/v1/functions/generate-client", json=body, headers={"X-Webhook-Secret": "s3cret"}
    )
    assert response.status_code == 500
