"""Tests for the upload -> generate -> publish workflow."""

import pytest
from sqlalchemy import func, select

from specforge.db.models.generated_client import GeneratedClientRow
from specforge.errors.exceptions import (
    ConfigMissingError,
    ConflictError,
    ParseError,
    PublishExecutionError,
    UpstreamError,
    ValidationError,
)
from specforge.models.enums import BumpPolicy, VersionState
from specforge.repositories.npm_config_repo import NpmConfigRepository
from specforge.repositories.project_repo import ProjectRepository
from specforge.services.prompt_builder import PREVIOUS_CLIENT_HEADING
from specforge.services.publisher import NpmPublishExecutor
from specforge.services.workflow import SpecWorkflow, version_state

from conftest import FakeGenerator, FakePublisher, load_fixture


@pytest.fixture
async def project_id(db_session):
    await ProjectRepository(db_session).create(project_id="proj_wf", name="Workflow", owner_id="user_1")
    await NpmConfigRepository(db_session).upsert(
        "proj_wf", package_name="petstore-client", version="1.0.0", description=None, author="Pets"
    )
    await db_session.commit()
    return "proj_wf"


@pytest.fixture
def workflow(db_session, generator, publisher):
    return SpecWorkflow(db_session, generator, publisher)


async def _client_count(db_session) -> int:
    result = await db_session.execute(select(func.count()).select_from(GeneratedClientRow))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_upload_allocates_sequential_versions(workflow, project_id):
    first = await workflow.upload(project_id, load_fixture("petstore_v1.json"), "petstore.json")
    second = await workflow.upload(project_id, load_fixture("petstore_v2.yaml"), "petstore.yaml")

    assert first.version == "1.0.0"
    assert second.version == "1.0.1"
    assert version_state(second) == VersionState.UPLOADED

    current = await workflow.specs.get_current(project_id)
    assert current.version == "1.0.1"
    assert current.file_content == load_fixture("petstore_v2.yaml")
    assert second.spec_id == first.spec_id


@pytest.mark.asyncio
async def test_upload_respects_bump_policy(db_session, generator, publisher, project_id):
    workflow = SpecWorkflow(db_session, generator, publisher, bump_policy=BumpPolicy.MINOR)
    await workflow.upload(project_id, load_fixture("petstore_v1.json"))
    second = await workflow.upload(project_id, load_fixture("petstore_v1.json"))
    assert second.version == "1.1.0"


@pytest.mark.asyncio
async def test_upload_rejects_unparseable_content(workflow, project_id):
    with pytest.raises(ParseError):
        await workflow.upload(project_id, "not: [valid")
    assert await workflow.versions.list_by_project(project_id) == []


@pytest.mark.asyncio
async def test_concurrent_duplicate_version_is_conflict(workflow, project_id, monkeypatch):
    await workflow.upload(project_id, load_fixture("petstore_v1.json"))

    async def stale_history(project_id):
        return []

    # a second upload that read the history before the first one committed
    monkeypatch.setattr(workflow.versions, "list_by_project", stale_history)
    with pytest.raises(ConflictError) as exc_info:
        await workflow.upload(project_id, load_fixture("petstore_v1.json"))
    assert exc_info.value.details["version"] == "1.0.0"


@pytest.mark.asyncio
async def test_end_to_end_generate_and_publish(workflow, project_id, generator, publisher):
    v1 = await workflow.upload(project_id, load_fixture("petstore_v1.json"))
    result = await workflow.run(v1)

    assert result.published
    assert result.state == VersionState.PUBLISHED
    assert result.package == {"name": "petstore-client", "version": "1.0.0"}
    assert v1.client_ready is True
    assert v1.published_at is not None
    assert PREVIOUS_CLIENT_HEADING not in generator.prompts[0]
    assert publisher.calls[0]["module_body"].startswith("// version 1.0.0")
    assert publisher.calls[0]["context"] == {"project_id": project_id, "version_id": v1.version_id}

    v2 = await workflow.upload(project_id, load_fixture("petstore_v2.yaml"))
    result = await workflow.run(v2)

    assert v2.version == "1.0.1"
    assert result.published
    assert publisher.calls[1]["manifest"]["version"] == "1.0.1"
    assert PREVIOUS_CLIENT_HEADING in generator.prompts[1]
    assert "listPets(baseUrl)" in generator.prompts[1]


@pytest.mark.asyncio
async def test_generation_failure_leaves_version_uploaded(workflow, project_id, generator, db_session):
    generator.error = UpstreamError("gemini", "Gemini API error: 500")
    version = await workflow.upload(project_id, load_fixture("petstore_v1.json"))

    with pytest.raises(UpstreamError):
        await workflow.run(version)

    assert version.client_ready is False
    assert await _client_count(db_session) == 0


@pytest.mark.asyncio
async def test_publish_failure_is_recorded_and_client_kept(workflow, project_id, publisher, db_session):
    publisher.error = PublishExecutionError("npm ERR! 403")
    version = await workflow.upload(project_id, load_fixture("petstore_v1.json"))

    result = await workflow.run(version)

    assert not result.published
    assert result.publish_error == "npm ERR! 403"
    assert result.state == VersionState.PUBLISH_FAILED
    assert version.client_ready is True
    assert version.is_published is False
    assert version.publish_error == "npm ERR! 403"
    assert await _client_count(db_session) == 1

    # a manual retry publishes the existing client
    publisher.error = None
    await workflow.publish(version)
    assert version_state(version) == VersionState.PUBLISHED
    assert version.publish_error is None


@pytest.mark.asyncio
async def test_executor_os_failure_is_recorded(db_session, generator, project_id, tmp_path):
    executor = NpmPublishExecutor(token="t", work_root=tmp_path / "missing")
    workflow = SpecWorkflow(db_session, generator, executor)
    version = await workflow.upload(project_id, load_fixture("petstore_v1.json"))

    result = await workflow.run(version)

    assert result.state == VersionState.PUBLISH_FAILED
    assert "Cannot create publish directory" in result.publish_error
    assert version.client_ready is True
    assert version.publish_error == result.publish_error


@pytest.mark.asyncio
async def test_unexpected_publisher_error_is_recorded(workflow, project_id, publisher):
    publisher.error = RuntimeError("registry client crashed")
    version = await workflow.upload(project_id, load_fixture("petstore_v1.json"))

    result = await workflow.run(version)

    assert result.publish_error == "registry client crashed"
    assert result.state == VersionState.PUBLISH_FAILED
    assert version.publish_error == "registry client crashed"

    with pytest.raises(PublishExecutionError, match="registry client crashed"):
        await workflow.publish(version)

@pytest.mark.asyncio
async def test_publish_requires_ready_client(workflow, project_id):
    version = await workflow.upload(project_id, load_fixture("petstore_v1.json"))
    with pytest.raises(ValidationError, match="not marked as ready"):
        await workflow.publish(version)


@pytest.mark.asyncio
async def test_publish_requires_npm_config(db_session, generator, publisher):
    await ProjectRepository(db_session).create(project_id="proj_bare", name="Bare", owner_id="user_1")
    await db_session.commit()
    workflow = SpecWorkflow(db_session, generator, publisher)
    version = await workflow.upload("proj_bare", load_fixture("petstore_v1.json"))

    result = await workflow.run(version)

    assert result.client_id is not None
    assert result.state == VersionState.PUBLISH_FAILED
    assert "NPM configuration not found" in result.publish_error
    assert publisher.calls == []


@pytest.mark.asyncio
async def test_publish_twice_is_conflict(workflow, project_id):
    version = await workflow.upload(project_id, load_fixture("petstore_v1.json"))
    await workflow.run(version)
    with pytest.raises(ConflictError):
        await workflow.publish(version)


@pytest.mark.asyncio
async def test_empty_client_code_not_published(db_session, publisher, project_id):
    workflow = SpecWorkflow(db_session, FakeGenerator(reply="```js\n```"), publisher)
    version = await workflow.upload(project_id, load_fixture("petstore_v1.json"))
    result = await workflow.run(version)
    assert result.publish_error == "Client code is empty"
    assert publisher.calls == []


@pytest.mark.asyncio
async def test_preview_stores_nothing(workflow, db_session):
    code = await workflow.preview(load_fixture("petstore_v1.json"), "2.0.0")
    assert "listPets" in code
    assert await _client_count(db_session) == 0


@pytest.mark.asyncio
async def test_missing_publisher_credential_reported(db_session, generator, project_id):
    publisher = FakePublisher()
    publisher.error = ConfigMissingError("NPM publish token is not configured in the server environment")
    workflow = SpecWorkflow(db_session, generator, publisher)
    version = await workflow.upload(project_id, load_fixture("petstore_v1.json"))

    result = await workflow.run(version)
    assert result.client_id is not None
    assert "token is not configured" in result.publish_error
