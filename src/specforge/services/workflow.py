"""Upload → generate → publish orchestration for spec versions.

Every entry point (project routes, database webhook functions, the multipart
publish endpoint) goes through ``SpecWorkflow`` so that parsing, version
allocation, prompt construction and manifest building live in one place.

Lifecycle of a spec version::

    UPLOADED -> CLIENT_GENERATED -> PUBLISH_TRIGGERED -> PUBLISHED
                                                      \\-> PUBLISH_FAILED

Each step commits on its own. A failed publish never rolls back the
generated client, and nothing is retried automatically.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from specforge.db.base import utcnow
from specforge.db.models.generated_client import GeneratedClientRow
from specforge.db.models.spec_version import SpecVersionRow
from specforge.errors.exceptions import (
    ConfigMissingError,
    ConflictError,
    NotFoundError,
    PublishExecutionError,
    SpecForgeError,
    ValidationError,
    error_message,
)
from specforge.integrations.base import PackagePublisher, PublishResult, TextGenerator
from specforge.models.enums import BumpPolicy, DiffView, SpecFormat, VersionState
from specforge.repositories.generated_client_repo import GeneratedClientRepository
from specforge.repositories.npm_config_repo import NpmConfigRepository
from specforge.repositories.spec_version_repo import SpecVersionRepository
from specforge.repositories.specification_repo import SpecificationRepository
from specforge.services.diff_presenter import SpecDiff, present_diff
from specforge.services.id_generator import CLIENT_PREFIX, SPEC_PREFIX, VERSION_PREFIX, generate_id
from specforge.services.manifest import manifest_for
from specforge.services.prompt_builder import build_generation_prompt, extract_code
from specforge.services.spec_parser import parse_spec
from specforge.services.versioning import next_version

logger = logging.getLogger(__name__)


def version_state(row: SpecVersionRow) -> VersionState:
    """Derive the lifecycle state stored implicitly in a version row."""
    if row.is_published:
        return VersionState.PUBLISHED
    if row.publish_error:
        return VersionState.PUBLISH_FAILED
    if row.client_ready:
        return VersionState.CLIENT_GENERATED
    return VersionState.UPLOADED


@dataclass
class WorkflowResult:
    """Outcome of one generate (+ publish) run."""

    project_id: str
    version_id: str
    version: str
    state: str
    client_id: str | None = None
    package: dict | None = None
    publish_output: str | None = None
    publish_error: str | None = None

    @property
    def published(self) -> bool:
        return self.state == VersionState.PUBLISHED

    def to_dict(self) -> dict:
        return asdict(self)


class SpecWorkflow:
    """Shared capability object: ``parse``, ``diff``, ``generate``, ``publish``."""

    def __init__(
        self,
        session: AsyncSession,
        generator: TextGenerator,
        publisher: PackagePublisher,
        bump_policy: BumpPolicy = BumpPolicy.PATCH,
    ):
        self.session = session
        self.generator = generator
        self.publisher = publisher
        self.bump_policy = BumpPolicy(bump_policy)
        self.specs = SpecificationRepository(session)
        self.versions = SpecVersionRepository(session)
        self.clients = GeneratedClientRepository(session)
        self.npm_configs = NpmConfigRepository(session)

    # ------------------------------------------------------------------
    # Stateless capabilities
    # ------------------------------------------------------------------

    def parse(self, text: str, filename: str | None = None) -> dict:
        return parse_spec(text, filename)

    def diff(
        self,
        old: str | None,
        new: str | None,
        fmt: SpecFormat | str = SpecFormat.JSON,
        view: DiffView | str = DiffView.SPLIT,
        old_label: str = "old",
        new_label: str = "new",
    ) -> SpecDiff:
        return present_diff(old, new, fmt, view, old_label=old_label, new_label=new_label)

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    async def upload(self, project_id: str, file_content: str, filename: str | None = None) -> SpecVersionRow:
        """Store ``file_content`` as the next version of the project's spec.

        Raises:
            ParseError: If the content is not a JSON/YAML object.
            ConflictError: If a concurrent upload took the same version.
        """
        self.parse(file_content, filename)

        history = [row.version for row in await self.versions.list_by_project(project_id)]
        new_version = next_version(history, self.bump_policy)

        try:
            current = await self.specs.get_current(project_id)
            if current is None:
                current = await self.specs.create(
                    spec_id=generate_id(SPEC_PREFIX),
                    project_id=project_id,
                    file_content=file_content,
                    version=new_version,
                )
            else:
                await self.specs.update(current, file_content=file_content, version=new_version)

            row = await self.versions.create(
                version_id=generate_id(VERSION_PREFIX),
                project_id=project_id,
                spec_id=current.spec_id,
                version=new_version,
                file_content=file_content,
                client_ready=False,
                is_published=False,
            )
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise ConflictError(
                f"Version {new_version} was already created for this project",
                details={"project_id": project_id, "version": new_version},
            ) from exc

        logger.info("Uploaded spec version %s (%s) for project %s", row.version, row.version_id, project_id)
        return row

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def build_prompt(self, version: SpecVersionRow) -> str:
        previous = await self.clients.get_latest_by_project(version.project_id)
        if previous:
            logger.info("Using diff-aware prompt with previous client %s", previous.client_id)
        return build_generation_prompt(
            version.file_content,
            version.version,
            previous.client_code if previous else None,
        )

    async def generate(self, version: SpecVersionRow) -> GeneratedClientRow:
        """Generate and store a client for ``version``.

        Raises:
            UpstreamError: If the generative endpoint fails; no client row is
                written and ``client_ready`` stays false.
        """
        prompt = await self.build_prompt(version)
        generated_text = await self.generator.complete(prompt)
        client_code = extract_code(generated_text)

        client = await self.clients.create(
            client_id=generate_id(CLIENT_PREFIX),
            project_id=version.project_id,
            version_id=version.version_id,
            client_code=client_code,
        )
        await self.versions.update(version, client_ready=True)
        await self.session.commit()

        logger.info(
            "Client %s generated for version %s (%d chars)",
            client.client_id, version.version, len(client_code),
        )
        return client

    async def preview(self, spec_text: str, version: str | None = None) -> str:
        """Generate client code for ``spec_text`` without storing anything."""
        self.parse(spec_text)
        generated_text = await self.generator.complete(build_generation_prompt(spec_text, version))
        return extract_code(generated_text)

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    async def publish(
        self,
        version: SpecVersionRow,
        client: GeneratedClientRow | None = None,
    ) -> PublishResult:
        """Publish the generated client of ``version``.

        Raises:
            ValidationError: If the version has no ready client.
            ConflictError: If the version is already published.
            ConfigMissingError: If the project has no npm settings, or the
                publisher lacks its credential.
            PublishExecutionError / UpstreamError: If the publish itself fails.

        From the npm settings lookup on, failures are recorded in
        ``publish_error`` on the version row before being raised. Errors
        outside the domain hierarchy are re-raised as ``PublishExecutionError``.
        """
        if version.is_published:
            raise ConflictError(f"Version {version.version} is already published")
        if not version.client_ready:
            raise ValidationError("Client is not marked as ready for publishing")

        if client is None:
            client = await self.clients.get_latest_by_version(version.version_id)
        if client is None:
            raise NotFoundError("GeneratedClient", version.version_id)
        if not client.client_code:
            raise ValidationError("Client code is empty")

        try:
            config = await self.npm_configs.get_by_project(version.project_id)
            if config is None:
                raise ConfigMissingError(f"NPM configuration not found for project {version.project_id}")

            manifest = manifest_for(config, version.version)
            logger.info(
                "Publish triggered for %s@%s via %s",
                manifest["name"], manifest["version"], self.publisher.publisher_type,
            )
            result = await self.publisher.publish(
                manifest,
                client.client_code,
                context={"project_id": version.project_id, "version_id": version.version_id},
            )
        except SpecForgeError as exc:
            await self.versions.update(version, publish_error=exc.message)
            await self.session.commit()
            logger.warning("Publish failed for version %s: %s", version.version_id, exc.message)
            raise
        except Exception as exc:
            message = error_message(exc)
            await self.versions.update(version, publish_error=message)
            await self.session.commit()
            logger.exception("Publish failed unexpectedly for version %s", version.version_id)
            raise PublishExecutionError(message) from exc

        await self.versions.update(
            version,
            is_published=True,
            published_at=utcnow(),
            publish_error=None,
        )
        await self.session.commit()
        logger.info("Published %s@%s", result.package_name, result.version)
        return result

    # ------------------------------------------------------------------
    # Full run
    # ------------------------------------------------------------------

    async def run(self, version: SpecVersionRow, publish: bool = True) -> WorkflowResult:
        """Generate a client for ``version`` and, optionally, publish it.

        Generation errors propagate. Publish errors are caught here and
        reported on the result; the generated client stays usable.
        """
        client = await self.generate(version)
        result = WorkflowResult(
            project_id=version.project_id,
            version_id=version.version_id,
            version=version.version,
            state=version_state(version),
            client_id=client.client_id,
        )
        if not publish:
            return result

        try:
            published = await self.publish(version, client)
        except SpecForgeError as exc:
            result.publish_error = error_message(exc)
        else:
            result.package = {"name": published.package_name, "version": published.version}
            result.publish_output = published.output

        result.state = version_state(version)
        return result
