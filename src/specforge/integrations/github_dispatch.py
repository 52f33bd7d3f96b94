"""GitHub repository_dispatch publisher: hands publishing to a workflow run."""

from __future__ import annotations

import json
import logging

import httpx

from specforge.errors.exceptions import ConfigMissingError, UpstreamError
from specforge.integrations.base import PackagePublisher, PublishResult

logger = logging.getLogger(__name__)

DISPATCH_EVENT_TYPE = "publish-npm"


class GitHubDispatchPublisher(PackagePublisher):
    """Triggers the ``publish-npm`` workflow of a publisher repository.

    The receiving workflow runs ``npm publish`` itself, so a successful
    dispatch only means the request was accepted (GitHub answers 204).
    """

    publisher_type: str = "github_dispatch"

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        api_url: str = "https://api.github.com",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token
        self.owner = owner
        self.repo = repo
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def publish(
        self,
        manifest: dict,
        module_body: str,
        context: dict | None = None,
    ) -> PublishResult:
        if not self.token or not self.owner:
            raise ConfigMissingError("GitHub dispatch credentials are not configured")

        context = context or {}
        url = f"{self.api_url}/repos/{self.owner}/{self.repo}/dispatches"
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        payload = {
            "event_type": DISPATCH_EVENT_TYPE,
            "client_payload": {
                "packageJson": json.dumps(manifest),
                "clientCode": module_body,
                "specId": context.get("version_id"),
                "projectId": context.get("project_id"),
            },
        }

        logger.info("Triggering GitHub workflow on %s/%s", self.owner, self.repo)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("GitHub dispatch failed for %s/%s: %s", self.owner, self.repo, exc)
            raise UpstreamError("github", f"Failed to trigger GitHub workflow: {exc}") from exc

        if not response.is_success:
            logger.error("Error triggering GitHub workflow: %s %s", response.status_code, response.text[:500])
            raise UpstreamError(
                "github",
                f"Failed to trigger GitHub workflow: {response.status_code} {response.text[:500]}",
                details={"status_code": response.status_code},
            )

        return PublishResult(
            publisher=self.publisher_type,
            package_name=str(manifest.get("name", "")),
            version=str(manifest.get("version", "")),
            output=f"repository_dispatch '{DISPATCH_EVENT_TYPE}' accepted by {self.owner}/{self.repo}",
        )
