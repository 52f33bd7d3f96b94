"""npm publish executor.

Each publish gets its own temporary package directory holding the manifest,
the entry module and an ``.npmrc`` with the registry token. The directory is
removed afterwards whatever the outcome.
"""

from __future__ import annotations

import asyncio
import json
import logging
import shutil
import tempfile
from collections.abc import Sequence
from pathlib import Path, PurePosixPath

from specforge.errors.exceptions import ConfigMissingError, PublishExecutionError, ValidationError
from specforge.integrations.base import PackagePublisher, PublishResult
from specforge.services.manifest import entry_file

logger = logging.getLogger(__name__)


class NpmPublishExecutor(PackagePublisher):
    """Runs the package manager's publish command in a scratch directory."""

    publisher_type: str = "npm"

    def __init__(
        self,
        token: str,
        registry_host: str = "registry.npmjs.org",
        command: Sequence[str] = ("npm", "publish", "--access=public"),
        timeout: float = 300.0,
        notice_prefixes: Sequence[str] = ("npm notice",),
        work_root: str | Path | None = None,
    ):
        self.token = token
        self.registry_host = registry_host
        self.command = list(command)
        self.timeout = timeout
        self.notice_prefixes = tuple(notice_prefixes)
        self.work_root = Path(work_root) if work_root else None

    async def publish(
        self,
        manifest: dict,
        module_body: str,
        context: dict | None = None,
    ) -> PublishResult:
        if not self.token:
            raise ConfigMissingError("NPM publish token is not configured in the server environment")

        entry = self._safe_entry(manifest)
        try:
            work_dir = Path(tempfile.mkdtemp(prefix="npm-publish-", dir=self.work_root))
        except OSError as exc:
            logger.error("Cannot create publish directory under %s: %s", self.work_root, exc)
            raise PublishExecutionError(f"Cannot create publish directory: {exc}") from exc
        logger.info("Publishing %s@%s from %s", manifest.get("name"), manifest.get("version"), work_dir)

        try:
            self._materialize(work_dir, manifest, entry, module_body)
            output = await self._run(work_dir)
        except OSError as exc:
            logger.error("Publish of %s failed: %s", manifest.get("name"), exc)
            raise PublishExecutionError(f"NPM publish error: {exc}") from exc
        finally:
            self._cleanup(work_dir)

        return PublishResult(
            publisher=self.publisher_type,
            package_name=str(manifest.get("name", "")),
            version=str(manifest.get("version", "")),
            output=output,
        )

    @staticmethod
    def _safe_entry(manifest: dict) -> str:
        entry = entry_file(manifest)
        path = PurePosixPath(entry)
        if path.is_absolute() or ".." in path.parts:
            raise ValidationError(f"Invalid entry file '{entry}'")
        return entry

    def _materialize(self, work_dir: Path, manifest: dict, entry: str, module_body: str) -> None:
        (work_dir / "package.json").write_text(json.dumps(manifest, indent=2), encoding="utf-8")

        module_path = work_dir / entry
        module_path.parent.mkdir(parents=True, exist_ok=True)
        module_path.write_text(module_body, encoding="utf-8")

        (work_dir / ".npmrc").write_text(
            f"//{self.registry_host}/:_authToken={self.token}\n", encoding="utf-8"
        )

    async def _run(self, work_dir: Path) -> str:
        """Run the publish command and return its stdout.

        Raises:
            PublishExecutionError: On a non-zero exit, a timeout, a missing
                executable or diagnostic output that is not an npm notice.
        """
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(work_dir),
            )
        except FileNotFoundError as exc:
            logger.error("Command not found: %s", self.command[0])
            raise PublishExecutionError(f"Command not found: {self.command[0]}") from exc
        except OSError as exc:
            logger.error("Cannot start %s: %s", self.command[0], exc)
            raise PublishExecutionError(f"Cannot start {self.command[0]}: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            process.kill()
            await process.wait()
            logger.warning("Publish command timed out after %ss", self.timeout)
            raise PublishExecutionError(f"Publish command timed out after {self.timeout} seconds") from exc

        output = stdout.decode("utf-8", errors="replace")
        diagnostics = stderr.decode("utf-8", errors="replace")

        if process.returncode != 0:
            raise PublishExecutionError(
                f"NPM publish error: {diagnostics.strip() or f'exit code {process.returncode}'}",
                details={"exit_code": process.returncode},
            )

        unexpected = [
            line for line in diagnostics.splitlines()
            if line.strip() and not line.lstrip().startswith(self.notice_prefixes)
        ]
        if unexpected:
            raise PublishExecutionError("\n".join(unexpected), details={"exit_code": process.returncode})

        logger.debug("Publish command completed: %s", output.strip()[:200])
        return output

    @staticmethod
    def _cleanup(work_dir: Path) -> None:
        try:
            shutil.rmtree(work_dir)
        except OSError as exc:
            logger.error("Error cleaning up temp directory %s: %s", work_dir, exc)
