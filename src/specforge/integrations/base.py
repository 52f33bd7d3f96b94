"""Abstract base classes for outbound collaborators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class PublishResult:
    """Outcome of a successful publish attempt."""

    publisher: str
    package_name: str
    version: str
    output: str = ""


class TextGenerator(ABC):
    """Sends one prompt to a generative-language endpoint."""

    generator_type: str = "unknown"

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Return the generated text for ``prompt``.

        Raises:
            UpstreamError: On a non-2xx answer, transport failure or a
                payload without candidate text.
        """
        ...


class PackagePublisher(ABC):
    """Pushes a generated client package to a registry."""

    publisher_type: str = "unknown"

    @abstractmethod
    async def publish(
        self,
        manifest: dict,
        module_body: str,
        context: dict | None = None,
    ) -> PublishResult:
        """Publish one package.

        Args:
            manifest: The ``package.json`` content.
            module_body: Source of the entry file named by ``manifest["main"]``.
            context: Identifiers of the spec version being published.

        Raises:
            ConfigMissingError: If a server-side credential is absent.
            PublishExecutionError: If the publish step itself fails.
            UpstreamError: If a remote publish trigger rejects the request.
        """
        ...
