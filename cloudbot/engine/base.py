"""Provisioning engine boundary."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path

from cloudbot.domain.resources import ResourceDetail


class ProvisioningEngine(ABC):
    """Runs infrastructure-as-code commands against one working directory.

    ``variables`` are plain template inputs; ``env`` carries secrets and is
    only ever placed in the engine process environment. Failures raise
    EngineError with a classified ``kind``.
    """

    @abstractmethod
    async def init(self, workdir: Path, *, env: Mapping[str, str] | None = None) -> None:
        """Prepare the working directory (providers, modules)."""
        pass

    @abstractmethod
    async def validate(self, workdir: Path, *, env: Mapping[str, str] | None = None) -> None:
        """Check the configuration for errors."""
        pass

    @abstractmethod
    async def plan(
        self,
        workdir: Path,
        variables: Mapping[str, str],
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Compute the change set."""
        pass

    @abstractmethod
    async def apply(
        self,
        workdir: Path,
        variables: Mapping[str, str],
        *,
        auto_approve: bool = True,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Create or update resources."""
        pass

    @abstractmethod
    async def destroy(
        self,
        workdir: Path,
        variables: Mapping[str, str],
        *,
        auto_approve: bool = True,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Tear down every resource in the working directory's state."""
        pass

    @abstractmethod
    async def state_list(
        self, workdir: Path, *, env: Mapping[str, str] | None = None
    ) -> list[str]:
        """Addresses of resources currently in state."""
        pass

    @abstractmethod
    async def show_resources(
        self, workdir: Path, *, env: Mapping[str, str] | None = None
    ) -> list[ResourceDetail]:
        """Instance-like resources in state with their attributes."""
        pass
