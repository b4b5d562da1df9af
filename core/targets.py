"""Backend endpoints for the stable and dev deployments."""

from dataclasses import dataclass
from enum import Enum

from core.config import BackendSettings, Config


class ForwardRoute(str, Enum):
    """Path selector shared by the inbound and outbound side."""

    DATA = "post_data"
    ERROR = "post_error"

    @property
    def path(self) -> str:
        return f"/{self.value}"


@dataclass(frozen=True)
class Endpoint:
    """A single backend reachable at scheme://host:port."""

    scheme: str
    host: str
    port: int

    @classmethod
    def from_settings(cls, settings: BackendSettings) -> "Endpoint":
        return cls(scheme=settings.scheme, host=settings.host, port=settings.port)

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"

    def url_for(self, path: str) -> str:
        """Build the outbound URL for a path."""
        return f"{self.base_url}/{path.lstrip('/')}"


@dataclass(frozen=True)
class BackendTargets:
    """The stable/dev pair every inbound request is duplicated to."""

    stable: Endpoint
    dev: Endpoint


class TargetResolver:
    """Hold the backend pair configured at startup."""

    def __init__(self, stable: Endpoint, dev: Endpoint) -> None:
        self._targets = BackendTargets(stable=stable, dev=dev)

    @classmethod
    def from_config(cls, config: Config) -> "TargetResolver":
        return cls(
            stable=Endpoint.from_settings(config.stable),
            dev=Endpoint.from_settings(config.dev),
        )

    def resolve(self) -> BackendTargets:
        """Return the fixed backend pair."""
        return self._targets
