"""Component interfaces, shared value types and helpers.

A component is the broad term for every builder, registry, platform,
release manager and so on that a plugin can provide. Many interfaces here
have methods named ``<operation>_func`` that return the callable which
implements that operation, so that operations can take and return rich
types of their own choosing.
"""

from __future__ import annotations

import enum
import os
import queue
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, BinaryIO, Callable, Protocol, runtime_checkable

__all__ = [
    "Type",
    "TYPE_MAP",
    "Builder",
    "Registry",
    "Platform",
    "PlatformReleaser",
    "ReleaseManager",
    "Destroyer",
    "Execer",
    "LogPlatform",
    "ExecResult",
    "WorkspaceDestroyer",
    "Authenticator",
    "Source",
    "AuthResult",
    "LabelSet",
    "JobInfo",
    "DeploymentInfo",
    "Artifact",
    "Deployment",
    "Release",
    "Template",
    "Generation",
    "ConfigSourcer",
    "ConfigRequest",
    "Configurable",
    "Documented",
    "ConfigurableNotify",
    "DeploymentConfig",
    "ExecSessionInfo",
    "WindowSize",
    "LogViewer",
    "LogEvent",
    "LinesChunkWriter",
    "LogsSessionInfo",
    "new_id",
]


class Type(enum.IntEnum):
    """The kinds of component that are supported."""

    INVALID = 0
    BUILDER = 1
    REGISTRY = 2
    PLATFORM = 3
    RELEASE_MANAGER = 4
    LOG_PLATFORM = 5
    AUTHENTICATOR = 6
    MAPPER = 7
    CONFIG_SOURCER = 8

    def __str__(self) -> str:
        return _TYPE_NAMES[self]


_TYPE_NAMES = {
    Type.INVALID: "Invalid",
    Type.BUILDER: "Builder",
    Type.REGISTRY: "Registry",
    Type.PLATFORM: "Platform",
    Type.RELEASE_MANAGER: "ReleaseManager",
    Type.LOG_PLATFORM: "LogPlatform",
    Type.AUTHENTICATOR: "Authenticator",
    Type.MAPPER: "Mapper",
    Type.CONFIG_SOURCER: "ConfigSourcer",
}


# --- component interfaces -------------------------------------------------


@runtime_checkable
class Builder(Protocol):
    """Builds an artifact from source."""

    def build_func(self) -> Callable[..., Any] | None:
        """Return the callable for the "build" operation."""


@runtime_checkable
class Registry(Protocol):
    """Manages artifacts."""

    def push_func(self) -> Callable[..., Any] | None:
        """Return the callable for the "push" operation."""


@runtime_checkable
class Platform(Protocol):
    """Deploys artifacts."""

    def deploy_func(self) -> Callable[..., Any] | None:
        """Return the callable for the "deploy" operation."""


@runtime_checkable
class PlatformReleaser(Protocol):
    """Optional platform interface providing a default release manager."""

    def default_releaser_func(self) -> Callable[..., Any] | None:
        """Return a callable that yields an unconfigured ReleaseManager."""


@runtime_checkable
class ReleaseManager(Protocol):
    """Makes a deployment "released" so that traffic can route to it."""

    def release_func(self) -> Callable[..., Any] | None:
        """Return the callable for the "release" operation."""


@runtime_checkable
class Destroyer(Protocol):
    """Destroys the resources created by a component."""

    def destroy_func(self) -> Callable[..., Any] | None:
        """Return the callable for the destroy operation."""


@runtime_checkable
class Execer(Protocol):
    """Provides a bespoke exec session for a deployment."""

    def exec_func(self) -> Callable[..., Any] | None:
        """Return the callable for an exec session operation."""


@runtime_checkable
class LogPlatform(Protocol):
    """Reads logs for a deployment in its own way."""

    def logs_func(self) -> Callable[..., Any] | None:
        """Return the callable for a logs operation."""


@runtime_checkable
class WorkspaceDestroyer(Protocol):
    """Called when a whole workspace is destroyed; must be idempotent."""

    def destroy_workspace_func(self) -> Callable[..., Any] | None:
        """Return the callable for the workspace destroy operation."""


@runtime_checkable
class Authenticator(Protocol):
    """Authenticates a plugin and validates its credentials."""

    def auth_func(self) -> Callable[..., Any] | None:
        """Return the callable that obtains credentials (yields AuthResult)."""

    def validate_auth_func(self) -> Callable[..., Any] | None:
        """Return the callable that validates credentials."""


@runtime_checkable
class ConfigSourcer(Protocol):
    """Sources dynamic configuration for running applications."""

    def read_func(self) -> Callable[..., Any] | None:
        """Return the callable that reads configuration."""

    def stop_func(self) -> Callable[..., Any] | None:
        """Return the callable that stops sourcing, or None if not needed."""


@runtime_checkable
class Configurable(Protocol):
    """A component that accepts user configuration."""

    def config(self) -> Any:
        """Return the object the decoded configuration is written into.

        Returning None behaves as if the component were not configurable.
        """


@runtime_checkable
class Documented(Protocol):
    """A component that documents itself."""

    def documentation(self) -> Any:
        """Return the component's documentation."""


@runtime_checkable
class ConfigurableNotify(Configurable, Protocol):
    """A configurable component notified after decoding succeeds."""

    def config_set(self, value: Any) -> None:
        """Receive the decoded configuration value."""


# --- result interfaces ----------------------------------------------------


@runtime_checkable
class Artifact(Protocol):
    """The result of a build."""

    def labels(self) -> dict[str, str]:
        """Return labels to set, namespaced like ``plugin.example.com/key``."""


@runtime_checkable
class Deployment(Protocol):
    """The result of a deploy; any value qualifies."""


@runtime_checkable
class Release(Protocol):
    """The result of a release."""

    def url(self) -> str:
        """Return the URL to access this release."""


@runtime_checkable
class Template(Protocol):
    """Exposes template data for artifacts, deployments and releases."""

    def template_data(self) -> dict[str, Any]:
        """Return the template data; keys must be present even when empty."""


@runtime_checkable
class Generation(Protocol):
    """Explicitly names the generation of a deploy or release."""

    def generation_func(self) -> Callable[..., Any] | None:
        """Return a callable producing the generation as bytes."""


# Mapping of component type to the interface implementing it.
TYPE_MAP: dict[Type, type] = {
    Type.BUILDER: Builder,
    Type.REGISTRY: Registry,
    Type.PLATFORM: Platform,
    Type.RELEASE_MANAGER: ReleaseManager,
    Type.LOG_PLATFORM: LogPlatform,
    Type.AUTHENTICATOR: Authenticator,
    Type.CONFIG_SOURCER: ConfigSourcer,
}


# --- value types ----------------------------------------------------------


@dataclass
class ExecResult:
    """Status of a command run through an exec session."""

    exit_code: int = 0


@dataclass
class Source:
    """Where an application's source lives."""

    app: str = ""
    path: str = ""


@dataclass
class AuthResult:
    """Result of an authentication attempt; False is not an error."""

    authenticated: bool = False


@dataclass
class LabelSet:
    """A set of labels."""

    labels: dict[str, str] = field(default_factory=dict)


@dataclass
class JobInfo:
    """Context of the job executing a plugin operation."""

    id: str = ""
    local: bool = False
    workspace: str = ""


@dataclass
class DeploymentInfo:
    """Information about a running deployment."""

    component_name: str = ""
    labels: dict[str, str] = field(default_factory=dict)


@dataclass
class ConfigRequest:
    """A single configuration variable requested from a ConfigSourcer."""

    name: str = ""
    config: dict[str, str] = field(default_factory=dict)


@dataclass
class DeploymentConfig:
    """Configuration for the behaviour of a deployment."""

    id: str = ""
    server_addr: str = ""
    server_tls: bool = False
    server_tls_skip_verify: bool = False
    entrypoint_invite_token: str = ""

    def env(self) -> dict[str, str]:
        """Environment variables the entrypoint needs to be configured."""
        results = {"WAYPOINT_DEPLOYMENT_ID": self.id}
        if not self.server_addr:
            results["WAYPOINT_SERVER_DISABLE"] = "1"
            return results

        results["WAYPOINT_SERVER_ADDR"] = self.server_addr
        if self.server_tls:
            results["WAYPOINT_SERVER_TLS"] = "1"
        if self.server_tls_skip_verify:
            results["WAYPOINT_SERVER_TLS_SKIP_VERIFY"] = "1"
        if self.entrypoint_invite_token:
            results["WAYPOINT_CEB_INVITE_TOKEN"] = self.entrypoint_invite_token
        return results


@dataclass
class WindowSize:
    """Size of a terminal window."""

    height: int = 0
    width: int = 0


@dataclass
class ExecSessionInfo:
    """Everything an exec plugin needs to run a session."""

    input: BinaryIO | None = None
    output: BinaryIO | None = None
    error: BinaryIO | None = None
    is_tty: bool = False
    term: str = ""
    initial_window_size: WindowSize = field(default_factory=WindowSize)
    window_size_updates: queue.Queue[WindowSize] = field(default_factory=queue.Queue)
    arguments: list[str] = field(default_factory=list)
    environment: list[str] = field(default_factory=list)


@dataclass
class LogEvent:
    """A single log entry."""

    partition: str = ""
    timestamp: datetime = field(
        default_factory=lambda: datetime.fromtimestamp(0, timezone.utc)
    )
    message: str = ""


@dataclass
class LogViewer:
    """Channel for batches of log entries emitted by a LogPlatform."""

    starting_at: datetime = field(
        default_factory=lambda: datetime.fromtimestamp(0, timezone.utc)
    )
    limit: int = 0
    output: queue.Queue[LogEvent] = field(default_factory=queue.Queue)


@runtime_checkable
class LinesChunkWriter(Protocol):
    """Receives chunks of log lines from a logs plugin."""

    def output_lines(self, lines: list[str]) -> None:
        """Write a chunk of lines."""


@dataclass
class LogsSessionInfo:
    """Everything a logs plugin needs to output log lines."""

    output: LinesChunkWriter | None = None
    starting_from: datetime = field(
        default_factory=lambda: datetime.fromtimestamp(0, timezone.utc)
    )
    limit: int = 0


# --- identifiers ----------------------------------------------------------

_CROCKFORD = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_MAX_TIME = (1 << 48) - 1
_MAX_ENTROPY = (1 << 80) - 1


def _encode_ulid(value: int) -> str:
    chars = []
    for _ in range(26):
        chars.append(_CROCKFORD[value & 31])
        value >>= 5
    return "".join(reversed(chars))


class _MonotonicUlid:
    """ULID source whose ids strictly increase within one millisecond."""

    def __init__(self, entropy: Callable[[int], bytes] = os.urandom) -> None:
        self._entropy = entropy
        self._lock = threading.Lock()
        self._ms = -1
        self._rand = 0

    def generate(self, ms: int) -> str:
        if not 0 <= ms <= _MAX_TIME:
            raise ValueError(f"ULID timestamp out of range: {ms}")
        with self._lock:
            if ms == self._ms:
                if self._rand >= _MAX_ENTROPY:
                    raise OverflowError("ULID monotonic entropy overflow")
                self._rand += 1
            else:
                self._ms = ms
                self._rand = int.from_bytes(self._entropy(10), "big")
            value = (ms << 80) | self._rand
        return _encode_ulid(value)


_ulid_source = _MonotonicUlid()


def new_id() -> str:
    """Return a new unique, lexically sortable id (a ULID)."""
    return _ulid_source.generate(time.time_ns() // 1_000_000)