import queue

import pytest

from plugsdk import component
from plugsdk.component import (
    TYPE_MAP,
    Artifact,
    AuthResult,
    Authenticator,
    Builder,
    ConfigurableNotify,
    Configurable,
    DeploymentConfig,
    ExecSessionInfo,
    LinesChunkWriter,
    LogViewer,
    Platform,
    Release,
    Type,
    new_id,
)

_CROCKFORD = set("0123456789ABCDEFGHJKMNPQRSTVWXYZ")


def test_type_values_and_names():
    assert Type(0) is Type.INVALID
    assert Type(1) is Type.BUILDER
    assert Type(8) is Type.CONFIG_SOURCER
    assert str(Type(1)) == "Builder"
    assert str(Type(4)) == "ReleaseManager"
    assert str(Type(0)) == "Invalid"
    with pytest.raises(ValueError):
        Type(99)


def test_type_map_excludes_mapper_and_invalid():
    assert Type(7) not in TYPE_MAP
    assert Type(0) not in TYPE_MAP
    assert TYPE_MAP[Type(1)] is Builder
    assert TYPE_MAP[Type(3)] is Platform
    assert TYPE_MAP[Type(6)] is Authenticator


def test_env_server_disabled():
    cfg = DeploymentConfig(id="dep1")
    assert cfg.env() == {
        "WAYPOINT_DEPLOYMENT_ID": "dep1",
        "WAYPOINT_SERVER_DISABLE": "1",
    }


def test_env_disabled_ignores_tls_and_token():
    cfg = DeploymentConfig(id="d", server_tls=True, entrypoint_invite_token="token")
    env = cfg.env()
    assert "WAYPOINT_SERVER_TLS" not in env
    assert "WAYPOINT_CEB_INVITE_TOKEN" not in env
    assert env["WAYPOINT_SERVER_DISABLE"] == "1"


def test_env_full_server():
    cfg = DeploymentConfig(
        id="d",
        server_addr="localhost:9701",
        server_tls=True,
        server_tls_skip_verify=True,
        entrypoint_invite_token="token",
    )
    assert cfg.env() == {
        "WAYPOINT_DEPLOYMENT_ID": "d",
        "WAYPOINT_SERVER_ADDR": "localhost:9701",
        "WAYPOINT_SERVER_TLS": "1",
        "WAYPOINT_SERVER_TLS_SKIP_VERIFY": "1",
        "WAYPOINT_CEB_INVITE_TOKEN": "token",
    }


def test_env_server_without_tls():
    env = DeploymentConfig(id="d", server_addr="localhost:1").env()
    assert set(env) == {"WAYPOINT_DEPLOYMENT_ID", "WAYPOINT_SERVER_ADDR"}


def test_new_id_format():
    value = new_id()
    assert len(value) == 26
    assert set(value) <= _CROCKFORD
    assert value[0] in "01234567"


def test_new_id_unique_and_sorted():
    ids = [new_id() for _ in range(500)]
    assert len(set(ids)) == len(ids)
    assert ids == sorted(ids)


def test_monotonic_same_millisecond_increments():
    gen = component._MonotonicUlid(entropy=lambda n: bytes(n))
    first = gen.generate(1234)
    second = gen.generate(1234)
    assert first[:10] == second[:10]
    assert second > first


def test_monotonic_later_millisecond_sorts_after():
    gen = component._MonotonicUlid(entropy=lambda n: b"\xff" * n)
    first = gen.generate(10)
    second = gen.generate(11)
    assert second > first
    assert first[:10] < second[:10]


def test_monotonic_overflow_raises():
    gen = component._MonotonicUlid(entropy=lambda n: b"\xff" * n)
    gen.generate(5)
    with pytest.raises(OverflowError):
        gen.generate(5)


def test_timestamp_out_of_range():
    gen = component._MonotonicUlid()
    with pytest.raises(ValueError):
        gen.generate(-1)


def test_protocol_detection():
    class MyBuilder:
        def build_func(self):
            return lambda: 1

    class MyRelease:
        def url(self):
            return "https://app.example.com"

    builder_types = [t for t, proto in TYPE_MAP.items() if isinstance(MyBuilder(), proto)]
    assert builder_types == [Type.BUILDER]

    release_kinds = [
        proto.__name__ for proto in (Release, Artifact) if isinstance(MyRelease(), proto)
    ]
    assert release_kinds == ["Release"]


def test_configurable_notify_detection():
    class Plain:
        def config(self):
            return {}

    class Notify(Plain):
        def config_set(self, value):
            self.value = value

    request = component.ConfigRequest(name="db_host", config={"key": "value"})
    notify = Notify()
    notify.config_set(request)

    assert isinstance(Plain(), Configurable)
    assert not isinstance(Plain(), ConfigurableNotify)
    assert isinstance(notify, ConfigurableNotify)
    assert notify.value.name == "db_host"
    assert notify.value.config == {"key": "value"}


def test_lines_chunk_writer():
    class Collector:
        def __init__(self):
            self.lines = []

        def output_lines(self, lines):
            self.lines.extend(lines)

    c = Collector()
    assert isinstance(c, LinesChunkWriter)
    info = component.LogsSessionInfo(output=c, limit=3)
    info.output.output_lines(["a", "b"])
    assert c.lines == ["a", "b"]


def test_defaults():
    assert AuthResult().authenticated is False
    esi = ExecSessionInfo()
    assert esi.initial_window_size == component.WindowSize(0, 0)
    assert esi.arguments == []
    assert isinstance(esi.window_size_updates, queue.Queue)
    # Mutable defaults must not be shared.
    other = ExecSessionInfo()
    esi.arguments.append("sh")
    assert other.arguments == []


def test_log_viewer_queue():
    lv = LogViewer(limit=10)
    event = component.LogEvent(partition="p", message="hello")
    lv.output.put(event)
    assert lv.output.get_nowait() is event
    assert lv.limit == 10