# plugsdk

Building blocks for writing deployment plugins: the component interfaces a
plugin implements, configuration decoding and documentation helpers,
per-project data directories, protobuf `Any` packing, a pseudo-terminal
wrapper and a terminal spinner.

## Installation

```
pip install plugsdk
```

For the test suite:

```
pip install "plugsdk[test]"
pytest
```

## Modules

### `plugsdk.component`

- `Type`: the component kinds (`BUILDER`, `REGISTRY`, `PLATFORM`,
  `RELEASE_MANAGER`, `LOG_PLATFORM`, `AUTHENTICATOR`, `MAPPER`,
  `CONFIG_SOURCER`, plus `INVALID`). `str(Type.RELEASE_MANAGER)` gives
  `"ReleaseManager"`. `TYPE_MAP` maps each kind to its interface.
- Runtime-checkable protocols a plugin implements: `Builder`, `Registry`,
  `Platform`, `PlatformReleaser`, `ReleaseManager`, `Destroyer`, `Execer`,
  `LogPlatform`, `WorkspaceDestroyer`, `Authenticator`, `ConfigSourcer`,
  `Configurable`, `ConfigurableNotify`, `Documented`, and for results
  `Artifact`, `Deployment`, `Release`, `Template`, `Generation`,
  `LinesChunkWriter`. Operation methods such as `build_func()` return the
  callable that performs the operation.
- Dataclasses: `Source`, `JobInfo`, `LabelSet`, `AuthResult`, `ExecResult`,
  `DeploymentInfo`, `ConfigRequest`, `DeploymentConfig`, `WindowSize`,
  `ExecSessionInfo`, `LogEvent`, `LogViewer`, `LogsSessionInfo`.
- `DeploymentConfig.env()` returns the `WAYPOINT_*` environment variables
  an entrypoint needs.
- `new_id()` returns a new ULID; ids made in the same millisecond strictly
  increase.

### `plugsdk.configure`

- `configure(c, body, ctx=None)` decodes a mapping of attribute names to
  values into the dataclass that `c.config()` returns and returns it. Fields
  name their attribute in `field(metadata={"hcl": "name"})`; add
  `",optional"` for optional attributes or use `",remain"` to collect
  unknown ones. Callable values are called with `ctx`. Problems raise
  `ConfigurationError`, whose `diagnostics` holds `Diagnostic` values. A
  component that is not configurable accepts only an empty body.
  `ConfigurableNotify` components get `config_set(value)` afterwards.
- `documentation(c)` returns the component's own documentation if it is
  `Documented`, otherwise builds one from its configuration and its build,
  push or deploy function.

### `plugsdk.docs`

`Documentation` holds a description, example, input, output, mappers and
fields. Build one with `new(*options)` using `from_config(v)`,
`request_from_struct(v)` and `from_func(fn)`; the latter reads template
fields from a function's return annotation (a dataclass, or a `Template`
class). Set fields with `set_field`, `set_template_field`,
`set_request_field`, passing `summary(...)`, `Default`, `EnvVar` or
`sub_fields(f)` as options; read them back sorted by name with `fields()`,
`template_fields()` and `request_fields()`. `cleanup_type(t)` turns type
names like `[]*string` into `list of string`.

### `plugsdk.datadir`

`new_project(path)` creates `<path>/cache` and `<path>/data` and returns a
`Project`; `Project.app(name)` and `App.component(typ, name)` create and
return scoped directories. `new_root_dir`, `new_basic_dir` and
`new_scoped_dir` are the building blocks; `temporary_dir()` is a context
manager yielding a root directory that is removed on exit.

### `plugsdk.proto`

`proto_any(m)` packs a protobuf message, or anything with a `proto()`
method (`ProtoMarshaler`), into an `Any`; it returns `None` for other
values. `proto_any_slice` does the same for each item of an iterable.
`proto_any_unmarshal(m, out)` unpacks into `out` and raises `ProtoError`
when that is not possible.

### `plugsdk.ptyio`

`open_pty()` returns a `Pty` with `in_pipe` (terminal side) and `out_pipe`
(controlling side); `resize(cols, rows)` sets the window size and `close()`
closes both. It is also a context manager.

### `plugsdk.spinner`

`Spinner(chars, delay, color=None, suffix="", final_msg="",
hide_cursor=False, writer=None)` draws frames from a character set on a
background thread every `delay` seconds. Passing `color` starts it; otherwise
call `start()`. `stop()` erases it and writes `final_msg`; there are also
`restart()`, `reverse()`, `set_color(*names)` (raises `InvalidColorError`
for unknown names), `update_speed`, `update_char_set` and the `locked()`
context manager. `CHAR_SETS` holds the ready-made character sets and
`generate_number_sequence(n)` gives `"0"` to `str(n - 1)`.

## Example

```python
from dataclasses import dataclass, field

from plugsdk.component import DeploymentConfig
from plugsdk.configure import configure
from plugsdk.datadir import new_project


@dataclass
class Config:
    name: str = field(default="", metadata={"hcl": "name"})


class MyBuilder:
    def __init__(self):
        self.cfg = Config()

    def config(self):
        return self.cfg


print(configure(MyBuilder(), {"name": "foo"}))

cfg = DeploymentConfig(id="d1", server_addr="localhost:9701", server_tls=True)
print(cfg.env())

project = new_project("/tmp/myproject")
comp = project.app("web").component("platform", "docker")
print(comp.cache_dir, comp.data_dir)
```

## What this package does not do

It defines the interfaces and value types of plugins but does not run
plugins: there is no plugin server or client, no RPC transport, no argument
mapping between operations and no command-line program. Configuration
bodies are plain Python mappings; no HCL files are parsed. `plugsdk.ptyio`
works only on POSIX systems.