import dataclasses

import pytest

from plugsdk import docs
from plugsdk.configure import ConfigurationError, configure, documentation
from plugsdk.docs import FieldDocs


@dataclasses.dataclass
class _NameConfig:
    name: str = dataclasses.field(default="", metadata={"hcl": "name,attr"})


class _Impl:
    def __init__(self):
        self.cfg = _NameConfig()

    def config(self):
        return self.cfg


class _ImplNil:
    def config(self):
        return None


class _ImplNotify(_Impl):
    def __init__(self):
        super().__init__()
        self.notified = False

    def config_set(self, value):
        self.notified = True


def test_valid_config():
    c = _Impl()
    result = configure(c, {"name": "foo"}, None)
    assert c.cfg.name == "foo"
    assert result is c.cfg


def test_invalid_config():
    with pytest.raises(ConfigurationError) as excinfo:
        configure(_Impl(), {}, None)
    assert "is required" in str(excinfo.value)
    assert excinfo.value.diagnostics[0].summary == "Missing required argument"


def test_empty_block_body_is_missing_required():
    with pytest.raises(ConfigurationError, match="is required"):
        configure(_Impl(), None, None)


def test_nil_interface():
    assert configure(None, {}, None) is None


def test_nil_config_struct():
    assert configure(_ImplNil(), {}, None) is None
    assert configure(_ImplNil(), {"name": "foo"}, None) is None


def test_non_impl_empty_body():
    assert configure(object(), {}, None) is None


def test_non_impl_body():
    with pytest.raises(ConfigurationError) as excinfo:
        configure(object(), {"name": "foo"}, None)
    assert excinfo.value.diagnostics[0].summary == "Unsupported argument"
    assert '"name"' in str(excinfo.value)


def test_notify():
    c = _ImplNotify()
    configure(c, {"name": "foo"}, None)
    assert c.cfg.name == "foo"
    assert c.notified is True


def test_notify_not_called_on_decode_error():
    c = _ImplNotify()
    with pytest.raises(ConfigurationError):
        configure(c, {}, None)
    assert c.notified is False


def test_config_error_becomes_diagnostic():
    class Failing:
        def config(self):
            raise ValueError("cannot build config")

    with pytest.raises(ConfigurationError) as excinfo:
        configure(Failing(), {}, None)
    assert excinfo.value.diagnostics[0].summary == "cannot build config"
    assert excinfo.value.diagnostics[0].severity == "error"


def test_config_set_error_becomes_diagnostic():
    class Rejecting(_Impl):
        def config_set(self, value):
            raise ValueError("rejected")

    with pytest.raises(ConfigurationError, match="rejected"):
        configure(Rejecting(), {"name": "foo"}, None)


def test_unsupported_argument_on_configurable():
    with pytest.raises(ConfigurationError, match='named "extra"'):
        configure(_Impl(), {"name": "foo", "extra": 1}, None)


def test_expression_evaluated_with_context():
    c = _Impl()
    configure(c, {"name": lambda ctx: ctx["greeting"]}, {"greeting": "hi"})
    assert c.cfg.name == "hi"


@dataclasses.dataclass
class _TypedConfig:
    port: int = dataclasses.field(default=0, metadata={"hcl": "port,attr"})
    name: str = dataclasses.field(default="", metadata={"hcl": "name,optional"})
    ratio: float = dataclasses.field(default=0.0, metadata={"hcl": "ratio,optional"})
    tags: list[str] = dataclasses.field(
        default_factory=list, metadata={"hcl": "tags,optional"}
    )


class _TypedImpl:
    def __init__(self):
        self.cfg = _TypedConfig()

    def config(self):
        return self.cfg


def test_typed_values_converted():
    c = _TypedImpl()
    configure(c, {"port": 8080, "name": 5, "ratio": 1, "tags": ["a", "b"]})
    assert c.cfg == _TypedConfig(port=8080, name="5", ratio=1.0, tags=["a", "b"])


def test_type_mismatch():
    with pytest.raises(ConfigurationError) as excinfo:
        configure(_TypedImpl(), {"port": "abc"})
    assert excinfo.value.diagnostics[0].summary == "Incorrect attribute value type"
    assert '"port"' in str(excinfo.value)


def test_remain_collects_leftovers():
    @dataclasses.dataclass
    class RemainConfig:
        name: str = dataclasses.field(default="", metadata={"hcl": "name,attr"})
        rest: dict = dataclasses.field(
            default_factory=dict, metadata={"hcl": ",remain"}
        )

    class RemainImpl:
        def __init__(self):
            self.cfg = RemainConfig()

        def config(self):
            return self.cfg

    c = RemainImpl()
    configure(c, {"name": "foo", "extra": 1})
    assert c.cfg == RemainConfig(name="foo", rest={"extra": 1})


def test_documentation_of_documented_component():
    expected = docs.new()
    expected.description("self documented")

    class SelfDocumented:
        def documentation(self):
            return expected

    result = documentation(SelfDocumented())
    assert result.details().description == "self documented"


def test_documentation_from_config():
    result = documentation(_Impl())
    assert result.fields() == [FieldDocs(field="name", type="string")]


def test_documentation_from_builder():
    @dataclasses.dataclass
    class Artifact:
        Image: str = ""
        FullName: str = ""

    class MyBuilder:
        def build_func(self):
            def build() -> Artifact:
                return Artifact()

            return build

    result = documentation(MyBuilder())
    assert [f.field for f in result.template_fields()] == ["full_name", "image"]
    assert result.fields() == []


def test_documentation_ignores_config_errors():
    class Failing:
        def config(self):
            raise ValueError("broken")

    assert documentation(Failing()).fields() == []