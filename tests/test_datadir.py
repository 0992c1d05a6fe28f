import os

import pytest

from plugsdk.datadir import (
    App,
    BasicDir,
    Component,
    Dir,
    Project,
    new_basic_dir,
    new_project,
    new_root_dir,
    new_scoped_dir,
    temporary_dir,
)


def test_new_root_dir(tmp_path):
    path = str(tmp_path / "waypoint")
    root = new_root_dir(path)

    assert root.cache_dir == path + "/cache"
    assert root.data_dir == path + "/data"
    assert os.path.isdir(root.cache_dir)
    assert os.path.isdir(root.data_dir)


def test_new_root_dir_is_idempotent(tmp_path):
    first = new_root_dir(tmp_path)
    second = new_root_dir(tmp_path)
    assert first == second


def test_new_basic_dir():
    cache_dir = "/tmp/cache"
    data_dir = "/tmp/data"

    basic = new_basic_dir(cache_dir, data_dir)

    assert basic.cache_dir == cache_dir
    assert basic.data_dir == data_dir


def test_new_basic_dir_does_not_create(tmp_path):
    basic = new_basic_dir(tmp_path / "c", tmp_path / "d")
    assert basic.cache_dir == str(tmp_path / "c")
    assert not os.path.exists(basic.cache_dir)


def test_new_scoped_dir(tmp_path):
    cache_dir = str(tmp_path / "cache")
    data_dir = str(tmp_path / "data")
    path = "/waypoint"
    parent = new_basic_dir(cache_dir, data_dir)

    scoped = new_scoped_dir(parent, path)

    assert scoped.cache_dir == cache_dir + path
    assert scoped.data_dir == data_dir + path
    assert os.path.isdir(scoped.cache_dir)
    assert os.path.isdir(scoped.data_dir)


def test_project_app_and_component(tmp_path):
    project = new_project(tmp_path / "proj")
    assert isinstance(project, Project)

    app = project.app("web")
    assert isinstance(app, App)
    assert app.cache_dir == os.path.join(project.cache_dir, "app", "web")
    assert app.data_dir == os.path.join(project.data_dir, "app", "web")
    assert os.path.isdir(app.data_dir)

    comp = app.component("builder", "docker")
    assert isinstance(comp, Component)
    assert comp.cache_dir == os.path.join(app.cache_dir, "component", "builder", "docker")
    assert comp.data_dir == os.path.join(app.data_dir, "component", "builder", "docker")
    assert os.path.isdir(comp.cache_dir)


def test_dir_protocol():
    basic = new_basic_dir("a", "b")
    assert isinstance(basic, Dir)
    assert (basic.cache_dir, basic.data_dir) == ("a", "b")
    assert not isinstance(object(), Dir)


def test_basic_dir_is_frozen():
    basic = BasicDir(cache_dir="a", data_dir="b")
    with pytest.raises(AttributeError):
        basic.cache_dir = "c"
    assert basic.cache_dir == "a"
    assert basic.data_dir == "b"


def test_temporary_dir_removed_on_exit():
    with temporary_dir() as root:
        root_path = os.path.dirname(root.cache_dir)
        assert os.path.isdir(root.cache_dir)
        assert os.path.isdir(root.data_dir)
        assert os.path.basename(root.data_dir) == "data"
    assert not os.path.exists(root_path)


def test_scoped_dir_fails_under_file(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    parent = new_basic_dir(blocker, blocker)
    with pytest.raises(OSError):
        new_scoped_dir(parent, "child")