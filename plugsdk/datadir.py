"""Data directories for projects, apps and components.

Persisted data and ephemeral cache live in separate directories. Consumers
ask for a directory scoped to the part of the data model they work on
(a project, an app in it, or a component of an app) instead of building
filesystem paths themselves.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import tempfile
from dataclasses import dataclass
from typing import Iterator, Protocol, Union, runtime_checkable

__all__ = [
    "Dir",
    "BasicDir",
    "Project",
    "App",
    "Component",
    "new_root_dir",
    "new_basic_dir",
    "new_scoped_dir",
    "new_project",
    "temporary_dir",
]

_MODE = 0o755

PathLike = Union[str, "os.PathLike[str]"]


@runtime_checkable
class Dir(Protocol):
    """Where a consumer stores cache data and persisted data."""

    cache_dir: str
    data_dir: str


def _join(*parts: PathLike) -> str:
    """Join path elements, treating later absolute elements as relative."""
    elements = [os.fspath(part) for part in parts if os.fspath(part)]
    if not elements:
        return ""
    return os.path.normpath(os.sep.join(elements))


def _make_dirs(*paths: str) -> None:
    for path in paths:
        os.makedirs(path, mode=_MODE, exist_ok=True)


@dataclass(frozen=True)
class BasicDir:
    """A directory pair given explicitly."""

    cache_dir: str
    data_dir: str


@dataclass(frozen=True)
class Component(BasicDir):
    """The directories of a single component of an app."""


@dataclass(frozen=True)
class App(BasicDir):
    """The directories of a single app."""

    def component(self, typ: str, name: str) -> Component:
        """Return the directories of a component, creating them."""
        scoped = new_scoped_dir(self, _join("component", typ, name))
        return Component(cache_dir=scoped.cache_dir, data_dir=scoped.data_dir)


@dataclass(frozen=True)
class Project(BasicDir):
    """The directories of a whole project, shared by all of its apps."""

    def app(self, name: str) -> App:
        """Return the directories of an app, creating them."""
        scoped = new_scoped_dir(self, _join("app", name))
        return App(cache_dir=scoped.cache_dir, data_dir=scoped.data_dir)


def new_root_dir(path: PathLike) -> BasicDir:
    """Create ``<path>/cache`` and ``<path>/data`` and return them."""
    root = os.fspath(path)
    _make_dirs(root)
    cache_dir = _join(root, "cache")
    data_dir = _join(root, "data")
    _make_dirs(cache_dir, data_dir)
    return BasicDir(cache_dir=cache_dir, data_dir=data_dir)


def new_basic_dir(cache_dir: PathLike, data_dir: PathLike) -> BasicDir:
    """Return a directory pair for the given paths without touching disk."""
    return BasicDir(cache_dir=os.fspath(cache_dir), data_dir=os.fspath(data_dir))


def new_scoped_dir(parent: Dir, path: PathLike) -> BasicDir:
    """Return the directories at ``path`` below ``parent``, creating them.

    Callers must avoid creating overlapping scopes, which could collide.
    """
    cache_dir = _join(parent.cache_dir, path)
    data_dir = _join(parent.data_dir, path)
    _make_dirs(cache_dir, data_dir)
    return BasicDir(cache_dir=cache_dir, data_dir=data_dir)


def new_project(path: PathLike) -> Project:
    """Create the directory structure of a project at ``path``."""
    root = new_root_dir(path)
    return Project(cache_dir=root.cache_dir, data_dir=root.data_dir)


@contextlib.contextmanager
def temporary_dir() -> Iterator[BasicDir]:
    """Yield a root directory in a temporary location, removed on exit."""
    root = tempfile.mkdtemp(prefix="datadir-test")
    try:
        yield new_root_dir(root)
    finally:
        shutil.rmtree(root, ignore_errors=True)