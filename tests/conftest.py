"""Shared fixtures for gistnew tests."""

import os
import subprocess

import pytest
from click.testing import CliRunner
from dulwich.repo import Repo

from gistnew import clone as clone_mod
from gistnew._log import Log


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def log():
    return Log(verbose_enabled=True)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """A clean working directory the commands resolve names against."""
    wd = tmp_path / "work"
    wd.mkdir()
    monkeypatch.chdir(wd)
    return wd


def make_clone(dest, *, gitignore=True, git_dir=True, extra=()):
    """Populate *dest* the way ``gh gist clone`` would."""
    os.makedirs(dest)
    if git_dir:
        Repo.init(dest).close()
    if gitignore:
        with open(os.path.join(dest, ".gitignore"), "w") as f:
            f.write("*.log\n")
    for name in extra:
        with open(os.path.join(dest, name), "w") as f:
            f.write(name)


@pytest.fixture
def fake_clone(monkeypatch):
    """Replace the ``gh gist clone`` subprocess with an in-process fake.

    Returns a dict: set ``returncode``/``output``/``git_dir``/``extra``
    before the clone runs; ``calls`` records ``(gh, gist_id, dest)``.
    """
    state = {
        "returncode": 0,
        "output": "Cloning into 'clone'...\n",
        "git_dir": True,
        "extra": (),
        "calls": [],
    }

    def _run(gh, gist_id, dest):
        state["calls"].append((gh, gist_id, dest))
        if state["returncode"] == 0:
            make_clone(dest, git_dir=state["git_dir"], extra=state["extra"])
        return subprocess.CompletedProcess(
            [gh, "gist", "clone", gist_id, dest],
            state["returncode"], stdout=state["output"],
        )

    monkeypatch.setattr(clone_mod, "run_gist_clone", _run)
    return state
