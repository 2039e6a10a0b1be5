"""Tests for the ``tomlnode`` command."""

import logging

import pytest

from tomlnode.cli import main


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('title = "demo"\n[owner]\nname = "Tom"\n', encoding="utf-8")
    return path


def test_prints_document(config_file, capsys):
    assert main([str(config_file)]) == 0
    out = capsys.readouterr().out
    assert "title = demo\n" in out
    assert "owner = \n\tname = Tom\n" in out


def test_get_value(config_file, capsys):
    assert main([str(config_file), "--get", "owner.name"]) == 0
    assert capsys.readouterr().out == "Tom\n"


def test_get_table(config_file, capsys):
    assert main([str(config_file), "--get", "owner"]) == 0
    assert capsys.readouterr().out == "name = Tom\n"


def test_get_missing_key(config_file, capsys):
    assert main([str(config_file), "--get", "owner.email"]) == 2
    assert "owner.email is not a valid key" in capsys.readouterr().err


def test_parse_error(tmp_path, capsys):
    path = tmp_path / "bad.toml"
    path.write_text("x = [1, 2\n", encoding="utf-8")
    assert main([str(path)]) == 1
    assert "Unclosed array at line 1" in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.toml")]) == 1
    assert "could not be opened for parsing" in capsys.readouterr().err


def test_verbose_enables_debug_logging(config_file, capsys, monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
    assert main([str(config_file), "--verbose"]) == 0
    assert calls and calls[0]["level"] == logging.DEBUG
