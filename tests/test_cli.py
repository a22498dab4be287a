"""Tests for the click command-line interface."""

import json
import time

import pytest
from click.testing import CliRunner

from pocketvault.cli import cli
from pocketvault.errors import EncodingError
from pocketvault.manager import PasswordManager
from pocketvault.storage import FileKeyValueStore

MASTER = "correct-horse-battery"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def store_path(tmp_path):
    return str(tmp_path / "vault.json")


@pytest.fixture
def initialized(runner, store_path):
    result = runner.invoke(cli, ["--store", store_path, "init"], input=f"{MASTER}\n{MASTER}\n")
    assert result.exit_code == 0, result.output
    return store_path


def _add(runner, store_path, title, username="user", password="Secret-pass-1", tags=""):
    args = ["--store", store_path, "add", "--title", title, "--username", username]
    if tags:
        args += ["--tags", tags]
    return runner.invoke(cli, args, input=f"{MASTER}\n{password}\n{password}\n")


class TestInit:

    def test_init_creates_store(self, initialized):
        pm = PasswordManager(FileKeyValueStore(initialized))
        assert pm.has_vault()
        assert pm.unlock(MASTER)

    def test_init_rejects_short_password(self, runner, store_path):
        result = runner.invoke(cli, ["--store", store_path, "init"], input="short\nshort\n")
        assert result.exit_code == 1
        assert "at least 8" in result.output

    def test_commands_need_a_vault(self, runner, store_path):
        result = runner.invoke(cli, ["--store", store_path, "list"])
        assert result.exit_code == 1
        assert "No vault found" in result.output

    def test_reinit_declined_keeps_vault(self, runner, initialized):
        _add(runner, initialized, "GitHub")
        result = runner.invoke(cli, ["--store", initialized, "init"], input="n\n")
        assert result.exit_code == 0, result.output

        pm = PasswordManager(FileKeyValueStore(initialized))
        assert pm.unlock(MASTER)
        assert [e.title for e in pm.entries()] == ["GitHub"]

    def test_reinit_with_short_password_keeps_vault(self, runner, initialized):
        _add(runner, initialized, "GitHub")
        result = runner.invoke(cli, ["--store", initialized, "init"], input="y\nshort\nshort\n")
        assert result.exit_code == 1
        assert "at least 8" in result.output

        pm = PasswordManager(FileKeyValueStore(initialized))
        assert pm.unlock(MASTER)
        assert [e.title for e in pm.entries()] == ["GitHub"]

    def test_reinit_replaces_vault(self, runner, initialized):
        _add(runner, initialized, "GitHub")
        result = runner.invoke(cli, ["--store", initialized, "init"],
                               input="y\nnew-master-pass\nnew-master-pass\n")
        assert result.exit_code == 0, result.output

        pm = PasswordManager(FileKeyValueStore(initialized))
        assert not pm.unlock(MASTER)
        assert pm.unlock("new-master-pass")
        assert pm.entries() == []


class TestEntries:

    def test_add_and_get(self, runner, initialized):
        result = _add(runner, initialized, "GitHub", "octo", tags="dev,work")
        assert result.exit_code == 0, result.output
        assert "Saved 'GitHub'" in result.output

        result = runner.invoke(cli, ["--store", initialized, "get", "github", "--show"], input=f"{MASTER}\n")
        assert result.exit_code == 0, result.output
        assert "octo" in result.output
        assert "Secret-pass-1" in result.output
        assert "dev, work" in result.output

    def test_get_masks_password_by_default(self, runner, initialized):
        _add(runner, initialized, "GitHub")
        result = runner.invoke(cli, ["--store", initialized, "get", "GitHub"], input=f"{MASTER}\n")
        assert "Secret-pass-1" not in result.output
        assert "*" * len("Secret-pass-1") in result.output

    def test_wrong_master_password(self, runner, initialized):
        result = runner.invoke(cli, ["--store", initialized, "list"], input="wrong-password\n")
        assert result.exit_code == 1
        assert "Invalid master password" in result.output

    def test_list_and_filter(self, runner, initialized):
        _add(runner, initialized, "GitHub", tags="dev")
        _add(runner, initialized, "Bank", tags="finance")

        result = runner.invoke(cli, ["--store", initialized, "list"], input=f"{MASTER}\n")
        assert "GitHub" in result.output and "Bank" in result.output
        assert "2 of 2 entries" in result.output

        result = runner.invoke(cli, ["--store", initialized, "list", "--tag", "finance"], input=f"{MASTER}\n")
        assert "Bank" in result.output and "GitHub" not in result.output

    def test_edit(self, runner, initialized):
        _add(runner, initialized, "GitHub", "octo")
        result = runner.invoke(cli, ["--store", initialized, "edit", "GitHub", "--username", "octocat"],
                               input=f"{MASTER}\n")
        assert result.exit_code == 0, result.output

        pm = PasswordManager(FileKeyValueStore(initialized))
        pm.unlock(MASTER)
        assert pm.entries()[0].username == "octocat"

    def test_delete(self, runner, initialized):
        _add(runner, initialized, "GitHub")
        result = runner.invoke(cli, ["--store", initialized, "delete", "GitHub", "--force"], input=f"{MASTER}\n")
        assert result.exit_code == 0, result.output

        pm = PasswordManager(FileKeyValueStore(initialized))
        pm.unlock(MASTER)
        assert pm.entries() == []

    def test_unknown_entry(self, runner, initialized):
        result = runner.invoke(cli, ["--store", initialized, "get", "nothing"], input=f"{MASTER}\n")
        assert result.exit_code == 1
        assert "No entry found" in result.output

    def test_export_json(self, runner, initialized, tmp_path):
        _add(runner, initialized, "GitHub")
        out = tmp_path / "export.json"
        result = runner.invoke(cli, ["--store", initialized, "export", "-o", str(out), "--include-passwords"],
                               input=f"{MASTER}\n")
        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text())["entries"][0]["password"] == "Secret-pass-1"

    def test_passwd(self, runner, initialized):
        result = runner.invoke(cli, ["--store", initialized, "passwd"],
                               input=f"{MASTER}\nnew-master-pass\nnew-master-pass\n")
        assert result.exit_code == 0, result.output

        pm = PasswordManager(FileKeyValueStore(initialized))
        assert not pm.unlock(MASTER)
        assert pm.unlock("new-master-pass")


class TestStoreErrors:

    def test_corrupt_store_is_reported(self, runner, store_path):
        with open(store_path, "w", encoding="utf-8") as f:
            f.write("not json")

        for command in (["get", "GitHub"], ["delete", "GitHub"], ["export"], ["list"], ["passwd"]):
            result = runner.invoke(cli, ["--store", store_path] + command, input=f"{MASTER}\n")
            assert result.exit_code == 1, command
            assert isinstance(result.exception, SystemExit), command
            assert "corrupted" in result.output

    def test_failed_write_is_reported(self, runner, initialized, monkeypatch):
        _add(runner, initialized, "GitHub")

        def failing_delete(self, entry_id):
            raise EncodingError("Store file is corrupted")

        monkeypatch.setattr(PasswordManager, "delete_entry", failing_delete)
        result = runner.invoke(cli, ["--store", initialized, "delete", "GitHub", "--force"], input=f"{MASTER}\n")
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Error: Store file is corrupted" in result.output


class TestClipboard:

    @pytest.fixture
    def clipboard(self, monkeypatch):
        pyperclip = pytest.importorskip("pyperclip")
        contents = {"text": ""}
        monkeypatch.setattr(pyperclip, "copy", lambda text: contents.update(text=text))
        monkeypatch.setattr(pyperclip, "paste", lambda: contents["text"])
        return contents

    def test_copy_waits_then_clears(self, runner, initialized, clipboard, monkeypatch):
        _add(runner, initialized, "GitHub")
        waits = []

        def fake_sleep(seconds):
            waits.append(seconds)
            assert clipboard["text"] == "Secret-pass-1"

        monkeypatch.setattr(time, "sleep", fake_sleep)
        result = runner.invoke(cli, ["--store", initialized, "get", "GitHub", "--copy"], input=f"{MASTER}\n")
        assert result.exit_code == 0, result.output
        assert waits == [30]
        assert clipboard["text"] == ""
        assert "Clipboard cleared" in result.output

    def test_interrupt_clears_immediately(self, runner, initialized, clipboard, monkeypatch):
        _add(runner, initialized, "GitHub")

        def interrupted_sleep(seconds):
            raise KeyboardInterrupt

        monkeypatch.setattr(time, "sleep", interrupted_sleep)
        result = runner.invoke(cli, ["--store", initialized, "get", "GitHub", "--copy", "--clear-after", "5"],
                               input=f"{MASTER}\n")
        assert result.exit_code == 0, result.output
        assert "Clearing in 5 seconds" in result.output
        assert clipboard["text"] == ""

    def test_clear_after_zero_keeps_clipboard(self, runner, initialized, clipboard):
        _add(runner, initialized, "GitHub")
        result = runner.invoke(cli, ["--store", initialized, "get", "GitHub", "--copy", "--clear-after", "0"],
                               input=f"{MASTER}\n")
        assert result.exit_code == 0, result.output
        assert clipboard["text"] == "Secret-pass-1"


class TestUtilities:

    def test_generate(self, runner):
        result = runner.invoke(cli, ["generate", "--length", "20", "--count", "3"])
        assert result.exit_code == 0, result.output
        lines = [l for l in result.output.splitlines() if l[:2] in ("1.", "2.", "3.")]
        assert len(lines) == 3
        assert all(len(l.split(" ", 1)[1]) == 20 for l in lines)

    def test_generate_unsatisfiable(self, runner):
        result = runner.invoke(cli, ["generate", "--length", "3"])
        assert result.exit_code == 1
        assert "too short" in result.output

    def test_strength(self, runner):
        result = runner.invoke(cli, ["strength", "aaaaaaaa"])
        assert result.exit_code == 0
        assert "Weak" in result.output
