"""
Tests for the shorturl command-line interface.
"""
import asyncio
import io

import pytest

from shorturl_app import cli
from shorturl_app.storage import RedisStore


def run_command(argv, store):
    """Parse argv and run it against the given store, capturing output"""
    out, err = io.StringIO(), io.StringIO()
    args = cli.build_parser().parse_args(argv)
    code = asyncio.run(cli.run(args, store=store, out=out, err=err))
    return code, out.getvalue(), err.getvalue()


class TestCreateCommand:
    """Test `shorturl create`"""

    def test_create(self, memory_store):
        code, out, err = run_command(
            ["create", "-p", "abc", "-d", "https://x.com"], memory_store
        )

        assert code == 0
        assert out.strip() == "Shortened URL created."
        assert err == ""
        assert asyncio.run(memory_store.get("abc")).destination == "https://x.com"

    def test_create_strips_slashes(self, memory_store):
        code, _, _ = run_command(
            ["create", "--path", "/abc/", "--destination-url", "https://x.com"], memory_store
        )

        assert code == 0
        assert asyncio.run(memory_store.exists("abc"))

    def test_create_duplicate(self, memory_store):
        run_command(["create", "-p", "abc", "-d", "https://x.com"], memory_store)
        code, out, err = run_command(["create", "-p", "abc", "-d", "https://y.com"], memory_store)

        assert code == 4
        assert out == ""
        assert "already exists" in err
        assert asyncio.run(memory_store.get("abc")).destination == "https://x.com"

    def test_create_invalid_input(self, memory_store):
        code, out, err = run_command(
            ["create", "-p", "bad-path", "-d", "not a url"], memory_store
        )

        assert code == 3
        assert "path: Path can only contain alphanumeric characters and underscores." in err
        assert "destination: Destination has to be a valid absolute URL." in err
        assert asyncio.run(memory_store.exists("bad-path")) is False

    def test_create_store_down(self, fake_redis):
        fake_redis.fail = True
        code, _, err = run_command(
            ["create", "-p", "abc", "-d", "https://x.com"], RedisStore(fake_redis)
        )

        assert code == 6
        assert "Failed to create shortened URL." in err


class TestGetCommand:
    """Test `shorturl get`"""

    def test_get(self, memory_store):
        run_command(["create", "-p", "abc", "-d", "https://x.com"], memory_store)
        code, out, _ = run_command(["get", "-p", "abc"], memory_store)

        assert code == 0
        assert out.strip() == "Destination URL: https://x.com, Path: abc"

    def test_get_missing(self, memory_store):
        code, out, err = run_command(["get", "-p", "abc"], memory_store)

        assert code == 5
        assert out == ""
        assert err.strip() == "Shortened URL for path 'abc' not found."

    def test_get_invalid_path(self, memory_store):
        code, _, err = run_command(["get", "-p", "abcdefghijk"], memory_store)

        assert code == 3
        assert "Path cannot be longer than 10 characters." in err


class TestDeleteCommand:
    """Test `shorturl delete`"""

    def test_delete(self, memory_store):
        run_command(["create", "-p", "abc", "-d", "https://x.com"], memory_store)
        code, out, _ = run_command(["delete", "-p", "abc"], memory_store)

        assert code == 0
        assert out.strip() == "Shortened URL deleted."
        assert asyncio.run(memory_store.exists("abc")) is False

    def test_delete_missing(self, memory_store):
        code, _, err = run_command(["delete", "-p", "abc"], memory_store)

        assert code == 5
        assert "not found" in err


class TestListCommand:
    """Test `shorturl list`"""

    def test_list(self, store):
        for path in ["a", "b", "c"]:
            run_command(["create", "-p", path, "-d", f"https://x.com/{path}"], store)

        code, out, _ = run_command(["list", "--page-size", "2"], store)

        assert code == 0
        assert sorted(out.strip().splitlines()) == [
            "Destination URL: https://x.com/a, Path: a",
            "Destination URL: https://x.com/b, Path: b",
            "Destination URL: https://x.com/c, Path: c",
        ]

    def test_list_empty(self, memory_store):
        code, out, _ = run_command(["list"], memory_store)

        assert code == 0
        assert out == ""


class TestConnection:
    """Connection target resolution and startup errors"""

    def test_missing_connection_string(self, monkeypatch):
        monkeypatch.delenv(cli.CONNECTION_STRING_ENV, raising=False)
        monkeypatch.delenv(cli.BACKEND_ENV, raising=False)
        out, err = io.StringIO(), io.StringIO()
        args = cli.build_parser().parse_args(["list"])

        code = asyncio.run(cli.run(args, out=out, err=err))

        assert code == 7
        assert "Missing connection string" in err.getvalue()

    @pytest.mark.parametrize(
        "backend, connection_string",
        [("sql", "not-a-db-url"), ("redis", "localhost:6379")],
    )
    def test_malformed_connection_string(self, backend, connection_string):
        out, err = io.StringIO(), io.StringIO()
        args = cli.build_parser().parse_args(
            ["list", "-b", backend, "-c", connection_string]
        )

        code = asyncio.run(cli.run(args, out=out, err=err))

        assert code == 7
        assert f"Invalid connection string for '{backend}' store" in err.getvalue()
        assert out.getvalue() == ""

    def test_connection_string_from_environment(self, monkeypatch):
        monkeypatch.setenv(cli.CONNECTION_STRING_ENV, "redis://cache:6379/1")
        args = cli.build_parser().parse_args(["list"])

        assert args.connection_string == "redis://cache:6379/1"
        assert args.backend == "redis"

    def test_explicit_connection_string_wins(self, monkeypatch):
        monkeypatch.setenv(cli.CONNECTION_STRING_ENV, "redis://cache:6379/1")
        args = cli.build_parser().parse_args(["get", "-p", "abc", "-c", "redis://other:6379/0"])

        assert args.connection_string == "redis://other:6379/0"

    def test_sql_backend_end_to_end(self, tmp_path):
        """Without an injected store the CLI builds one from the arguments"""
        database = f"sqlite:///{tmp_path / 'cli.db'}"
        common = ["-b", "sql", "-c", database]

        assert cli.main(["create", "-p", "abc", "-d", "https://x.com"] + common) == 0
        assert cli.main(["get", "-p", "abc"] + common) == 0
        assert cli.main(["delete", "-p", "abc"] + common) == 0
        assert cli.main(["get", "-p", "abc"] + common) == 5

    def test_no_command_prints_help(self, capsys):
        assert cli.main([]) == 2
        assert "Manage the shortened URLs." in capsys.readouterr().out

    def test_missing_required_option(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["create", "-p", "abc"])
        assert exc_info.value.code == 2

