"""Integration tests for the github-rest CLI."""

import io
import json

import httpx
import pytest

from github_rest_invoker.auth import token_path
from github_rest_invoker.cli import main
from github_rest_invoker.context import get_config, set_context
from github_rest_invoker.settings import read_config_file


@pytest.fixture(autouse=True)
def _default_context(context):
    set_context(context)
    yield
    set_context(None)


class TestApiCommand:
    def test_prints_the_decoded_body(self, fake_github, capsys):
        fake_github.queue(httpx.Response(200, json={"login": "octocat"}))

        assert main(["api", "users/octocat"]) == 0

        assert json.loads(capsys.readouterr().out) == {"login": "octocat"}
        assert fake_github.requests[0].url.path == "/users/octocat"

    def test_sends_method_body_and_token(self, fake_github, capsys):
        fake_github.queue(httpx.Response(201, json={"number": 1}))

        code = main(["--token", "abc", "api", "repos/o/r/issues", "--method", "post", "--body", '{"title": "Hi"}'])

        assert code == 0
        request = fake_github.requests[0]
        assert request.method == "POST"
        assert request.headers["Authorization"] == "token abc"
        assert json.loads(request.content) == {"title": "Hi"}

    def test_paginates(self, fake_github, capsys):
        next_url = "https://api.github.com/repositories/1/assignees?page=2"
        fake_github.queue(
            httpx.Response(200, json=[1, 2], headers={"Link": f'<{next_url}>; rel="next"'}),
            httpx.Response(200, json=[3]),
        )

        assert main(["api", "repos/o/r/assignees", "--paginate"]) == 0

        assert json.loads(capsys.readouterr().out) == [1, 2, 3]

    def test_reports_api_errors(self, fake_github, capsys):
        fake_github.queue(
            httpx.Response(404, json={"message": "Not Found"}, headers={"X-GitHub-Request-Id": "ABCD:1234"})
        )

        assert main(["api", "repos/o/missing"]) == 1

        err = capsys.readouterr().err
        assert "404" in err
        assert "Not Found" in err
        assert "RequestId: ABCD:1234" in err


class TestResourceCommands:
    def test_rate_limit(self, fake_github, capsys):
        payload = {"resources": {"core": {"limit": 60, "remaining": 59, "reset": 1}}}
        fake_github.queue(httpx.Response(200, json=payload))

        assert main(["rate-limit"]) == 0

        assert json.loads(capsys.readouterr().out) == payload

    def test_markdown(self, fake_github, capsys, tmp_path):
        source = tmp_path / "README.md"
        source.write_text("# Title\n")
        fake_github.queue(httpx.Response(200, html="<h1>Title</h1>"))

        assert main(["markdown", str(source), "--mode", "gfm"]) == 0

        assert capsys.readouterr().out == "<h1>Title</h1>\n"
        assert json.loads(fake_github.requests[0].content)["mode"] == "gfm"

    def test_gitignore_template(self, fake_github, capsys):
        fake_github.queue(httpx.Response(200, text="*.pyc\n"))

        assert main(["gitignore", "Python"]) == 0

        assert capsys.readouterr().out == "*.pyc\n"


class TestConfigCommand:
    def test_set_persists(self, capsys):
        assert main(["config", "set", "retry_delay_seconds", "5"]) == 0

        assert get_config("retry_delay_seconds") == 5
        assert read_config_file() == {"retry_delay_seconds": 5.0}

    def test_set_session_only(self):
        assert main(["config", "set", "default_owner_name", "octocat", "--session-only"]) == 0

        assert get_config("default_owner_name") == "octocat"
        assert read_config_file() == {}

    def test_get_one(self, capsys):
        assert main(["config", "get", "api_host_name"]) == 0

        assert capsys.readouterr().out == "github.com\n"

    def test_get_all_hides_the_token(self, capsys):
        assert main(["config", "get"]) == 0

        values = json.loads(capsys.readouterr().out)
        assert values["api_host_name"] == "github.com"
        assert "github_token" not in values

    def test_unknown_setting(self, capsys):
        assert main(["config", "set", "nope", "1"]) == 2

    def test_reset(self):
        main(["config", "set", "default_owner_name", "octocat"])

        assert main(["config", "reset"]) == 0

        assert get_config("default_owner_name") is None
        assert read_config_file() == {}


class TestTokenCommand:
    def test_status_without_a_token(self, capsys):
        assert main(["token", "status"]) == 0

        assert capsys.readouterr().out == "not configured\n"

    def test_set_stores_the_token_encrypted(self, context, fake_github, capsys):
        assert main(["token", "set", "ghp_stored"]) == 0
        assert main(["token", "status"]) == 0
        assert capsys.readouterr().out == "configured\n"

        assert b"ghp_stored" not in token_path().read_bytes()

        fake_github.queue(httpx.Response(200, json={}))
        main(["api", "emojis"])
        assert fake_github.requests[0].headers["Authorization"] == "token ghp_stored"

    def test_set_reads_stdin(self, context, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("ghp_from_stdin\n"))

        assert main(["token", "set", "-", "--session-only"]) == 0

        assert context.credentials.get_access_token() == "ghp_from_stdin"
        assert not token_path().exists()

    def test_clear(self, capsys):
        main(["token", "set", "ghp_stored"])

        assert main(["token", "clear"]) == 0
        assert main(["token", "status"]) == 0

        assert capsys.readouterr().out == "not configured\n"
        assert not token_path().exists()

    def test_set_rejects_an_empty_token(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("\n"))

        assert main(["token", "set", "-"]) == 2
