"""
Tests for the command line workflow.
"""

import json

import pytest

from pingone_forms import FormSummary, PingOneAuthenticationError, PingOneConflictError
from pingone_forms import cli
from pingone_forms.prompts import Prompter

ENVIRONMENTS = [
    {
        "name": "Dev US",
        "envId": "11111111-2222-3333-4444-555555555555",
        "clientId": "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee",
        "clientSecret": "s3cret",
        "tld": "com",
    },
    {
        "name": "Prod EU",
        "envId": "66666666-7777-8888-9999-000000000000",
        "clientId": "ffffffff-eeee-dddd-cccc-bbbbbbbbbbbb",
        "clientSecret": "other-secret",
        "tld": "eu",
    },
]


class StubManager:
    def __init__(self, forms=(), bodies=None, list_error=None, upload_errors=None):
        self.forms = list(forms)
        self.bodies = bodies or {}
        self.list_error = list_error
        self.upload_errors = upload_errors or {}
        self.environments = []
        self.uploads = []

    def list_forms(self, environment):
        self.environments.append(environment.name)
        if self.list_error:
            raise self.list_error
        return self.forms

    def download_form(self, environment, form_id):
        return self.bodies[form_id]

    def upload_form(self, environment, form_data):
        self.environments.append(environment.name)
        self.uploads.append(form_data)
        if form_data["name"] in self.upload_errors:
            raise self.upload_errors[form_data["name"]]
        return form_data


def scripted(*answers):
    answers = list(answers)
    return Prompter(input_func=lambda prompt: answers.pop(0), output=lambda line: None)


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    for var in ("PINGONE_FORMS_ENVIRONMENTS", "PINGONE_FORMS_DIR", "PINGONE_FORMS_LOG_FILE"):
        monkeypatch.delenv(var, raising=False)
    config = tmp_path / "environments.json"
    config.write_text(json.dumps(ENVIRONMENTS), encoding="utf-8")
    return tmp_path


def parse(workspace, *argv):
    return cli.build_parser().parse_args(
        [*argv, "--config", str(workspace / "environments.json"), "--forms-dir", str(workspace / "forms")]
    )


class TestParser:
    """Test suite for argument parsing."""

    def test_defaults(self):
        args = cli.build_parser().parse_args([])
        assert args.mode is None
        assert args.environment is None
        assert args.verbose is False

    def test_all_options(self):
        args = cli.build_parser().parse_args(
            ["import", "--env", "Prod EU", "--config", "envs.yaml", "--forms-dir", "out", "--log-file", "run.log", "-v"]
        )
        assert args.mode == "import"
        assert args.environment == "Prod EU"
        assert args.config == "envs.yaml"
        assert args.forms_dir == "out"
        assert args.log_file == "run.log"
        assert args.verbose is True

    def test_rejects_unknown_mode(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["sync"])


class TestExport:
    """Test suite for the export workflow."""

    def test_export_selected_forms(self, workspace, capsys):
        manager = StubManager(
            forms=[FormSummary("f-1", "Login"), FormSummary("f-2", "Sign Up")],
            bodies={"f-2": {"id": "f-2", "name": "Sign Up", "created": "x", "components": {}}},
        )

        # environment 1 is "Dev US" (sorted by name), then form 2
        code = cli.run(parse(workspace, "export"), prompter=scripted("1", "2"), manager=manager)

        assert code == 0
        assert manager.environments == ["Dev US"]
        saved = json.loads((workspace / "forms" / "sign-up.json").read_text(encoding="utf-8"))
        assert saved == {"name": "Sign Up", "components": {}}
        assert "Export Complete" in capsys.readouterr().out

    def test_export_with_env_flag(self, workspace):
        manager = StubManager(forms=[])

        code = cli.run(parse(workspace, "export", "--env", "Prod EU"), prompter=scripted(), manager=manager)

        assert code == 0
        assert manager.environments == ["Prod EU"]

    def test_no_forms(self, workspace, capsys):
        code = cli.run(parse(workspace, "export", "--env", "Dev US"), prompter=scripted(), manager=StubManager())

        assert code == 0
        assert "No forms found" in capsys.readouterr().out

    def test_listing_failure(self, workspace, capsys):
        manager = StubManager(list_error=PingOneAuthenticationError("Authentication failed for Dev US: Invalid client credentials"))

        code = cli.run(parse(workspace, "export", "--env", "Dev US"), prompter=scripted(), manager=manager)

        assert code == 1
        assert "✗ Error: Authentication failed for Dev US" in capsys.readouterr().out


class TestImport:
    """Test suite for the import workflow."""

    def write_forms(self, workspace, forms):
        directory = workspace / "forms"
        directory.mkdir()
        for filename, body in forms.items():
            (directory / filename).write_text(json.dumps(body), encoding="utf-8")

    def test_import_with_renamed_form(self, workspace):
        self.write_forms(workspace, {"login.json": {"name": "Login", "components": {}}})
        manager = StubManager()

        code = cli.run(
            parse(workspace, "import", "--env", "Prod EU"),
            prompter=scripted("all", "Login v2"),
            manager=manager,
        )

        assert code == 0
        assert manager.uploads == [{"name": "Login v2", "components": {}}]
        assert manager.environments == ["Prod EU"]

    def test_partial_failure_exit_code(self, workspace, capsys):
        self.write_forms(workspace, {"a.json": {"name": "A"}, "b.json": {"name": "B"}})
        manager = StubManager(upload_errors={"A": PingOneConflictError('Form "A" already exists in Prod EU')})

        code = cli.run(
            parse(workspace, "import", "--env", "Prod EU"),
            prompter=scripted("1-2", "", ""),
            manager=manager,
        )

        assert code == 1
        assert [upload["name"] for upload in manager.uploads] == ["A", "B"]
        out = capsys.readouterr().out
        assert '✗ a.json: Form "A" already exists in Prod EU' in out
        assert "✓ b.json → B" in out

    def test_empty_directory(self, workspace, capsys):
        manager = StubManager()

        code = cli.run(parse(workspace, "import", "--env", "Dev US"), prompter=scripted(), manager=manager)

        assert code == 0
        assert manager.uploads == []
        assert "No JSON files found" in capsys.readouterr().out


class TestConfigurationErrors:
    """Test suite for startup failures."""

    def test_missing_environments_file(self, tmp_path, capsys):
        args = cli.build_parser().parse_args(["export", "--config", str(tmp_path / "nope.json")])

        assert cli.run(args, prompter=scripted(), manager=StubManager()) == 1
        assert "✗ Configuration error: Missing environments file" in capsys.readouterr().out

    def test_unknown_environment(self, workspace, capsys):
        code = cli.run(parse(workspace, "export", "--env", "Staging"), prompter=scripted(), manager=StubManager())

        assert code == 1
        assert "Unknown environment: Staging. Available: Dev US, Prod EU" in capsys.readouterr().out

    def test_empty_environment_list(self, workspace, capsys):
        (workspace / "environments.json").write_text("[]", encoding="utf-8")

        assert cli.run(parse(workspace, "export"), prompter=scripted(), manager=StubManager()) == 1
        assert "No environments found" in capsys.readouterr().out


class TestMain:
    """Test suite for the entry point."""

    @pytest.fixture(autouse=True)
    def no_logging_setup(self, monkeypatch):
        monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
        monkeypatch.setattr(cli, "use_system_collation", lambda: None)

    def test_keyboard_interrupt(self, monkeypatch, capsys):
        def interrupted(args):
            raise KeyboardInterrupt

        monkeypatch.setattr(cli, "run", interrupted)

        assert cli.main(["export"]) == 130
        assert "Aborted." in capsys.readouterr().out

    def test_closed_input(self, monkeypatch):
        def closed(args):
            raise EOFError

        monkeypatch.setattr(cli, "run", closed)

        assert cli.main(["import"]) == 1

    def test_returns_run_exit_code(self, monkeypatch):
        monkeypatch.setattr(cli, "run", lambda args: 0)
        assert cli.main([]) == 0


class TestCollation:
    """Test suite for locale setup."""

    def test_uses_operator_locale(self, monkeypatch):
        calls = []
        monkeypatch.setattr(cli.locale, "setlocale", lambda category, value: calls.append((category, value)))

        cli.use_system_collation()

        assert calls == [(cli.locale.LC_COLLATE, "")]

    def test_unsupported_locale_keeps_default(self, monkeypatch):
        def unsupported(category, value):
            raise cli.locale.Error("unsupported locale setting")

        monkeypatch.setattr(cli.locale, "setlocale", unsupported)

        cli.use_system_collation()
