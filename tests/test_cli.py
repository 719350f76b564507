"""Tests for formforge CLI commands."""

import json

import pytest
from click.testing import CliRunner

from formforge.cli import cli

FORM = """\
form: signup
rules:
  email:
    - required: true
      message: Email is required
    - type: email
fields:
  - name: email
  - name: age
    rules:
      type: integer
      min: 18
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def forms_dir(tmp_path):
    forms = tmp_path / "forms"
    forms.mkdir()
    (forms / "signup.yaml").write_text(FORM)
    return forms


class TestCheck:
    def test_check_directory(self, runner, forms_dir):
        result = runner.invoke(cli, ["check", str(forms_dir)])
        assert result.exit_code == 0
        assert "All form definitions are valid" in result.output

    def test_check_uses_env_path(self, runner, forms_dir, monkeypatch):
        monkeypatch.setenv("FORMFORGE_FORMS_PATH", str(forms_dir))
        result = runner.invoke(cli, ["check"])
        assert result.exit_code == 0

    def test_check_missing_default_dir(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv("FORMFORGE_FORMS_PATH", str(tmp_path / "none"))
        result = runner.invoke(cli, ["check"])
        assert result.exit_code == 1

    def test_check_reports_errors(self, runner, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("fields: []\n")
        result = runner.invoke(cli, ["check", str(bad)])
        assert result.exit_code == 1
        assert "'form' is a required property" in result.output

    def test_strict_fails_on_warnings(self, runner, tmp_path):
        form = tmp_path / "dup.yaml"
        form.write_text("form: x\nfields:\n  - name: a\n  - name: a\n")
        assert runner.invoke(cli, ["check", str(form)]).exit_code == 0
        assert runner.invoke(cli, ["check", "--strict", str(form)]).exit_code == 1


class TestValidate:
    def test_valid_record(self, runner, forms_dir, tmp_path):
        record = tmp_path / "record.json"
        record.write_text(json.dumps({"email": "a@b.com", "age": 30}))

        result = runner.invoke(cli, ["validate", str(forms_dir / "signup.yaml"), str(record)])

        assert result.exit_code == 0
        assert "Form 'signup' is valid" in result.output

    def test_invalid_record(self, runner, forms_dir, tmp_path):
        record = tmp_path / "record.yaml"
        record.write_text("email: nope\nage: 12\n")

        result = runner.invoke(cli, ["validate", str(forms_dir / "signup.yaml"), str(record)])

        assert result.exit_code == 1
        assert "email: email is not a valid email" in result.output
        assert "age: age must be at least 18" in result.output
        assert "2 field(s) invalid" in result.output

    def test_json_output(self, runner, forms_dir, tmp_path):
        record = tmp_path / "record.json"
        record.write_text(json.dumps({"age": 20}))

        result = runner.invoke(
            cli, ["validate", "--json", str(forms_dir / "signup.yaml"), str(record)]
        )

        assert result.exit_code == 1
        payload = json.loads(result.output)
        assert payload["valid"] is False
        assert payload["errors"][0]["message"] == "Email is required"

    def test_record_must_be_mapping(self, runner, forms_dir, tmp_path):
        record = tmp_path / "record.json"
        record.write_text("[1, 2]")
        result = runner.invoke(cli, ["validate", str(forms_dir / "signup.yaml"), str(record)])
        assert result.exit_code == 1
