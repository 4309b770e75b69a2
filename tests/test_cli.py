"""Tests for the rotalabs-matrix command-line entry point."""

import json

import pytest

from rotalabs_matrix.cli import build_parser, main, run

CONDITIONS = {
    "dev-config": {
        "conditions": [{"field": "env.DEPLOY_ENV", "op": "=", "value": "dev"}],
        "outputs": {"account": "123456"},
    },
    "prod-config": {
        "conditions": [{"field": "env.DEPLOY_ENV", "op": "=", "value": "prod"}],
        "outputs": {"account": "789012"},
    },
}


class TestRun:
    """Tests for the load-evaluate-build pipeline."""

    def test_matched(self):
        """Test a matching rule produces a one-record matrix."""
        matrix = run(None, json.dumps(CONDITIONS), {"DEPLOY_ENV": "dev"})
        assert matrix == {"include": [{"account": "123456"}]}

    def test_unmatched(self):
        """Test no match produces an empty matrix."""
        matrix = run(None, json.dumps(CONDITIONS), {"DEPLOY_ENV": "qa"})
        assert matrix == {"include": []}


class TestMain:
    """Tests for main()."""

    def test_writes_github_output(self, tmp_path):
        """Test the matrix is appended to the output file."""
        conditions_path = tmp_path / "conditions.json"
        conditions_path.write_text(json.dumps(CONDITIONS), encoding="utf-8")
        output_path = tmp_path / "output"
        environ = {
            "INPUT_CONDITIONS-FILE": str(conditions_path),
            "GITHUB_OUTPUT": str(output_path),
            "DEPLOY_ENV": "prod",
        }

        assert main([], environ=environ) == 0

        assert output_path.read_text(encoding="utf-8") == 'matrix={"include": [{"account": "789012"}]}\n'

    def test_prints_without_output_file(self, capsys):
        """Test the matrix is printed when no output file is configured."""
        exit_code = main(["--conditions-json", json.dumps(CONDITIONS)], environ={"DEPLOY_ENV": "dev"})

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == {"include": [{"account": "123456"}]}

    def test_yaml_date_outputs(self, tmp_path, caplog):
        """Test YAML date scalars in outputs are written as strings, with debug logging on."""
        conditions_path = tmp_path / "conditions.yml"
        conditions_path.write_text(
            "release:\n  conditions: []\n  outputs:\n    released: 2024-01-01\n",
            encoding="utf-8",
        )
        output_path = tmp_path / "output"

        with caplog.at_level("DEBUG"):
            exit_code = main(
                ["-f", str(conditions_path), "-o", str(output_path), "--debug"],
                environ={},
            )

        assert exit_code == 0
        assert output_path.read_text(encoding="utf-8") == 'matrix={"include": [{"released": "2024-01-01"}]}\n'

    def test_configuration_error_fails(self, caplog):
        """Test configuration errors are reported and exit with status 1."""
        bad = {"broken": {"outputs": {"a": 1}}}

        exit_code = main(["--conditions-json", json.dumps(bad)], environ={})

        assert exit_code == 1
        assert "Action failed: Condition \"broken\" must have either" in caplog.text

    def test_missing_inputs_fail(self, caplog):
        """Test running without any conditions source fails."""
        assert main([], environ={}) == 1
        assert "Either conditions-file or conditions-json must be provided" in caplog.text

    def test_debug_from_runner(self):
        """Test RUNNER_DEBUG enables debug logging by default."""
        args = build_parser({"RUNNER_DEBUG": "1"}).parse_args([])
        assert args.debug is True

    def test_version(self, capsys):
        """Test --version prints the package version."""
        with pytest.raises(SystemExit):
            main(["--version"], environ={})
        assert "rotalabs-matrix" in capsys.readouterr().out
