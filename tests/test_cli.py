"""End-to-end CLI tests with a fake cluster adapter.

Verifies that:
- a missing `-e` always exits 1 with usage and no external calls
- unknown flags, `-h` and unknown subcommands exit 1 with usage
- each subcommand reaches the adapter with the documented pod defaults
- adapter failures exit 1 and stop the remaining steps
"""

from __future__ import annotations

import io

import pytest

from cli.main import app, run
from conftest import FakeCluster
from core.errors import ConfigurationError

INDEX_COMMAND = "./scripts/rebuildSearchIndex.sh"


def run_cli(argv, capsys):
    """Call `run()` and return (exit_code, output)."""
    with pytest.raises(SystemExit) as excinfo:
        run(argv)
    captured = capsys.readouterr()
    return excinfo.value.code, captured.out + captured.err


# ---------------------------------------------------------------------------
# Usage errors
# ---------------------------------------------------------------------------


class TestUsageErrors:

    @pytest.mark.parametrize(
        "argv",
        [
            ["hardReset"],
            ["resetDatabase", "django", "postgresql"],
            ["-x", "-p", "orgbook", "registerDids"],
            ["-l", "-P", "rebuildSearchIndex"],
            [],
        ],
    )
    def test_missing_environment(self, argv, cli_runner, patched_cli, fake_cluster):
        result = cli_runner.invoke(app, argv)

        assert result.exit_code == 1
        assert "-e" in result.output
        assert "Usage: manage" in result.output
        assert patched_cli == []
        assert fake_cluster.calls == []

    def test_missing_environment_through_run(self, capsys, patched_cli, fake_cluster):
        code, output = run_cli(["hardReset"], capsys)
        assert code == 1
        assert "Usage: manage" in output
        assert fake_cluster.calls == []

    def test_unknown_flag_exits_one(self, capsys, patched_cli, fake_cluster):
        code, output = run_cli(["-e", "dev", "-z", "resetDatabase"], capsys)
        assert code == 1
        assert "Usage: manage" in output
        assert fake_cluster.calls == []

    def test_unknown_flag_without_environment(self, capsys, patched_cli):
        code, output = run_cli(["-q"], capsys)
        assert code == 1
        assert "Usage: manage" in output

    def test_option_without_value(self, capsys, patched_cli):
        code, _ = run_cli(["-e"], capsys)
        assert code == 1

    @pytest.mark.parametrize("argv", [["-h"], ["--help"], ["-e", "dev", "-h", "resetDatabase"]])
    def test_help_exits_one(self, argv, capsys, patched_cli, fake_cluster):
        code, output = run_cli(argv, capsys)
        assert code == 1
        assert "resetDatabase" in output
        assert "hardReset" in output
        assert fake_cluster.calls == []

    def test_unknown_subcommand(self, cli_runner, patched_cli, fake_cluster):
        result = cli_runner.invoke(app, ["-e", "dev", "frobnicate"])

        assert result.exit_code == 1
        assert "Unrecognized command: frobnicate" in result.output
        assert "Usage: manage" in result.output
        assert patched_cli == []
        assert fake_cluster.calls == []

    def test_missing_subcommand(self, cli_runner, patched_cli, fake_cluster):
        result = cli_runner.invoke(app, ["-e", "dev"])
        assert result.exit_code == 1
        assert fake_cluster.calls == []

    def test_empty_pod_name(self, cli_runner, patched_cli, fake_cluster):
        result = cli_runner.invoke(app, ["-e", "dev", "resetDatabase", "", "postgresql"])
        assert result.exit_code == 1
        assert "api_pod" in result.output
        assert fake_cluster.calls == []


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


class TestResetDatabaseCommand:

    def test_defaults(self, cli_runner, patched_cli, fake_cluster):
        result = cli_runner.invoke(app, ["-e", "test", "resetDatabase"])

        assert result.exit_code == 0, result.output
        assert fake_cluster.calls == [
            ("switch_project",),
            ("drop_and_recreate_database", "django", "postgresql"),
            ("run_in_pod", "django", INDEX_COMMAND, True),
        ]
        options, _ = patched_cli[0]
        assert options.environment == "test"
        assert "database has been reset" in result.output

    @pytest.mark.parametrize("name", ["RESETDATABASE", "ResetDatabase", "resetdatabase"])
    def test_case_insensitive(self, name, cli_runner, patched_cli, fake_cluster):
        result = cli_runner.invoke(app, ["-e", "dev", name])
        assert result.exit_code == 0, result.output
        assert fake_cluster.names() == ["switch_project", "drop_and_recreate_database", "run_in_pod"]

    def test_overrides(self, cli_runner, patched_cli, fake_cluster):
        result = cli_runner.invoke(app, ["-e", "dev", "resetDatabase", "api", "db"])
        assert result.exit_code == 0, result.output
        assert ("drop_and_recreate_database", "api", "db") in fake_cluster.calls

    def test_flags_reach_options(self, cli_runner, patched_cli):
        result = cli_runner.invoke(app, ["-e", "prod", "-p", "orgbook", "-P", "-l", "resetDatabase"])
        assert result.exit_code == 0, result.output
        options, _ = patched_cli[0]
        assert options.profile == "orgbook"
        assert options.ignore_profiles is True
        assert options.apply_local_settings is True
        assert options.debug is False

    def test_database_failure_exits_one(self, cli_runner, monkeypatch, isolated_settings):
        import cli.main

        cluster = FakeCluster(fail_on=["drop_and_recreate_database"])
        monkeypatch.setattr(cli.main, "build_cluster_adapter", lambda options, settings: cluster)

        result = cli_runner.invoke(app, ["-e", "test", "resetDatabase"])

        assert result.exit_code == 1
        assert "drop_and_recreate_database failed" in result.output
        assert cluster.names() == ["switch_project", "drop_and_recreate_database"]


class TestRebuildSearchIndexCommand:

    def test_custom_pod(self, cli_runner, patched_cli, fake_cluster):
        result = cli_runner.invoke(app, ["-e", "dev", "rebuildSearchIndex", "myapi"])

        assert result.exit_code == 0, result.output
        assert fake_cluster.calls == [
            ("switch_project",),
            ("run_in_pod", "myapi", INDEX_COMMAND, True),
        ]

    def test_failure_exits_one(self, cli_runner, monkeypatch, isolated_settings):
        import cli.main

        cluster = FakeCluster(fail_on=["run_in_pod"])
        monkeypatch.setattr(cli.main, "build_cluster_adapter", lambda options, settings: cluster)

        result = cli_runner.invoke(app, ["-e", "dev", "rebuildSearchIndex", "myapi"])
        assert result.exit_code == 1
        assert cluster.names() == ["switch_project", "run_in_pod"]

    def test_index_command_from_settings(self, cli_runner, patched_cli, fake_cluster, isolated_settings):
        (isolated_settings / "settings.env").write_text("SEARCH_INDEX_COMMAND=./reindex.sh\n")

        result = cli_runner.invoke(app, ["-e", "dev", "rebuildSearchIndex"])

        assert result.exit_code == 0, result.output
        assert fake_cluster.calls[-1] == ("run_in_pod", "django", "./reindex.sh", True)


class TestHardResetCommand:

    def test_confirmations_then_all_steps(self, cli_runner, patched_cli, fake_cluster):
        result = cli_runner.invoke(app, ["-e", "dev", "hardReset"], input="\n\n")

        assert result.exit_code == 0, result.output
        assert fake_cluster.calls == [
            ("switch_project",),
            ("drop_and_recreate_database", "wallet", "wallet-db"),
            ("drop_and_recreate_database", "django", "postgresql"),
            ("run_in_pod", "django", INDEX_COMMAND, True),
            ("register_dids", ["the_org_book", "the_org_book_on"]),
        ]
        assert result.output.count("Press Enter to continue") == 2
        assert "scale the dependent pods back up" in result.output

    def test_abort_at_first_prompt(self, cli_runner, patched_cli, fake_cluster):
        result = cli_runner.invoke(app, ["-e", "dev", "hardReset"], input="")

        assert result.exit_code == 1
        assert fake_cluster.calls == []

    def test_eof_at_prompt_through_run(self, capsys, monkeypatch, patched_cli, fake_cluster):
        monkeypatch.setattr("sys.stdin", io.StringIO(""))

        code, output = run_cli(["-e", "dev", "hardReset"], capsys)

        assert code == 1
        assert "Aborted" in output
        assert fake_cluster.calls == []

    def test_eof_at_second_prompt_stops_before_dids(self, capsys, monkeypatch, patched_cli, fake_cluster):
        monkeypatch.setattr("sys.stdin", io.StringIO("\n"))

        code, _ = run_cli(["-e", "dev", "hardReset"], capsys)

        assert code == 1
        assert "register_dids" not in fake_cluster.names()
        assert fake_cluster.names()[-1] == "run_in_pod"


class TestRegisterDidsCommand:

    def test_fixed_names(self, cli_runner, patched_cli, fake_cluster):
        result = cli_runner.invoke(app, ["-e", "dev", "registerDids"])

        assert result.exit_code == 0, result.output
        assert fake_cluster.calls == [("register_dids", ["the_org_book", "the_org_book_on"])]


class TestAdapterConfiguration:

    def test_configuration_error_before_dispatch(self, cli_runner, monkeypatch, isolated_settings):
        import cli.main

        def missing_oc(options, settings):
            raise ConfigurationError("'oc' was not found.")

        monkeypatch.setattr(cli.main, "build_cluster_adapter", missing_oc)

        result = cli_runner.invoke(app, ["-e", "dev", "resetDatabase"])
        assert result.exit_code == 1
        assert "'oc' was not found." in result.output

    def test_invalid_settings_exit_one_before_dispatch(self, capsys, patched_cli, fake_cluster, isolated_settings):
        (isolated_settings / "settings.env").write_text("WAIT_TIMEOUT_SECONDS=0\n")

        code, output = run_cli(["-e", "dev", "registerDids"], capsys)

        assert code == 1
        assert "WAIT_TIMEOUT_SECONDS" in output
        assert patched_cli == []
        assert fake_cluster.calls == []

    def test_successful_run_returns_normally(self, patched_cli, fake_cluster):
        run(["-e", "dev", "registerDids"])
        assert fake_cluster.names() == ["register_dids"]
