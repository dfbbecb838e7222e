import json

from click.testing import CliRunner
import pytest

from maintain import commands, exceptions
from maintain.procedures import kinds


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def emitted(tmp_path):
    output_file = tmp_path / "output.json"

    def read():
        return json.loads(output_file.read_text())

    read.path = str(output_file)
    return read


@pytest.fixture
def fake_registry(monkeypatch, procedures):
    monkeypatch.setattr("maintain.scenarios.global_registry", procedures)
    return procedures


def test_scenarios_lists_builtins(runner, emitted):
    result = runner.invoke(commands.cli, ["--output-file", emitted.path, "scenarios"])
    assert result.exit_code == 0, result.output
    listed = {row["scenario"]: row for row in emitted()["scenarios"]}
    assert listed["backup"]["run strategy"] == "fail_fast"
    assert listed["backup-rescue-cleanup"]["run strategy"] == "fail_slow"


def test_params_shows_declarations(runner, emitted):
    result = runner.invoke(commands.cli, ["--output-file", emitted.path, "params", "backup"])
    assert result.exit_code == 0, result.output
    names = [spec["name"] for spec in emitted()["params"]]
    assert names[:2] == ["strategy", "backup_dir"]
    assert "tar_volume_size" in names


def test_plan_online(runner, emitted):
    result = runner.invoke(
        commands.cli,
        [
            "--output-file",
            emitted.path,
            "plan",
            "backup",
            "--strategy",
            "online",
            "--backup-dir",
            "/var/backup",
            "--proxy-features",
            "tftp,dns",
        ],
    )
    assert result.exit_code == 0, result.output
    steps = emitted()["steps"]
    assert steps[0]["kind"] == kinds.BACKUP_SAFETY_CONFIRMATION
    assert steps[-1]["kind"] == kinds.BACKUP_COMPRESS_DATA
    config_files = next(step for step in steps if step["kind"] == kinds.BACKUP_CONFIG_FILES)
    assert config_files["bound_parameters"] == {
        "backup_dir": "/var/backup",
        "proxy_features": ["tftp", "dns"],
    }


def test_plan_from_args_file(runner, emitted, tmp_path):
    args_file = tmp_path / "backup.yaml"
    args_file.write_text("strategy: offline\nbackup_dir: /var/backup\n")
    result = runner.invoke(
        commands.cli,
        ["--output-file", emitted.path, "plan", "backup", "--args-file", str(args_file)],
    )
    assert result.exit_code == 0, result.output
    assert kinds.SERVICE_STOP in [step["kind"] for step in emitted()["steps"]]


def test_plan_unsupported_strategy(runner):
    result = runner.invoke(
        commands.cli, ["plan", "backup", "--strategy", "snapshot", "--backup-dir", "/x"]
    )
    assert isinstance(result.exception, exceptions.UnsupportedStrategyError)


def test_plan_missing_parameter(runner):
    result = runner.invoke(commands.cli, ["plan", "backup", "--strategy", "online"])
    assert isinstance(result.exception, exceptions.MissingParameterError)


def test_run_success(runner, emitted, fake_registry, journal):
    result = runner.invoke(
        commands.cli,
        [
            "--output-file",
            emitted.path,
            "run",
            "backup-rescue-cleanup",
            "--backup-dir",
            "/var/backup",
            "--strategy",
            "online",
        ],
    )
    assert result.exit_code == 0, result.output
    assert emitted()["result"]["status"] == "success"
    assert journal == [(kinds.BACKUP_CLEAN, {"backup_dir": "/var/backup"}, {})]


def test_run_abort_points_at_rescue(runner, emitted, monkeypatch, registry_factory):
    monkeypatch.setattr(
        "maintain.scenarios.global_registry", registry_factory(failing=[kinds.BACKUP_PULP])
    )
    result = runner.invoke(
        commands.cli,
        [
            "--output-file",
            emitted.path,
            "run",
            "backup",
            "--strategy",
            "online",
            "--backup-dir",
            "/var/backup",
        ],
    )
    assert isinstance(result.exception, exceptions.ScenarioFailure)
    assert "maintain run backup-rescue-cleanup" in str(result.exception)
    emitted_result = emitted()["result"]
    assert emitted_result["state"] == "aborted"
    assert [failure["kind"] for failure in emitted_result["failures"]] == [kinds.BACKUP_PULP]
    assert emitted_result["executed"] == 5


def test_failed_run_exits_with_scenario_failure_code(emitted, monkeypatch, registry_factory):
    monkeypatch.setattr(
        "maintain.scenarios.global_registry", registry_factory(failing=[kinds.BACKUP_PULP])
    )
    with pytest.raises(SystemExit) as excinfo:
        commands.cli(
            [
                "--output-file",
                emitted.path,
                "run",
                "backup",
                "--strategy",
                "online",
                "--backup-dir",
                "/var/backup",
            ]
        )
    assert excinfo.value.code == exceptions.ScenarioFailure.error_code
    output = emitted()
    assert output["return_code"] == 7
    assert "backup-rescue-cleanup" in output["error_message"]


def test_unexpected_errors_are_wrapped(emitted, monkeypatch):
    def explode(label):
        raise RuntimeError("no such scenario store")

    monkeypatch.setattr("maintain.commands.get_scenario", explode)
    with pytest.raises(SystemExit) as excinfo:
        commands.cli(["--output-file", emitted.path, "params", "backup"])
    assert excinfo.value.code == exceptions.MaintainError.error_code
    output = emitted()
    assert output["return_code"] == 1
    assert output["error_message"] == "no such scenario store"


def test_successful_command_emits_zero_return_code(emitted):
    commands.cli(["--output-file", emitted.path, "scenarios"])
    assert emitted()["return_code"] == 0
