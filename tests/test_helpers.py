import json
from types import SimpleNamespace

import pytest

from maintain import exceptions, helpers


@pytest.fixture
def tmp_file(tmp_path):
    return tmp_path / "test.json"


def test_emitter(tmp_file):
    assert not tmp_file.exists()
    emitter = helpers.Emitter()
    emitter.set_file(tmp_file)
    assert tmp_file.exists()
    emitter(test="value", another=5)
    written = json.loads(tmp_file.read_text())
    assert written == {"test": "value", "another": 5}
    emitter({"thing": 13})
    written = json.loads(tmp_file.read_text())
    assert written == {"test": "value", "another": 5, "thing": 13}


def test_emitter_rejects_non_dict(tmp_file):
    emitter = helpers.Emitter(tmp_file)
    with pytest.raises(exceptions.MaintainError):
        emitter(["not", "a", "dict"])


def test_emitter_without_file_is_a_noop():
    assert helpers.Emitter()(anything=True) is None


def test_load_args_file(tmp_path):
    yaml_file = tmp_path / "args.yaml"
    yaml_file.write_text("strategy: offline\nproxy_features:\n  - tftp\n  - dns\n")
    assert helpers.load_args_file(yaml_file) == {
        "strategy": "offline",
        "proxy_features": ["tftp", "dns"],
    }
    json_file = tmp_path / "args.json"
    json_file.write_text(json.dumps({"backup_dir": "/x"}))
    assert helpers.load_args_file(json_file) == {"backup_dir": "/x"}


def test_load_args_file_requires_mapping(tmp_path):
    yaml_file = tmp_path / "args.yaml"
    yaml_file.write_text("- just\n- a list\n")
    with pytest.raises(exceptions.ParameterError):
        helpers.load_args_file(yaml_file)


def test_negative_load_file():
    assert not helpers.load_file("this/doesnt/exist.something")


def test_kwargs_from_click_ctx():
    ctx = SimpleNamespace(
        args=["--strategy", "offline", "--backup-dir=/var/backup", "--include-db-dumps"]
    )
    assert helpers.kwargs_from_click_ctx(ctx) == {
        "strategy": "offline",
        "backup_dir": "/var/backup",
        "include_db_dumps": "true",
    }


def test_kwargs_from_click_ctx_rejects_positionals():
    with pytest.raises(exceptions.ParameterError):
        helpers.kwargs_from_click_ctx(SimpleNamespace(args=["offline"]))


def test_merge_dicts():
    merged = helpers.merge_dicts(
        {"LOGGING": {"console_level": "info", "log_path": "a"}, "drop": None},
        {"LOGGING": {"console_level": "debug"}},
    )
    assert merged == {"LOGGING": {"console_level": "debug", "log_path": "a"}}
