import pytest

from maintain import exceptions, params
from maintain.params import ParameterSpec, param

SPECS = (
    param("strategy", "Backup strategy", required=True),
    param("backup_dir", "Directory where to backup to", required=True),
    param("proxy_features", "Features to back up", array=True),
    param("tar_volume_size", "Size of tar volume"),
)


def test_validate_builds_context():
    context = params.validate(
        SPECS, {"strategy": "online", "backup_dir": "/x", "proxy_features": ["tftp", "dns"]}
    )
    assert context["strategy"] == "online"
    assert context["backup_dir"] == "/x"
    assert context["proxy_features"] == ("tftp", "dns")
    assert "tar_volume_size" not in context


@pytest.mark.parametrize("supplied", [{"backup_dir": "/x"}, {"strategy": None, "backup_dir": "/x"}])
def test_missing_required_parameter(supplied):
    with pytest.raises(exceptions.MissingParameterError) as err:
        params.validate(SPECS, supplied, scenario="backup")
    assert err.value.name == "strategy"
    assert "backup" in str(err.value)


def test_array_parameter_rejects_scalar():
    with pytest.raises(exceptions.TypeMismatchError) as err:
        params.validate(SPECS, {"strategy": "online", "backup_dir": "/x", "proxy_features": "tftp"})
    assert err.value.name == "proxy_features"


def test_array_parameter_rejects_non_strings():
    with pytest.raises(exceptions.TypeMismatchError):
        params.validate(SPECS, {"strategy": "online", "backup_dir": "/x", "proxy_features": [1]})


def test_scalar_parameter_rejects_sequence():
    with pytest.raises(exceptions.TypeMismatchError) as err:
        params.validate(SPECS, {"strategy": "online", "backup_dir": ["/x", "/y"]})
    assert err.value.name == "backup_dir"
    assert isinstance(err.value, exceptions.ParameterError)


def test_undeclared_parameters_are_kept():
    context = params.validate(SPECS, {"strategy": "online", "backup_dir": "/x", "extra": 1})
    assert context.get("extra") == 1


def test_spec_to_dict():
    spec = ParameterSpec("proxy_features", "Features", is_array=True)
    assert spec.to_dict() == {
        "name": "proxy_features",
        "description": "Features",
        "required": False,
        "array": True,
    }


def test_coerce_cli_value():
    array_spec = param("proxy_features", array=True)
    assert params.coerce_cli_value(array_spec, "tftp, dns,,dhcp") == ("tftp", "dns", "dhcp")
    assert params.coerce_cli_value(None, "true") is True
    assert params.coerce_cli_value(param("x"), "No") is False
    assert params.coerce_cli_value(param("x"), "1") is True
    assert params.coerce_cli_value(param("x"), "0") is False
    assert params.coerce_cli_value(param("x"), "/var/backup") == "/var/backup"
    assert params.coerce_cli_value(param("x"), 5) == 5


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("yes", True), ("TRUE", True), ("1", True), ("no", False), ("False", False), ("0", False)],
)
def test_validate_parses_boolean_strings(raw, expected):
    context = params.validate(
        SPECS, {"strategy": "online", "backup_dir": "/x", "tar_volume_size": raw}
    )
    assert context["tar_volume_size"] is expected


def test_validate_leaves_other_strings_alone():
    context = params.validate(SPECS, {"strategy": "online", "backup_dir": "/x", "extra": "maybe"})
    assert context["strategy"] == "online"
    assert context["extra"] == "maybe"


def test_schema_from_specs():
    schema = params.build_schema(SPECS)
    assert schema["required"] == ["strategy", "backup_dir"]
    assert schema["properties"]["proxy_features"] == {
        "type": "array",
        "items": {"type": "string"},
    }
    assert "array" not in schema["properties"]["backup_dir"]["type"]


def test_mapping_value_rejected_for_scalar():
    with pytest.raises(exceptions.TypeMismatchError) as err:
        params.validate(SPECS, {"strategy": {"online": True}, "backup_dir": "/x"})
    assert err.value.name == "strategy"
