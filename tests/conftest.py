import os
import tempfile

# settings resolve the maintain directory on import, so point it somewhere disposable first
os.environ["MAINTAIN_DIRECTORY"] = tempfile.mkdtemp(prefix="maintain-tests-")

import pytest

from maintain import settings
from maintain.capabilities import StaticCapabilities
from maintain.procedures import CapabilityCheckFailed, Procedure, ProcedureRegistry, kinds

ALL_KINDS = [
    value
    for name, value in vars(kinds).items()
    if name.isupper() and isinstance(value, str) and "." in value
    and value != kinds.CAPABILITY_CHECK_FAILED
]
ALL_DATABASES = (kinds.CANDLEPIN_DATABASE, kinds.FOREMAN_DATABASE, kinds.PULPCORE_DATABASE)


def pytest_sessionstart(session):
    """Set up logging for the test session."""
    from maintain.logging import setup_logging

    setup_logging(
        console_level="warning",
        file_level="debug",
        log_path="logs/maintain_tests.log",
        structured=False,
    )


class RecordingProcedure(Procedure):
    """Procedure stand-in that records each call and fails for selected kinds."""

    auto_register = False
    journal = None
    failing = frozenset()

    def run(self):
        self.journal.append((self.kind, self.params, self.options))
        if self.kind in self.failing:
            raise RuntimeError(f"{self.kind} blew up")


def build_registry(journal, failing=(), step_kinds=None):
    """Create an isolated registry with a recording procedure for every kind."""
    registry = ProcedureRegistry()
    for kind in step_kinds or ALL_KINDS:
        registry.register(
            type(
                f"Recording_{kind.replace('.', '_')}",
                (RecordingProcedure,),
                {"kind": kind, "journal": journal, "failing": frozenset(failing)},
            )
        )
    registry.register(CapabilityCheckFailed)
    return registry


@pytest.fixture
def journal():
    return []


@pytest.fixture
def procedures(journal):
    return build_registry(journal)


@pytest.fixture
def all_local():
    return StaticCapabilities(dict.fromkeys(ALL_DATABASES, True))


@pytest.fixture
def all_remote():
    return StaticCapabilities(dict.fromkeys(ALL_DATABASES, False))


@pytest.fixture(scope="session")
def maintain_settings():
    """Settings object with a minimal test configuration."""
    test_config = {
        "LOGGING": {"console_level": "warning", "file_level": "debug"},
        "DATABASES": {
            "candlepin_database": {"local": True},
            "foreman_database": {"local": False},
        },
    }
    return settings.create_settings(config_dict=test_config)


@pytest.fixture
def set_envars(monkeypatch, request):
    """Set environment variables for a test and clean up afterward"""
    for envar, value in request.param:
        monkeypatch.setenv(envar, value)
    yield


@pytest.fixture
def registry_factory(journal):
    """Build isolated registries sharing the test's journal."""

    def factory(failing=(), step_kinds=None):
        return build_registry(journal, failing=failing, step_kinds=step_kinds)

    return factory
