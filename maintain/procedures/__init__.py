"""Module for maintain procedures.

This module defines the `Procedure` class, the base class for every unit of work a
scenario can schedule. The engine never looks inside a procedure: it instantiates
the class registered for a step's kind with the step's bound parameters and
options, calls `execute`, and looks only at the returned `Outcome`.

Attributes:
    registry (ProcedureRegistry): Global registry of procedure kinds and labels.

Usage:
    To provide the work behind a procedure kind, subclass `Procedure`:

    ```
    from maintain.procedures import Procedure, kinds

    class StopServices(Procedure):
        kind = kinds.SERVICE_STOP
        labels = (kinds.STOP_SERVICES,)
        accepted_params = ()

        def run(self):
            # stop things here, raise on failure
    ```

Note: The `Procedure` class should not be used directly.
"""

from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
import importlib
import logging

from maintain import exceptions
from maintain.procedures import kinds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome:
    """Result of executing a single procedure."""

    ok: bool
    error: object = None

    @classmethod
    def success(cls):
        return cls(ok=True)

    @classmethod
    def failure(cls, error):
        return cls(ok=False, error=error)


class ProcedureRegistry:
    """Lookup of procedure kinds to classes, and logical identifiers to kinds."""

    def __init__(self):
        self._procedures = {}
        self._labels = {}

    def register(self, proc_cls):
        """Register a procedure class under its kind and any logical labels it declares."""
        self._procedures[proc_cls.kind] = proc_cls
        for label in proc_cls.labels:
            kinds_for_label = self._labels.setdefault(label, [])
            if proc_cls.kind not in kinds_for_label:
                kinds_for_label.append(proc_cls.kind)
        logger.debug(f"Registered procedure {proc_cls.__name__} as {proc_cls.kind}")
        return proc_cls

    def get(self, kind, default=None):
        return self._procedures.get(kind, default)

    def kinds(self):
        return list(self._procedures)

    def __contains__(self, kind):
        return kind in self._procedures

    def __len__(self):
        return len(self._procedures)

    def find(self, logical_id, maintain_settings=None):
        """Resolve a logical procedure identifier to an ordered list of procedure kinds.

        Resolution order:
            1. settings `PROCEDURES.<logical_id>` (deployment override)
            2. registered procedure classes labelled with the identifier
            3. the built-in default

        Raises:
            ProcedureNotFoundError: nothing knows the identifier
        """
        overrides = (maintain_settings.get("PROCEDURES") or {}) if maintain_settings is not None else {}
        if (found := overrides.get(logical_id)) is not None:
            found = [found] if isinstance(found, str) else list(found)
            logger.debug(f"Resolved {logical_id} to {found} from settings")
            return found
        if labelled := self._labels.get(logical_id):
            return list(labelled)
        if logical_id in kinds.DEFAULT_LOGICAL_PROCEDURES:
            return list(kinds.DEFAULT_LOGICAL_PROCEDURES[logical_id])
        raise exceptions.ProcedureNotFoundError(
            message=f"No procedures known for logical identifier '{logical_id}'"
        )


registry = ProcedureRegistry()


class ProcedureMeta(ABCMeta):
    """Metaclass that registers concrete procedure classes."""

    def __new__(cls, name, bases, attrs):
        """Register the procedure class under its kind."""
        new_cls = super().__new__(cls, name, bases, attrs)
        if attrs.get("kind") and getattr(new_cls, "auto_register", True):
            registry.register(new_cls)
        return new_cls


class Procedure(metaclass=ProcedureMeta):
    """Abstract base class for all procedures.

    Attributes:
        kind (str): The procedure kind this class implements.
        labels (tuple): Logical identifiers this procedure fulfils (see `kinds`).
        accepted_params (tuple | None): Names of bound parameters the procedure accepts.
            None accepts anything.
        auto_register (bool): Register subclasses in the global registry on definition.
    """

    kind = None
    labels = ()
    accepted_params = None
    auto_register = True

    def __init__(self, bound_parameters=None, options=None):
        self.params = dict(bound_parameters or {})
        self.options = dict(options or {})
        if self.accepted_params is not None:
            if unknown := set(self.params) - set(self.accepted_params):
                raise exceptions.ProcedureError(
                    kind=self.kind, message=f"Unaccepted parameters: {sorted(unknown)}"
                )

    @abstractmethod
    def run(self):
        """Do the work. Raise, or return a failed Outcome, to report failure."""

    def execute(self):
        """Run the procedure and report the result as an Outcome, never raising."""
        logger.debug(f"Executing {self!r}")
        try:
            result = self.run()
        except Exception as err:  # noqa: BLE001
            logger.debug(f"{self.kind} raised {err!r}")
            return Outcome.failure(err)
        if isinstance(result, Outcome):
            return result
        return Outcome.success()

    def __repr__(self):
        return f"{self.__class__.__name__}(kind={self.kind}, params={self.params}, options={self.options})"


class CapabilityCheckFailed(Procedure):
    """Stands in for a step that could not be planned because a capability lookup failed."""

    kind = kinds.CAPABILITY_CHECK_FAILED
    accepted_params = ()

    def run(self):
        return Outcome.failure(
            f"Unable to determine {self.options.get('capability')} "
            f"for {self.options.get('subject')}: {self.options.get('error')}"
        )


def load_procedure_modules(module_names):
    """Import external modules so the procedures they define register themselves."""
    loaded = []
    for module_name in module_names or []:
        try:
            loaded.append(importlib.import_module(module_name))
        except ImportError as err:
            raise exceptions.ConfigurationError(
                f"Unable to import procedure module {module_name}: {err}"
            ) from err
        logger.debug(f"Loaded procedure module {module_name}")
    return loaded
