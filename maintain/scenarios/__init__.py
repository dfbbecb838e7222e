"""Module for maintain scenarios.

A scenario is a named, parameterized definition that composes an ordered list of
steps and runs them under a run strategy. Subclasses declare their metadata as
class attributes and implement `compose` and `set_context_mapping`:

    ```
    from maintain.context import MappingRule
    from maintain.params import param
    from maintain.procedures import kinds
    from maintain.scenarios import Scenario

    class Restart(Scenario):
        label = "restart"
        description = "Restart services"
        params = (param("wait", "Seconds to wait between stop and start"),)

        def compose(self):
            self.add_steps(self.find_procedures(kinds.STOP_SERVICES))
            self.add_steps(self.find_procedures(kinds.START_SERVICES))

        def set_context_mapping(self):
            return [MappingRule("wait", {kinds.SERVICE_START: "delay"})]
    ```

Attributes:
    SCENARIOS (dict): Dictionary of scenario labels and classes.
"""

from abc import ABCMeta, abstractmethod
from dataclasses import dataclass, field
import logging
from types import MappingProxyType

from maintain import exceptions, params as params_mod
from maintain.capabilities import SettingsCapabilities
from maintain.context import ContextMapper
from maintain.executor import RunStrategy, ScenarioState, execute
from maintain.procedures import registry as global_registry

logger = logging.getLogger(__name__)

# label: ScenarioClassObject
SCENARIOS = {}


@dataclass(frozen=True)
class Step:
    """One scheduled procedure: its kind, the values bound from the context, and literal options."""

    kind: str
    bound_parameters: MappingProxyType = field(default_factory=dict)
    options: MappingProxyType = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "bound_parameters", MappingProxyType(dict(self.bound_parameters)))
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    def to_dict(self):
        return {
            "kind": self.kind,
            "bound_parameters": dict(self.bound_parameters),
            "options": dict(self.options),
        }


class ScenarioMeta(ABCMeta):
    """Metaclass that registers scenario classes by label."""

    def __new__(cls, name, bases, attrs):
        """Register scenario classes."""
        new_cls = super().__new__(cls, name, bases, attrs)
        if label := attrs.get("label"):
            SCENARIOS[label] = new_cls
            logger.debug(f"Registered scenario {label}")
        return new_cls


class Scenario(metaclass=ScenarioMeta):
    """Abstract base class for all scenarios.

    Attributes:
        label (str): Name the scenario is registered and invoked under.
        description (str): One-line human description.
        tags (frozenset): Free-form tags used for grouping.
        run_strategy (RunStrategy): fail_fast or fail_slow.
        params (tuple): ParameterSpec declarations, in order.
        rescue (str): Label of the scenario to run after this one aborts, if any.
    """

    label = None
    description = ""
    tags = frozenset()
    run_strategy = RunStrategy.FAIL_FAST
    params = ()
    rescue = None

    def __init__(self, context=None, capabilities=None, procedures=None, maintain_settings=None):
        """Validate the supplied parameters and prepare an empty step list.

        Args:
            context: mapping of parameter name -> value
            capabilities: CapabilityLookup consulted during composition
            procedures: ProcedureRegistry used for logical lookups and execution
            maintain_settings: settings object, defaults to the global settings
        """
        self.context = params_mod.validate(self.params, context, scenario=self.label)
        self._settings = maintain_settings
        self.capabilities = capabilities or SettingsCapabilities(maintain_settings)
        self.procedures = global_registry if procedures is None else procedures
        self.mapper = ContextMapper()
        self.steps = []
        self.state = None
        self.result = None

    @classmethod
    def param_specs(cls):
        return list(cls.params)

    @classmethod
    def describe(cls):
        return {
            "label": cls.label,
            "description": cls.description,
            "tags": sorted(cls.tags),
            "run_strategy": RunStrategy(cls.run_strategy).value,
            "params": [spec.to_dict() for spec in cls.params],
        }

    @abstractmethod
    def compose(self):
        """Append this scenario's steps based on the context and capability lookups."""

    def set_context_mapping(self):
        """Return the MappingRules that project context values onto step parameters."""
        return []

    def run_metadata(self):
        """Facts about the run itself, copied onto the run result."""
        return {}

    def add_step(self, kind, **options):
        """Append a step, binding the context values its kind is mapped to."""
        step = Step(kind, self.mapper.project(self.context, kind), options)
        self.steps.append(step)
        logger.debug(f"Added step {step}")
        return step

    def add_steps(self, *step_kinds):
        """Append a step per kind; nested lists (from find_procedures) are flattened."""
        for kind in step_kinds:
            if isinstance(kind, list | tuple):
                self.add_steps(*kind)
            else:
                self.add_step(kind)

    def find_procedures(self, logical_id):
        return self.procedures.find(logical_id, self._settings_for_lookup())

    def _settings_for_lookup(self):
        if self._settings is not None:
            return self._settings
        from maintain.settings import settings

        return settings

    def build(self):
        """Lock the context and compose the step list.

        A failed composition leaves no steps behind.
        """
        if self.state is not None:
            raise exceptions.CompositionError(f"Scenario '{self.label}' was already composed")
        self.context.freeze()
        self.mapper = ContextMapper(self.set_context_mapping())
        for context_key, kind, target in self.mapper.check(self.procedures):
            logger.warning(f"{kind} does not accept '{target}' (mapped from '{context_key}')")
        try:
            self.compose()
        except Exception:
            self.steps = []
            raise
        self.state = ScenarioState.COMPOSED
        logger.info(f"Composed {self.label} with {len(self.steps)} steps")
        return list(self.steps)

    def run(self):
        """Compose (if needed) and execute the steps, returning the RunResult."""
        if self.state is None:
            self.build()
        if self.state is not ScenarioState.COMPOSED:
            raise exceptions.CompositionError(f"Scenario '{self.label}' was already run")
        self.state = ScenarioState.EXECUTING
        self.result = execute(
            self.steps,
            self.run_strategy,
            procedures=self.procedures,
            scenario=self.label,
            metadata=self.run_metadata(),
        )
        self.state = self.result.state
        if self.result.aborted and self.rescue:
            logger.warning(
                f"{self.label} aborted. Run the '{self.rescue}' scenario to restore the system."
            )
        return self.result

    def __repr__(self):
        return f"{self.__class__.__name__}(label={self.label}, steps={len(self.steps)})"


def get_scenario(label):
    """Return the scenario class registered under a label."""
    from maintain.scenarios import backup  # noqa: F401 register built-in scenarios

    try:
        return SCENARIOS[label]
    except KeyError:
        available = ", ".join(sorted(SCENARIOS))
        raise exceptions.MaintainError(
            f"Unknown scenario: {label}. Available: {available}"
        ) from None


def list_scenarios():
    from maintain.scenarios import backup  # noqa: F401 register built-in scenarios

    return sorted(SCENARIOS)
