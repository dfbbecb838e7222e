"""Execution engine for composed scenario steps.

Steps run one at a time, strictly in order. A single loop serves both run
strategies; the strategy only decides whether the loop stops after a failure.
"""

from dataclasses import dataclass, field
from enum import Enum
import logging
from types import MappingProxyType

from maintain import exceptions
from maintain.procedures import Outcome, registry as global_registry

logger = logging.getLogger(__name__)


class RunStrategy(str, Enum):
    """How a scenario reacts to a failed step."""

    FAIL_FAST = "fail_fast"
    FAIL_SLOW = "fail_slow"

    @property
    def halts_on_failure(self):
        return self is RunStrategy.FAIL_FAST


class StepState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ScenarioState(str, Enum):
    COMPOSED = "composed"
    EXECUTING = "executing"
    COMPLETED = "completed"
    ABORTED = "aborted"


class RunStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class Failure:
    """A failed step: its 1-based position in the step list, its kind, and the error."""

    position: int
    kind: str
    error: object

    def to_dict(self):
        return {"position": self.position, "kind": self.kind, "error": str(self.error)}


@dataclass
class StepRecord:
    """Execution bookkeeping for one step."""

    position: int
    step: object
    state: StepState = StepState.PENDING

    @property
    def executed(self):
        return self.state in (StepState.SUCCEEDED, StepState.FAILED)


@dataclass(frozen=True)
class RunResult:
    """Aggregated outcome of running a scenario's steps."""

    scenario: str
    run_strategy: RunStrategy
    state: ScenarioState
    failures: tuple = ()
    steps: tuple = ()
    metadata: MappingProxyType = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def status(self):
        return RunStatus.FAILED if self.failures else RunStatus.SUCCESS

    @property
    def ok(self):
        return self.status is RunStatus.SUCCESS

    @property
    def aborted(self):
        return self.state is ScenarioState.ABORTED

    @property
    def executed_steps(self):
        return [record for record in self.steps if record.executed]

    @property
    def exit_code(self):
        return 0 if self.ok else exceptions.ScenarioFailure.error_code

    def to_dict(self):
        return {
            "scenario": self.scenario,
            "run_strategy": self.run_strategy.value,
            "status": self.status.value,
            "state": self.state.value,
            "executed": len(self.executed_steps),
            "failures": [failure.to_dict() for failure in self.failures],
            "steps": [
                {"position": rec.position, "kind": rec.step.kind, "state": rec.state.value}
                for rec in self.steps
            ],
            "metadata": dict(self.metadata),
        }


def run_step(step, procedures=None):
    """Execute a single step through the procedure registered for its kind.

    Any error raised while locating, constructing or running the procedure is
    returned as a failed Outcome.
    """
    procedures = global_registry if procedures is None else procedures
    if (proc_cls := procedures.get(step.kind)) is None:
        return Outcome.failure(
            exceptions.ProcedureNotFoundError(
                kind=step.kind, message="No procedure registered for this kind"
            )
        )
    try:
        procedure = proc_cls(step.bound_parameters, step.options)
        outcome = procedure.execute()
    except Exception as err:  # noqa: BLE001
        return Outcome.failure(err)
    if not isinstance(outcome, Outcome):
        return Outcome.failure(
            exceptions.ProcedureError(kind=step.kind, message=f"Invalid outcome {outcome!r}")
        )
    return outcome


def execute(steps, run_strategy, procedures=None, scenario="scenario", metadata=None):
    """Run steps in order under a run strategy.

    Args:
        steps: ordered sequence of Step
        run_strategy: RunStrategy (or its string value)
        procedures: registry mapping kind -> Procedure class, defaults to the global one
        scenario: label used in logs and the result
        metadata: mapping copied onto the result

    Returns:
        RunResult
    """
    run_strategy = RunStrategy(run_strategy)
    records = tuple(StepRecord(position, step) for position, step in enumerate(steps, 1))
    failures = []
    state = ScenarioState.COMPLETED
    logger.info(f"Running {len(records)} steps of {scenario} ({run_strategy.value})")
    for record in records:
        record.state = StepState.RUNNING
        logger.info(f"[{record.position}/{len(records)}] {record.step.kind}")
        outcome = run_step(record.step, procedures)
        if outcome.ok:
            record.state = StepState.SUCCEEDED
            continue
        record.state = StepState.FAILED
        failures.append(Failure(record.position, record.step.kind, outcome.error))
        logger.error(f"Step {record.position} ({record.step.kind}) failed: {outcome.error}")
        if run_strategy.halts_on_failure:
            state = ScenarioState.ABORTED
            break
    result = RunResult(
        scenario=scenario,
        run_strategy=run_strategy,
        state=state,
        failures=tuple(failures),
        steps=records,
        metadata=metadata or {},
    )
    logger.info(f"{scenario} finished: {result.status.value} ({result.state.value})")
    return result
