"""Defines the CLI commands for maintain."""

from functools import wraps
import logging
import sys

from click import Abort, ClickException
from rich.console import Console
import rich_click as click

from maintain import exceptions, helpers, params, settings
from maintain.logging import LOG_LEVEL
from maintain.procedures import load_procedure_modules
from maintain.scenarios import get_scenario, list_scenarios

logger = logging.getLogger(__name__)
CONSOLE = Console(no_color=settings.settings.less_colors)  # rich console for pretty printing

click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.COMMAND_GROUPS = {
    "maintain": [
        {"name": "Scenarios", "commands": ["run", "plan"]},
        {"name": "Information", "commands": ["scenarios", "params"]},
    ]
}

SCENARIO_ARGS = {"allow_extra_args": True, "ignore_unknown_options": True}


def loggedcli(group=None, *cli_args, **cli_kwargs):
    """Update the group command wrapper function in order to add logging."""
    if not group:
        group = cli  # default to the main cli group

    def decorator(func):
        @group.command(*cli_args, **cli_kwargs)
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger.log(LOG_LEVEL.TRACE.value, f"Calling {func=}(*{args=} **{kwargs=}")
            retval = func(*args, **kwargs)
            logger.log(
                LOG_LEVEL.TRACE.value,
                f"Finished {func=}(*{args=} **{kwargs=}) {retval=}",
            )
            return retval

        return wrapper

    return decorator


class ExceptionHandler(click.RichGroup):
    """Wraps click group to catch and handle raised exceptions."""

    def __call__(self, *args, **kwargs):
        """Override the __call__ method to catch and handle exceptions."""
        try:
            res = self.main(*args, standalone_mode=False, **kwargs)
            helpers.emit(return_code=0)
            return res
        except Abort:
            sys.exit(1)
        except ClickException as err:
            err.show()
            sys.exit(err.exit_code)
        except Exception as err:  # noqa: BLE001
            if not isinstance(err, exceptions.MaintainError):
                err = exceptions.MaintainError(err)
            helpers.emit(return_code=err.error_code, error_message=str(err.message))
            sys.exit(err.error_code)


def scenario_context(ctx, scenario_cls, args_file=None):
    """Collect scenario parameters from an args file and extra command-line arguments."""
    specs = {spec.name: spec for spec in scenario_cls.params}
    supplied = helpers.load_args_file(args_file) if args_file else {}
    for name, raw in helpers.kwargs_from_click_ctx(ctx).items():
        supplied[name] = params.coerce_cli_value(specs.get(name), raw)
    return supplied


def steps_table(steps, title=None):
    rows = [
        {
            "kind": step.kind,
            "bound": ", ".join(f"{k}={v}" for k, v in step.bound_parameters.items()),
            "options": ", ".join(f"{k}={v}" for k, v in step.options.items()),
        }
        for step in steps
    ]
    return helpers.dictlist_to_table(rows, title, _id=True)


def report_table(result):
    failures = {failure.position: failure for failure in result.failures}
    rows = [
        {
            "kind": record.step.kind,
            "state": record.state.value,
            "error": str(failures[record.position].error) if record.position in failures else "",
        }
        for record in result.steps
    ]
    title = (
        f"{result.scenario}: {result.status.value} "
        f"({len(result.executed_steps)} of {len(result.steps)} steps run)"
    )
    return helpers.dictlist_to_table(rows, title, _id=True)


@click.group(cls=ExceptionHandler)
@click.option(
    "--log-level",
    type=click.Choice(["info", "warning", "error", "debug", "trace", "silent"]),
    default=settings.settings.logging.console_level,
    callback=helpers.update_log_level,
    is_eager=True,
    expose_value=False,
)
@click.option(
    "--output-file",
    type=click.Path(dir_okay=False),
    callback=helpers.set_emit_file,
    is_eager=True,
    expose_value=False,
    help="Path to file where emitted json values should be stored",
)
def cli():
    """Compose and run maintenance scenarios."""


@loggedcli(name="scenarios")
def scenarios_cmd():
    """List the available scenarios."""
    rows = []
    for label in list_scenarios():
        info = get_scenario(label).describe()
        rows.append(
            {
                "scenario": label,
                "description": info["description"],
                "run strategy": info["run_strategy"],
                "tags": ", ".join(info["tags"]),
            }
        )
    helpers.emit({"scenarios": rows})
    CONSOLE.print(helpers.dictlist_to_table(rows, "Scenarios"))


@loggedcli(name="params")
@click.argument("scenario", type=str)
def params_cmd(scenario):
    """Show the parameters a scenario accepts.

    COMMAND: maintain params backup
    """
    info = get_scenario(scenario).describe()
    helpers.emit({"params": info["params"]})
    if not info["params"]:
        CONSOLE.print(f"{scenario} takes no parameters.")
        return
    CONSOLE.print(helpers.dictlist_to_table(info["params"], f"{scenario} parameters"))


@loggedcli(context_settings=SCENARIO_ARGS)
@click.argument("scenario", type=str)
@click.option(
    "--args-file",
    type=click.Path(exists=True),
    help="A json or yaml file mapping scenario parameters to values",
)
@click.pass_context
def plan(ctx, scenario, args_file):
    """Compose a scenario and show its steps without running them.

    COMMAND: maintain plan backup --strategy offline --backup-dir /var/backup
    """
    scenario_cls = get_scenario(scenario)
    instance = scenario_cls(scenario_context(ctx, scenario_cls, args_file))
    steps = instance.build()
    helpers.emit({"steps": [step.to_dict() for step in steps]})
    CONSOLE.print(steps_table(steps, f"{scenario} ({instance.run_strategy.value})"))


@loggedcli(context_settings=SCENARIO_ARGS)
@click.argument("scenario", type=str)
@click.option(
    "--args-file",
    type=click.Path(exists=True),
    help="A json or yaml file mapping scenario parameters to values",
)
@click.pass_context
def run(ctx, scenario, args_file):
    """Compose and run a scenario.

    COMMAND: maintain run backup --strategy online --backup-dir /var/backup

    COMMAND: maintain run backup-rescue-cleanup --backup-dir /var/backup
    """
    load_procedure_modules(settings.settings.get("PROCEDURE_MODULES"))
    scenario_cls = get_scenario(scenario)
    instance = scenario_cls(scenario_context(ctx, scenario_cls, args_file))
    result = instance.run()
    helpers.emit({"result": result.to_dict()})
    CONSOLE.print(report_table(result))
    if result.ok:
        return
    if result.aborted and instance.rescue:
        message = (
            f"Step {result.failures[0].position} ({result.failures[0].kind}) failed. "
            f"Run 'maintain run {instance.rescue}' with the same parameters to clean up."
        )
    else:
        message = f"{len(result.failures)} step(s) failed: " + ", ".join(
            f"{failure.position} ({failure.kind})" for failure in result.failures
        )
    raise exceptions.ScenarioFailure(result, message=message)
