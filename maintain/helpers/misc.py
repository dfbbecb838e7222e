"""Miscellaneous helper functions and classes."""

import json
from pathlib import Path

from rich.table import Table

from maintain import exceptions

TRUTHY = ("true", "yes", "1")
FALSY = ("false", "no", "0")


def kwargs_from_click_ctx(ctx):
    """Convert a Click context's extra arguments to a dictionary of keyword arguments.

    Supports `--name value`, `--name=value` and bare `--flag` forms.
    Dashes in names are turned into underscores to match parameter names.
    """
    _args = []
    for arg in ctx.args:
        if arg.startswith("--") and "=" in arg:
            _args.extend(arg.split("=", 1))
        else:
            _args.append(arg)
    kwargs = {}
    index = 0
    while index < len(_args):
        key = _args[index]
        if not key.startswith("--"):
            raise exceptions.ParameterError(f"Unexpected argument: {key}")
        name = key[2:].replace("-", "_")
        nxt = _args[index + 1] if index + 1 < len(_args) else None
        if nxt is None or nxt.startswith("--"):
            kwargs[name] = "true"
            index += 1
        else:
            kwargs[name] = nxt
            index += 2
    return kwargs


class Emitter:
    """Class that provides a simple interface to emit messages to a json-formatted file.

    This module also has an instance of this class called "emit" that should be used
    instead of this class directly.

    Usage examples:
        helpers.emit(key=value, another=5)
        helpers.emit({"key": "value", "another": 5})
    """

    def __init__(self, emit_file=None):
        """Can empty init and set the file later."""
        self.file = None
        if emit_file:
            self.set_file(emit_file)

    def set_file(self, file_path):
        """Set the file to emit to."""
        if file_path:
            self.file = Path(file_path)
            self.file.parent.mkdir(exist_ok=True, parents=True)
            if self.file.exists():
                self.file.unlink()
            self.file.touch()

    def emit_to_file(self, *args, **kwargs):
        """Emit data to the file, keeping existing data in-place."""
        if not self.file:
            return
        for arg in args:
            if not isinstance(arg, dict):
                raise exceptions.MaintainError(f"Received an invalid data emission {arg}")
            kwargs.update(arg)
        curr_data = json.loads(self.file.read_text() or "{}")
        curr_data.update(kwargs)
        self.file.write_text(json.dumps(curr_data, indent=4, sort_keys=True, default=str))

    def __call__(self, *args, **kwargs):
        """Allow emit to be used like a function."""
        return self.emit_to_file(*args, **kwargs)


emit = Emitter()


def update_log_level(ctx, param, value):
    """Click callback that reconfigures console logging to the requested level."""
    from maintain.logging import setup_logging

    setup_logging(console_level=value)


def set_emit_file(ctx, param, value):
    """Update the file that maintain emits data to."""
    emit.set_file(value)


def dictlist_to_table(dict_list, title=None, _id=False, headers=True):
    """Convert a list of dictionaries to a rich table."""
    column_colors = ["cyan", "magenta", "green", "yellow", "blue", "red"]
    curr_color = 0
    table = Table(title=title)
    if not dict_list:
        return table
    if _id:
        table.add_column("#", justify="left", style=column_colors[curr_color], no_wrap=True)
        curr_color += 1
    for key in dict_list[0]:  # assume all dicts have the same keys
        table.add_column(key, justify="left", style=column_colors[curr_color])
        curr_color = (curr_color + 1) % len(column_colors)
    for id_num, data_dict in enumerate(dict_list, 1):
        row = [str(id_num)] if _id else []
        row.extend([str(value) for value in data_dict.values()])
        table.add_row(*row)
    if not headers:
        table.show_header = False
    return table
