"""Miscellaneous helpers live here.

The helpers are organized into submodules by functionality:
- dict_utils: Dictionary manipulation utilities
- file_utils: File handling utilities
- misc: Miscellaneous helper functions
"""

from maintain.helpers.dict_utils import clean_dict, merge_dicts
from maintain.helpers.file_utils import load_args_file, load_file
from maintain.helpers.misc import (
    FALSY,
    TRUTHY,
    Emitter,
    dictlist_to_table,
    emit,
    kwargs_from_click_ctx,
    set_emit_file,
    update_log_level,
)

__all__ = [
    "FALSY",
    "TRUTHY",
    "Emitter",
    "clean_dict",
    "dictlist_to_table",
    "emit",
    "kwargs_from_click_ctx",
    "load_args_file",
    "load_file",
    "merge_dicts",
    "set_emit_file",
    "update_log_level",
]
