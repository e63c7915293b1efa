"""Recreate kpt packages: staging, fetch planning and execution."""
from kpt_recreate.recreate.command import Command, run_command
from kpt_recreate.recreate.executor import (
    RecreateRequest,
    RecreateResult,
    Recreator,
    fetch_expression,
    plan_request,
    recreate_packages,
)
from kpt_recreate.recreate.staging import copy_dir_overwrite, stage_tree
from kpt_recreate.core.errors import FetchError, FilesystemError, RecreateError

__all__ = [
    "Command",
    "FetchError",
    "FilesystemError",
    "RecreateError",
    "RecreateRequest",
    "RecreateResult",
    "Recreator",
    "copy_dir_overwrite",
    "fetch_expression",
    "plan_request",
    "recreate_packages",
    "run_command",
    "stage_tree",
]
