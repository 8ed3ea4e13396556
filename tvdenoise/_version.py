# -*- coding: utf-8 -*-
# Copyright (C) 2026 by tvdenoise Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the tvdenoise package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Support functions for determining the package version."""

import os
import re
from ast import parse
from subprocess import PIPE, Popen
from typing import Any, Optional, Tuple, Union


def init_path() -> str:  # pragma: no cover
    """Path of the package `__init__.py` file."""
    return os.path.join(os.path.dirname(__file__), "__init__.py")


def assigned_value(path: str, var: str) -> Any:
    """Get the value assigned to a variable in a Python source file.

    The first line starting with `var` is parsed as an assignment
    statement, so the file is never imported.

    Args:
        path: Path of Python file.
        var: Name of variable.

    Returns:
        Value assigned to variable `var`.

    Raises:
        RuntimeError: If no line assigning variable `var` is found.
    """
    with open(path) as f:
        line = next((ln for ln in f if ln.startswith(var)), None)
    if line is None:
        raise RuntimeError(f"Could not find assignment of variable {var} in {path}")
    return parse(line).body[0].value.value  # type: ignore


def git_hash() -> Optional[str]:  # nosec  pragma: no cover
    """Short hash of the current git commit, or ``None`` outside a repo."""
    try:
        process = Popen(
            ["git", "rev-parse", "--short", "HEAD"], shell=False, stdout=PIPE, stderr=PIPE
        )
    except OSError:
        return None
    ghash = process.communicate()[0].strip().decode("utf-8")
    return ghash or None


def package_version(split: bool = False) -> Union[str, Tuple[str, str]]:  # pragma: no cover
    """Get current package version.

    Development versions (anything other than a purely numeric version,
    optionally ending in post<n>) are extended with the git hash.

    Args:
        split: If ``True``, return a tuple (version, local suffix).

    Returns:
        Package version string or tuple of strings.
    """
    version = assigned_value(init_path(), "__version__")
    suffix = ""
    if not re.match(r"^[0-9\.]+(post[0-9]+)?$", version):
        ghash = git_hash()
        if ghash:
            suffix = "+" + ghash
    if split:
        return (version, suffix)
    return version + suffix
