# buildtask/core/resources/naming.py
from __future__ import annotations

import os

from buildtask.core.domain.filesets import ResourceGroup


def replace_base_name(file_name: str, base_name: str, replacement: str) -> str:
    """Replace the base-name segment of `file_name`, keeping its extension."""
    return file_name.replace(base_name, replacement, 1) if base_name else replacement + file_name


def relative_prefix(base_dir: str, file_path: str) -> str:
    """Directory of `file_path` relative to `base_dir`, dotted ('' if identical)."""
    base = os.path.normpath(base_dir)
    file_dir = os.path.dirname(os.path.normpath(file_path))
    if file_dir == base:
        return ""
    rel = os.path.relpath(file_dir, base)
    return rel.replace(os.sep, ".").replace("/", ".")


def get_manifest_name(group: ResourceGroup, file_path: str) -> str:
    """
    Manifest identifier under which `file_path` is embedded.

    Examples (prefix 'App', file 'App/Sub/foo.txt'):
        dynamic_prefix=False              -> 'App.foo.txt'
        dynamic_prefix=True, base 'App'   -> 'App.Sub.foo.txt'
    """
    if group.base_dir is None:
        raise ValueError("resource group has no base directory")

    prefix = group.prefix or ""

    if group.dynamic_prefix:
        rel = relative_prefix(group.base_dir, file_path)
        if prefix:
            prefix += "."
        prefix += rel

    if prefix and not prefix.endswith("."):
        prefix += "."

    file_name = os.path.basename(file_path)
    base_name = os.path.splitext(file_name)[0]
    return replace_base_name(file_name, base_name, prefix + base_name)
