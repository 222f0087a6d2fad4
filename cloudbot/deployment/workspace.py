"""Independent working directories for fragments."""

import re
import shutil
from pathlib import Path

# Engine state and plugin caches stay with their own directory.
_IGNORED = shutil.ignore_patterns(
    ".terraform",
    "terraform.tfstate",
    "terraform.tfstate.backup",
    "*.tfplan",
    ".terraform.lock.hcl",
    "fragments",
)

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


class FragmentWorkspaces:
    """Copies a scenario's template files into ``<workdir>/fragments/<name>``.

    Each fragment gets its own engine state, so fragments never share or
    corrupt one another's state.
    """

    def __init__(self, dirname: str = "fragments") -> None:
        self._dirname = dirname

    def root(self, workdir: Path) -> Path:
        return Path(workdir) / self._dirname

    def prepare(self, workdir: Path, name: str) -> Path:
        """Create or refresh the fragment directory ``name`` under ``workdir``.

        Args:
            workdir: Scenario working directory holding the template files
            name: Fragment name, usually its region

        Returns:
            The fragment's working directory
        """
        target = self.root(workdir) / _UNSAFE.sub("_", name)
        target.mkdir(parents=True, exist_ok=True)
        source = Path(workdir)
        if source.is_dir():
            for entry in source.iterdir():
                if entry.name == self._dirname or _IGNORED(str(source), [entry.name]):
                    continue
                if entry.is_dir():
                    shutil.copytree(
                        entry, target / entry.name, ignore=_IGNORED, dirs_exist_ok=True
                    )
                else:
                    shutil.copy2(entry, target / entry.name)
        return target


def copy_template(template_root: Path, template_ref: str, workdir: Path) -> Path:
    """Copy ``<template_root>/<template_ref>`` into a scenario working directory.

    Args:
        template_root: Directory holding every template
        template_ref: Template path relative to ``template_root``
        workdir: Destination directory

    Returns:
        ``workdir``

    Raises:
        FileNotFoundError: The template directory does not exist
    """
    source = Path(template_root).expanduser() / template_ref
    if not source.is_dir():
        raise FileNotFoundError(f"Template not found: {source}")
    shutil.copytree(source, workdir, ignore=_IGNORED, dirs_exist_ok=True)
    return workdir
