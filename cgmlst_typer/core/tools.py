"""External tool descriptors and the runner every stage goes through.

The runner is the single place where dry-run mode applies: external
commands, in-process file steps and output checks all pass through it.
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Tuple, Type

from rich.console import Console

from cgmlst_typer.errors import ToolExecutionError, TypingError

console = Console(stderr=True)


@dataclass(frozen=True)
class ToolCommand:
    """A labelled, fully structured external command line."""

    label: str
    argv: Tuple[str, ...]

    @classmethod
    def build(cls, label: str, program, *args) -> 'ToolCommand':
        return cls(label, tuple(str(a) for a in (program,) + args))

    def __str__(self):
        return ' '.join(self.argv)


def allele_call_command(chewbbaca, input_dir, schema_dir, output_dir, cpu) -> ToolCommand:
    return ToolCommand.build(
        'Allele Call', chewbbaca, 'AlleleCall',
        '--input-files', input_dir,
        '--schema-directory', schema_dir,
        '--output-directory', output_dir,
        '--cpu', cpu,
        '--output-unclassified',
        '--output-missing',
        '--output-novel',
        '--no-inferred',
    )


def join_profiles_command(chewbbaca, master_profile, new_profile, output_file) -> ToolCommand:
    return ToolCommand.build(
        'Join Profiles', chewbbaca, 'JoinProfiles',
        '--profiles', master_profile, new_profile,
        '--output-file', output_file,
    )


def hiercc_command(phiercc, profile, output_prefix, append_archive) -> ToolCommand:
    return ToolCommand.build(
        'Cluster', phiercc,
        '--profile', profile,
        '--output', output_prefix,
        '--append', append_archive,
    )


class ToolRunner:
    """Run external tools and file-dependent steps, or only announce them in dry-run mode."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def run(self, command: ToolCommand) -> Optional[subprocess.CompletedProcess]:
        """Run ``command`` to completion.

        Returns:
            CompletedProcess, or None in dry-run mode

        Raises:
            ToolExecutionError: If the program is not found or exits non-zero
        """
        console.log(f"Invoke {command.label} command: {command}")
        if self.dry_run:
            console.print(f"  DRY RUN - would execute: {command}")
            return None
        try:
            proc = subprocess.run(list(command.argv), capture_output=True, text=True, check=False)
        except OSError as e:
            raise ToolExecutionError(command.label, command.argv, None, str(e)) from e
        if proc.returncode != 0:
            raise ToolExecutionError(command.label, command.argv, proc.returncode, proc.stderr)
        return proc

    def call(self, label: str, func: Callable[..., Any], *args, placeholder: Any = None, **kwargs) -> Any:
        """Run an in-process step that reads or writes pipeline files.

        In dry-run mode the step is skipped and ``placeholder`` returned.
        """
        if self.dry_run:
            console.print(f"  DRY RUN - would run {label}")
            return placeholder
        return func(*args, **kwargs)

    def require(self, path, label: str, error: Type[TypingError] = TypingError) -> Path:
        """Check that a step produced a non-empty file (skipped in dry-run mode)."""
        path = Path(path)
        if self.dry_run:
            return path
        if not path.is_file():
            raise error(f"{label}: required file {path} is missing")
        if path.stat().st_size == 0:
            raise error(f"{label}: {path} is empty")
        return path


__all__ = [
    'ToolCommand',
    'ToolRunner',
    'allele_call_command',
    'join_profiles_command',
    'hiercc_command',
]
