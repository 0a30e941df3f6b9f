"""Error classes for cgmlst-typer."""


class TypingError(Exception):
    """Base class for cgmlst-typer exceptions."""
    pass


class ConfigError(TypingError):
    """Raised when the pipeline configuration is invalid."""
    pass


class GenomeError(TypingError):
    """Raised when the genome container cannot be read or has no contigs."""
    pass


class TaxonomyError(TypingError):
    """Raised when the taxonomy service cannot be queried."""
    pass


class ToolExecutionError(TypingError):
    """Raised when an external tool exits non-zero or cannot be started."""

    def __init__(self, label, argv, returncode=None, stderr=''):
        self.label = label
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr or ''
        if returncode is None:
            msg = f"Error running {label}: could not start {self.argv[0]!r}"
        else:
            msg = f"Error {returncode} running {label}: {' '.join(self.argv)}"
        tail = self.stderr.strip().splitlines()[-5:]
        if tail:
            msg += '\n' + '\n'.join(tail)
        super().__init__(msg)


class AlleleCallError(TypingError):
    """Raised when the allele-call output is missing or malformed."""
    pass


class ClusterStageError(TypingError):
    """Raised when any step of the cluster stage fails."""
    pass


__all__ = [
    'TypingError',
    'ConfigError',
    'GenomeError',
    'TaxonomyError',
    'ToolExecutionError',
    'AlleleCallError',
    'ClusterStageError',
]
