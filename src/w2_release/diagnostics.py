"""
Diagnostic reporting for release temperature calculations

The core never prompts; it reports fatal and non-fatal conditions to a
sink supplied by the caller and keeps the messages for later inspection.
"""
import sys


class DiagnosticSink:
    """Collects errors, warnings and informational messages"""

    def __init__(self, verbose=True):
        """
        Parameters:
        -----------
        verbose : bool
            If True, echo messages as they are reported
        """
        self.verbose = verbose
        self.errors = []
        self.warnings = []
        self.infos = []

    def error(self, message):
        """Report a fatal condition (the caller raises afterwards)"""
        self.errors.append(message)
        if self.verbose:
            print(f"  ERROR: {message}", file=sys.stderr)

    def warning(self, message):
        """Report a non-fatal condition; results remain usable"""
        self.warnings.append(message)
        if self.verbose:
            print(f"  WARNING: {message}", file=sys.stderr)

    def info(self, message):
        self.infos.append(message)
        if self.verbose:
            print(f"  {message}")

    @property
    def has_errors(self):
        return len(self.errors) > 0

    def print_summary(self):
        """Print message counts"""
        print("\nDiagnostics summary:")
        print(f"  Errors: {len(self.errors)}")
        print(f"  Warnings: {len(self.warnings)}")
        for message in self.warnings:
            print(f"    {message}")


def get_sink(diagnostics):
    """Return the caller's sink, or a quiet one when none is given"""
    return diagnostics if diagnostics is not None else DiagnosticSink(verbose=False)
