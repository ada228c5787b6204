#!/usr/bin/env python3
"""
Input validation for W2 branch networks

Checks that control-file and bathymetry data are present and internally
consistent before grid elevations are computed.
Provides clear error messages for any issues found.
"""
import numpy as np


class ValidationError(Exception):
    """Custom exception for validation errors"""
    pass


class GeometryNotReadyError(Exception):
    """Raised when required geometry, bathymetry or profile data is missing"""
    pass


CONTROL_ATTRIBUTES = ('us', 'ds', 'uhs', 'dhs', 'slope')


def require_control_data(network, jw):
    """Raise GeometryNotReadyError unless control-file data for jw is present"""
    if network is None or not network.kmx or not network.branches or jw not in network.waterbodies:
        raise GeometryNotReadyError("Cannot compute grid geometry\n"
                                    "until W2 control file is read.")
    wb = network.waterbodies[jw]
    for jb in range(wb.bs, wb.be + 1):
        branch = network.branches.get(jb)
        if branch is None or any(getattr(branch, name, None) is None for name in CONTROL_ATTRIBUTES):
            raise GeometryNotReadyError("Cannot compute grid geometry\n"
                                        "until W2 control file is read.")
    if wb.jbdn is None or wb.elbot is None:
        raise GeometryNotReadyError("Cannot compute grid geometry\n"
                                    "until W2 control file is read.")


def require_bathymetry(network, jw):
    """Raise GeometryNotReadyError unless layer heights and segment lengths are present"""
    if network.dlx is None or network.waterbodies[jw].h is None:
        raise GeometryNotReadyError("Cannot compute grid geometry until\n"
                                    "W2 bathymetry or contour file is read.")


class NetworkValidator:
    """Validates a branch network before elevations are computed"""

    def __init__(self, network, verbose=True):
        """
        Initialize validator with a network

        Args:
            network: BranchNetwork to check
            verbose: Print the validation report
        """
        self.network = network
        self.verbose = verbose
        self.errors = []
        self.warnings = []

    def validate_all(self):
        """
        Run all validation checks

        Raises:
            ValidationError: If any validation fails
        """
        self.errors = []
        self.warnings = []

        for jw in sorted(self.network.waterbodies):
            self._validate_waterbody(jw)
        self._validate_membership()

        if self.verbose:
            self._report_validation_results()

        if self.errors:
            raise ValidationError(f"Validation failed with {len(self.errors)} error(s)")
        return True

    def _validate_waterbody(self, jw):
        """Check branch bounds, head links and bathymetry for one waterbody"""
        net = self.network
        wb = net.waterbodies[jw]

        if wb.bs > wb.be:
            self.errors.append(f"Waterbody {jw}: first branch {wb.bs} is after last branch {wb.be}")
            return
        missing = [jb for jb in range(wb.bs, wb.be + 1) if jb not in net.branches]
        if missing:
            self.errors.append(f"Waterbody {jw}: branches {missing} are not defined")
            return
        if not wb.bs <= wb.jbdn <= wb.be:
            self.errors.append(
                f"Waterbody {jw}: downstream branch JBDN={wb.jbdn} is outside branches {wb.bs}-{wb.be}"
            )

        branches = net.branches_in(jw)
        first = branches[0].us
        last = branches[-1].ds
        for branch in branches:
            if branch.us > branch.ds:
                self.errors.append(
                    f"Branch {branch.number}: upstream segment {branch.us} > downstream segment {branch.ds}"
                )
            if branch.us < 2 or branch.ds > net.imx - 1:
                self.errors.append(
                    f"Branch {branch.number}: segments {branch.us}-{branch.ds} leave no room "
                    f"for boundary cells within IMX={net.imx}"
                )
            for name in ('uhs', 'dhs'):
                seg = abs(getattr(branch, name))
                if seg == 0:
                    continue
                if not any(other.contains(seg) for other in branches):
                    self.errors.append(
                        f"Branch {branch.number}: {name.upper()}={getattr(branch, name)} does not "
                        f"resolve to a segment in waterbody {jw}"
                    )

        if wb.jbdn in net.branches and net.branches[wb.jbdn].dhs != 0:
            self.warnings.append(
                f"Waterbody {jw}: downstream branch {wb.jbdn} has a downstream head link"
            )

        if wb.h is None:
            self.errors.append(f"Waterbody {jw}: layer heights are not defined")
        elif np.any(wb.h[1:net.kmx] < 0.0):
            self.errors.append(f"Waterbody {jw}: negative layer heights")

        if net.dlx is None:
            self.errors.append("Segment lengths (DLX) are not defined")
        elif np.any(net.dlx[first:last + 1] <= 0.0):
            self.errors.append(f"Waterbody {jw}: non-positive segment lengths in segments {first}-{last}")

    def _validate_membership(self):
        """Every branch belongs to exactly one waterbody"""
        for jb in sorted(self.network.branches):
            owners = [wb.number for wb in self.network.waterbodies.values() if wb.bs <= jb <= wb.be]
            if len(owners) != 1:
                self.errors.append(f"Branch {jb} belongs to {len(owners)} waterbodies {owners}")

    def _report_validation_results(self):
        """Print validation summary"""
        if self.warnings:
            print("\nWarnings:")
            for warning in self.warnings:
                print(f"  WARNING: {warning}")
        if self.errors:
            print("\nErrors:")
            for error in self.errors:
                print(f"  ERROR: {error}")
        else:
            print(f"✓ Branch network valid: {self.network.nbr} branches, "
                  f"{self.network.nwb} waterbodies")
