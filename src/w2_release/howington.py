"""
Simultaneous multi-level withdrawal through a wet well

Flow calculations using equations from Howington (1990):

   Howington, S.E., 1990, Simultaneous, multiple-level withdrawal from
      a density stratified reservoir: U.S. Army Corps of Engineers
      Technical Report W-90-1, 68 p. plus appendix,
      https://hdl.handle.net/11681/4366.

All working arrays for one evaluation live on a WetWellEvaluation, so
independent evaluations can run side by side.
"""
import numpy as np
from w2_grid.validation import GeometryNotReadyError
from .config import DEFAULT_CONFIG
from .density import water_density
from .withdrawal import Outlet, withdraw


class WetWellEvaluation:
    """Working state for the virtual outlets of one wet well on one date"""

    def __init__(self, outlets, profile, ktsw=None, kbsw=None, config=None):
        """
        Initialize evaluation

        Parameters:
        -----------
        outlets : list of VirtualOutlet
            Virtual outlets, index 0 topmost
        profile : LayerProfile
            Water column in front of the wet well
        ktsw, kbsw : int, optional
            Structure layer limits passed to the withdrawal model
        config : Config, optional
            Physical and solver settings
        """
        self.outlets = outlets
        self.profile = profile
        self.ktsw = ktsw
        self.kbsw = kbsw
        self.config = config or DEFAULT_CONFIG
        self.nvo = len(outlets)

        self.el_vo = np.array([o.elevation for o in outlets], dtype=np.float64)
        self.lw_vo = np.array([o.width for o in outlets], dtype=np.float64)
        self.ht_vo = np.array([o.half_height for o in outlets], dtype=np.float64)
        self.hlc = np.array([o.hlc for o in outlets], dtype=np.float64)

        # Orifice factor: Q = sqrt(factor * head)
        self.factor = 2.0 * self.config.gravity * (self.lw_vo * self.ht_vo) ** 2 / self.hlc

        # Layer and preliminary density at each outlet
        self.kstr = np.zeros(self.nvo, dtype=np.int64)
        self.rho_initial = np.zeros(self.nvo, dtype=np.float64)
        for i, outlet in enumerate(outlets):
            k = profile.layer_at(outlet.elevation)
            if k is None or k > profile.kb:
                raise GeometryNotReadyError(
                    f"Virtual outlet at {outlet.elevation:.3f} m lies outside the active water column"
                )
            self.kstr[i] = k
            self.rho_initial[i] = profile.rho[k]

        self.bhcrit = np.zeros(self.nvo, dtype=np.float64)
        self.qcrit = np.zeros(self.nvo, dtype=np.float64)

    def critical_flows(self, rho_prime):
        """
        Critical discharges for all but the top outlet

        Below its critical discharge an outlet is blocked: the density
        difference between it and the outlet above needs a minimum head
        before flow can pass.
        """
        el = self.profile.el
        rho = self.profile.rho
        kstr = self.kstr
        g = self.config.gravity

        self.bhcrit[:] = 0.0
        self.qcrit[:] = 0.0
        sum2 = 0.0
        for i in range(1, self.nvo):
            above = kstr[i - 1]
            total = 0.0
            for k in range(above + 1, kstr[i]):
                total += (rho[k] - rho[above]) * (el[k] - el[k + 1])
            total += (rho[kstr[i]] - rho[above]) * (el[kstr[i]] - self.el_vo[i])

            self.bhcrit[i] = sum2 + total / rho_prime[i]
            if self.bhcrit[i] > 0.0:
                self.qcrit[i] = np.sqrt(self.factor[i] * self.bhcrit[i])
            else:
                self.qcrit[i] = 0.0
                self.bhcrit[i] = 0.0
            sum2 += total / rho[kstr[i]]
        return self.bhcrit, self.qcrit

    def release_densities(self, q, rho_prime):
        """Densities of the water actually released by each flowing outlet"""
        updated = rho_prime.copy()
        for i in range(self.nvo):
            if q[i] > 0.0:
                outlet = Outlet(self.el_vo[i], q[i], self.lw_vo[i], self.ktsw, self.kbsw)
                tout, _ = withdraw(self.profile, outlet, self.config)
                updated[i] = water_density(tout)
        return updated

    def flows(self, dh, qtarg):
        """
        Outlet flows for a head drop dh across the wet well

        Parameters:
        -----------
        dh : float
            Head drop [m]
        qtarg : float
            Target total flow [m3/s]

        Returns:
        --------
        residual : float
            Computed total flow minus target [m3/s]
        q : ndarray
            Flow through each virtual outlet [m3/s]
        """
        el = self.profile.el
        rho = self.profile.rho
        kstr = self.kstr
        margin = self.config.critical_flow_margin
        dh = max(dh, 0.0)

        q = np.zeros(self.nvo, dtype=np.float64)
        bh = np.zeros(self.nvo, dtype=np.float64)
        rho_prime = self.rho_initial.copy()
        qcalc = 0.0

        # First pass uses densities at the outlet elevations, later passes the
        # release densities. More than two passes can oscillate.
        npass = self.config.density_passes
        for ipass in range(npass):
            bhcrit, qcrit = self.critical_flows(rho_prime)
            if qtarg <= qcrit[-1]:
                q[:] = 0.0
                q[-1] = qtarg
                return 0.0, q

            # Flows without regard to critical discharges
            for i in range(self.nvo):
                if i == 0:
                    bh[i] = 0.0
                    q[i] = np.sqrt(self.factor[i] * dh)
                    qcalc = q[i]
                    continue

                qsum = np.sum(q[:i])
                if qsum == 0.0:
                    avg_rho = rho[kstr[i - 1]]
                else:
                    avg_rho = np.sum(q[:i] * rho_prime[:i]) / qsum  # coming down the wet well
                above = kstr[i - 1]
                total = (rho[above] - avg_rho) * (self.el_vo[i - 1] - el[above + 1])
                for k in range(above + 1, kstr[i]):
                    total += (rho[k] - avg_rho) * (el[k] - el[k + 1])
                total += (rho[kstr[i]] - avg_rho) * (el[kstr[i]] - self.el_vo[i])
                bh[i] = bh[i - 1] + total / rho_prime[i]
                if bh[i] + dh > 0.0:
                    q[i] = np.sqrt(self.factor[i] * (bh[i] + dh))
                else:
                    q[i] = 0.0
                    bh[i] = -dh

                # Blocked outlet: pin it and everything above to the critical state
                if q[i] + margin < qcrit[i]:
                    qcalc = 0.0
                    bh[i] = bhcrit[i]
                    q[i] = np.sqrt(self.factor[i] * (bh[i] + dh))
                    q[:i] = 0.0
                    bh[:i] = bhcrit[:i]
                qcalc += q[i]

            # With no head drop the only lever left is a uniform scaling
            if dh == 0.0 and qcalc > qtarg + margin:
                q *= qtarg / qcalc
                qcalc = qtarg

            if ipass < npass - 1:
                rho_prime = self.release_densities(q, rho_prime)

        return qcalc - qtarg, q

    def residual(self, dh, qtarg):
        """Computed total flow minus target, for the root search"""
        return self.flows(dh, qtarg)[0]
