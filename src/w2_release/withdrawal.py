"""
Selective withdrawal module
Vertical distribution of outflow from a density-stratified water column

Based on the CE-QUAL-W2 downstream withdrawal algorithm: the withdrawal
zone is grown away from the outlet layer until its half-thickness (from
the local density frequency) is exceeded, then a parabolic velocity
profile weighted by cell area distributes the flow across that zone.
"""
import numpy as np
from numba import jit
from .config import DEFAULT_CONFIG


@jit(nopython=True, cache=True)
def _downstream_withdrawal(kmx, kb, ktsw, kbsw, qstr, estr, wstr, wsel,
                           b, el, t, rho, g, nonzero, nodata):
    """
    Withdrawal kernel (JIT-compiled)

    Returns:
    --------
    tavg : float
        Flow-weighted release temperature [deg C], nodata if no flow
    qout : ndarray
        Outflow by layer number (0..kmx) [m3/s]
    ktop, kbot : int
        Withdrawal zone limits (0, 0 when there is no flow)
    """
    qout = np.zeros(kmx + 1)
    if qstr == 0.0:
        return nodata, qout, 0, 0

    point_sink = wstr <= 0.0
    hswt = 0.0
    hswb = 0.0

    # Surface layer
    kt = kb
    for k in range(2, kb + 1):
        if el[k] < wsel:
            kt = k - 1
            break

    # Structure layer
    kfound = kb + 1
    for k in range(kt, kb + 1):
        if el[k] < estr:
            kfound = k
            break
    kstr = min(max(kfound - 1, kt), kb)

    # Initial withdrawal limits
    ktop = max(ktsw, kt)
    if kstr < ktop:
        ktop = kstr
    kbot = min(kbsw, kb)
    if kbot <= kt and kbot != kb:
        kbot = kt + 1
    if kbot > kb:
        kbot = kb
    elstr = estr
    if estr <= el[kb + 1]:
        kstr = kb
        elstr = el[kb]
    if estr > el[kt]:
        elstr = wsel
    if kbsw < kstr:
        kstr = kt
        elstr = wsel

    # Boundary interference
    coef = 1.0
    if wsel - el[kbot] != 0.0:
        ratio = (elstr - el[kbot]) / (wsel - el[kbot])
        if ratio < 0.1 or ratio > 0.9:
            coef = 2.0

    # Withdrawal zone above structure
    for k in range(kstr - 1, ktop - 1, -1):
        ht = el[k] - elstr
        rhoft = max(np.sqrt(max(abs(rho[k] - rho[kstr]) / (ht * rho[kstr] + nonzero) * g, 0.0)),
                    nonzero)
        if point_sink:
            hswt = (coef * qstr / rhoft) ** 0.333333
        else:
            hswt = np.sqrt(2.0 * coef * qstr / (wstr * rhoft))
        if ht > hswt:
            ktop = k
            break

    # Reference density above
    if elstr + hswt < wsel:
        dlrhot = abs(rho[kstr] - rho[ktop])
        for k in range(ktop + 1, kstr):
            dlrhot = max(dlrhot, abs(rho[kstr] - rho[k]))
    elif wsel == elstr:
        dlrhot = nonzero
    else:
        dlrhot = abs(rho[kstr] - rho[kt])
        for k in range(kt + 1, kstr):
            dlrhot = max(dlrhot, abs(rho[kstr] - rho[k]))
        dlrhot *= hswt / (wsel - elstr)
    dlrhot = max(dlrhot, nonzero)

    # Withdrawal zone below structure
    for k in range(kstr + 1, kbot + 1):
        hb = elstr - el[k]
        rhofb = max(np.sqrt(max(abs(rho[k] - rho[kstr]) / (hb * rho[kstr] + nonzero) * g, 0.0)),
                    nonzero)
        if point_sink:
            hswb = (coef * qstr / rhofb) ** 0.333333
        else:
            hswb = np.sqrt(2.0 * coef * qstr / (wstr * rhofb))
        if hb > hswb:
            kbot = k
            break

    # Reference density below
    if elstr - hswb > el[kbot + 1]:
        dlrhob = abs(rho[kstr] - rho[kbot])
        for k in range(kbot - 1, kstr, -1):
            dlrhob = max(dlrhob, abs(rho[kstr] - rho[k]))
    elif el[kbot + 1] == elstr:
        dlrhob = nonzero
    else:
        dlrhob = abs(rho[kstr] - rho[kbot])
        for k in range(kbot - 1, kstr, -1):
            dlrhob = max(dlrhob, abs(rho[kstr] - rho[k]))
        dlrhob *= hswb / (elstr - el[kbot + 1])
    dlrhob = max(dlrhob, nonzero)

    # Velocity profile
    vnorm = np.zeros(kmx + 1)
    vsum = 0.0
    for k in range(ktop, kbot + 1):
        if k > kstr:
            dlrhomax = max(dlrhob, 1.0e-10)
        else:
            dlrhomax = max(dlrhot, 1.0e-10)
        v = 1.0 - ((rho[k] - rho[kstr]) / dlrhomax) ** 2
        v = min(max(v, 0.0), 1.0)
        if k == kt:
            v *= b[k] * (wsel - el[k + 1])
        else:
            v *= b[k] * (el[k] - el[k + 1])
        vnorm[k] = v
        vsum += v

    # Outflows
    if vsum > 0.0:
        for k in range(ktop, kbot + 1):
            qout[k] = (vnorm[k] / vsum) * qstr
    else:
        qout[kstr] = qstr

    qsum = 0.0
    tavg = 0.0
    for k in range(ktop, kbot + 1):
        tavg += qout[k] * t[k]
        qsum += qout[k]
    if qsum > 0.0:
        tavg /= qsum
    else:
        tavg = nodata

    return tavg, qout, ktop, kbot


class Outlet:
    """A single withdrawal structure"""

    def __init__(self, elevation, flow, width=0.0, ktsw=None, kbsw=None):
        """
        Parameters:
        -----------
        elevation : float
            Centerline elevation [m]
        flow : float
            Requested outflow [m3/s]
        width : float
            Line-sink width [m]; 0 for a point sink
        ktsw, kbsw : int, optional
            Structure upper/lower layer limits (default: surface and bed)
        """
        if flow < 0.0:
            raise ValueError(f"Outlet flow must be non-negative, got {flow}")
        self.elevation = float(elevation)
        self.flow = float(flow)
        self.width = float(width)
        self.ktsw = ktsw
        self.kbsw = kbsw

    @property
    def point_sink(self):
        return self.width <= 0.0

    def __repr__(self):
        kind = 'point' if self.point_sink else f'line {self.width:.2f} m'
        return f"Outlet(elevation={self.elevation:.3f}, flow={self.flow:.3f}, {kind})"


def _run_kernel(profile, outlet, config):
    ktsw = 2 if outlet.ktsw is None else int(outlet.ktsw)
    kbsw = profile.kmx if outlet.kbsw is None else int(outlet.kbsw)
    return _downstream_withdrawal(
        profile.kmx, profile.kb, ktsw, kbsw,
        outlet.flow, outlet.elevation, outlet.width, profile.wsel,
        profile.b, profile.el, profile.t, profile.rho,
        config.gravity, config.nonzero, config.no_data_temperature,
    )


def withdraw(profile, outlet, config=None):
    """
    Distribute one outlet's flow over the layers of a stratified profile

    Parameters:
    -----------
    profile : LayerProfile
        Elevations, widths, temperatures and densities at the outlet segment
    outlet : Outlet
        Outlet geometry and requested flow
    config : Config, optional
        Physical constants (defaults if omitted)

    Returns:
    --------
    tavg : float
        Mixed release temperature [deg C] (sentinel when flow is zero)
    qout : ndarray
        Outflow by layer number [m3/s]
    """
    config = config or DEFAULT_CONFIG
    tavg, qout, _, _ = _run_kernel(profile, outlet, config)
    return float(tavg), qout


def withdrawal_limits(profile, outlet, config=None):
    """Top and bottom layers of the withdrawal zone, (0, 0) for zero flow"""
    config = config or DEFAULT_CONFIG
    _, _, ktop, kbot = _run_kernel(profile, outlet, config)
    return int(ktop), int(kbot)
