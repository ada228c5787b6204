"""
Wet-well mixing module
Release temperature and layer outflows for a multi-row bulkhead wet well

The bulkhead schedule in force on the date defines a set of virtual
outlets. A single outlet takes the whole flow; otherwise the head drop
across the wet well is solved so that the Howington outlet flows add up
to the requested flow. Each outlet's share is then distributed over the
water column by the selective withdrawal model.
"""
import numpy as np
from .config import DEFAULT_CONFIG
from .bulkhead import build_virtual_outlets
from .diagnostics import get_sink
from .howington import WetWellEvaluation
from .withdrawal import Outlet, withdraw
from .zbrent import zbrent


def solve_head_drop(evaluation, qstr, base_elev, config=None, diagnostics=None):
    """
    Head drop that makes the outlet flows match qstr

    The bracket runs from zero to the depth of the water surface above the
    bulkhead baseline.

    Raises:
    -------
    UnbracketedRootError : no head drop in the bracket matches qstr
    """
    config = config or DEFAULT_CONFIG
    dh1 = 0.0
    dh2 = evaluation.profile.wsel - base_elev
    return zbrent(lambda dh: evaluation.residual(dh, qstr), dh1, dh2,
                  config.solver_tolerance,
                  max_iter=config.solver_max_iterations,
                  eps=config.solver_eps,
                  diagnostics=diagnostics)


def mix(well, date, bulkheads, profile, qstr, ktsw=None, kbsw=None, config=None, diagnostics=None):
    """
    Mixed release temperature and layer outflows for one wet well

    Parameters:
    -----------
    well : int or str
        Wet-well index or name
    date : datetime-like
        Evaluation date (selects the bulkhead schedule entry)
    bulkheads : BulkheadConfig
        Bulkhead geometry and schedule
    profile : LayerProfile
        Water column in front of the wet well
    qstr : float
        Requested total flow [m3/s]
    ktsw, kbsw : int, optional
        Structure layer limits for the withdrawal model
    config : Config, optional
        Physical and solver settings
    diagnostics : DiagnosticSink, optional
        Receives warnings and errors

    Returns:
    --------
    tavg : float
        Mixed release temperature [deg C] (sentinel when nothing flows)
    qout : ndarray
        Outflow by layer number [m3/s]
    """
    config = config or DEFAULT_CONFIG
    sink = get_sink(diagnostics)
    if isinstance(well, str):
        well = bulkheads.well_index(well)
    if qstr < 0.0:
        raise ValueError(f"Requested flow must be non-negative, got {qstr}")

    qout = np.zeros(profile.kmx + 1, dtype=np.float64)
    if qstr == 0.0:
        return config.no_data_temperature, qout

    outlets = build_virtual_outlets(bulkheads, well, date, profile.wsel, config)
    if not outlets:
        sink.warning(f"No open virtual outlets in wet well {well + 1} on {date}")
        return config.no_data_temperature, qout
    sink.info(f"Number of virtual outlets: {len(outlets)}  Total flow: {qstr}")

    if len(outlets) == 1:
        q_vo = np.array([qstr], dtype=np.float64)
    else:
        evaluation = WetWellEvaluation(outlets, profile, ktsw, kbsw, config)
        dh = solve_head_drop(evaluation, qstr, bulkheads.base_elev, config, sink)
        _, q_vo = evaluation.flows(dh, qstr)

        # Scale the flows so that the total is exact
        qsum = np.sum(q_vo)
        if abs(qsum - qstr) > config.flow_match_tolerance and qsum > 0.0:
            q_vo = q_vo * (qstr / qsum)

    kb = profile.kb
    qsum = 0.0
    qtsum = 0.0
    for outlet, q in zip(outlets, q_vo):
        if q > 0.0:
            tout, qvals = withdraw(profile, Outlet(outlet.elevation, q, outlet.width, ktsw, kbsw), config)
            qout[2:kb + 1] += qvals[2:kb + 1]
            qsum += q
            qtsum += q * tout

    if qsum > 0.0:
        tavg = qtsum / qsum
    else:
        tavg = config.no_data_temperature
    return float(tavg), qout
