"""
Grid elevation module
Computes layer-top elevations for every segment of a W2 waterbody

Based on the CE-QUAL-W2 grid geometry: for sloped waterbodies the bed
elevation is integrated segment by segment along each branch, starting at
the most-downstream branch and crossing junctions one branch at a time.
"""
import numpy as np
from .validation import GeometryNotReadyError, require_control_data, require_bathymetry


class ElevationGrid:
    """Bounds-checked view of the layer-top elevations of one waterbody"""

    def __init__(self, network, jw):
        self.network = network
        self.jw = jw
        self.kmx = network.kmx
        self.segments = network.segment_range(jw)
        self.el = network.el

    def at(self, k, i):
        """Top elevation of layer k at segment i [m]"""
        if not 1 <= k <= self.kmx:
            raise IndexError(f"Layer {k} outside 1..{self.kmx}")
        if i not in self.segments:
            raise IndexError(f"Segment {i} outside waterbody {self.jw} "
                             f"({self.segments.start}..{self.segments.stop - 1})")
        return float(self.el[k, i])

    def column(self, i):
        """Layer-top elevations at segment i, indexed by layer number"""
        if i not in self.segments:
            raise IndexError(f"Segment {i} outside waterbody {self.jw}")
        return self.el[:, i].copy()

    def is_complete(self):
        """True when every layer of every segment has an elevation"""
        block = self.el[1:self.kmx + 1, self.segments.start:self.segments.stop]
        return bool(np.all(np.isfinite(block)))

    def __getitem__(self, key):
        k, i = key
        return self.at(k, i)


def layer_head_flags(network):
    """
    Derive head-connection flags for every branch

    A nonzero UHS normally flags the upstream end as a head connection. It
    is cleared when UHS lands on the downstream segment of another branch
    that links back through DHS, or when UHS is negative there (which also
    resolves the sign). The network itself is left untouched.

    Returns:
        tuple: (up_head, dn_head, uhs) dicts keyed by branch number
    """
    up_head = {}
    dn_head = {}
    uhs = {}
    ordered = [network.branches[jb] for jb in sorted(network.branches)]
    for branch in ordered:
        head = branch.uhs
        flag = head != 0
        if flag:
            for other in ordered:
                if other.us <= abs(head) <= other.ds:
                    if abs(head) == other.ds:
                        if other.dhs == branch.us:
                            flag = False
                        if head < 0:
                            flag = False
                            head = abs(head)
                    break
        up_head[branch.number] = flag
        uhs[branch.number] = head
        dn_head[branch.number] = branch.dhs != 0
    return up_head, dn_head, uhs


def _fill_column(el, i, kmx, h, cosa):
    """Stack layer heights above the bed elevation at segment i"""
    el[kmx - 1:0:-1, i] = el[kmx, i] + np.cumsum(h[kmx - 1:0:-1] * cosa)


def _sweep_upstream(el, branch, kmx, h, dlx):
    """Integrate from the downstream end (seeded at ds+1) towards us"""
    sina, cosa = branch.sina, branch.cosa
    for i in range(branch.ds, branch.us - 1, -1):
        el[kmx, i] = el[kmx, i + 1]
        if i != branch.ds:
            el[kmx, i] += sina * (dlx[i] + dlx[i + 1]) * 0.5
        _fill_column(el, i, kmx, h, cosa)


def _sweep_downstream(el, branch, kmx, h, dlx):
    """Integrate from the upstream end (seeded at us-1) towards ds"""
    sina, cosa = branch.sina, branch.cosa
    for i in range(branch.us, branch.ds + 1):
        el[kmx, i] = el[kmx, i - 1]
        if i != branch.us:
            el[kmx, i] -= sina * (dlx[i] + dlx[i - 1]) * 0.5
        _fill_column(el, i, kmx, h, cosa)


def _sweep_internal(el, branch, attach, kmx, h, dlx):
    """Integrate outward in both directions from an interior attachment segment"""
    sina, cosa = branch.sina, branch.cosa
    _fill_column(el, attach, kmx, h, cosa)
    for i in range(attach + 1, branch.ds + 1):
        el[kmx, i] = el[kmx, i - 1] - sina * (dlx[i] + dlx[i - 1]) * 0.5
        _fill_column(el, i, kmx, h, cosa)
    for i in range(attach - 1, branch.us - 1, -1):
        el[kmx, i] = el[kmx, i + 1] + sina * (dlx[i] + dlx[i + 1]) * 0.5
        _fill_column(el, i, kmx, h, cosa)


def _mirror_ghosts(el, branch, kmx, dlx, up_head, dn_head):
    """Boundary cells copy their interior neighbour, offset at head junctions"""
    us, ds = branch.us, branch.ds
    el[1:kmx + 1, us - 1] = el[1:kmx + 1, us]
    if up_head:
        el[1:kmx + 1, us - 1] += branch.sina * dlx[us]
    el[1:kmx + 1, ds + 1] = el[1:kmx + 1, ds]
    if dn_head:
        el[1:kmx + 1, ds + 1] -= branch.sina * dlx[ds]


def _next_branch(el, branches, visited, uhs, kmx, dlx):
    """
    Find the next unvisited branch connected to a visited one and seed its
    reference elevation. Junction rules are tried in priority order for
    each candidate pair; the first match wins.

    Returns:
        tuple: (branch, mode, attach) where mode is 'upstream' (sweep from
        ds toward us), 'downstream' (sweep from us toward ds) or 'internal'
    """
    for branch in branches:
        if visited[branch.number]:
            continue
        for other in branches:
            if not visited[other.number]:
                continue

            # Downstream end meets a visited branch through DHS
            if other.us <= branch.dhs <= other.ds:
                el[kmx, branch.ds + 1] = (el[kmx, branch.dhs]
                                          + branch.sina * (dlx[branch.ds] + dlx[branch.dhs]) * 0.5)
                return branch, 'upstream', None

            # Downstream end meets the upstream start of a visited branch
            if uhs[other.number] == branch.ds:
                el[kmx, branch.ds + 1] = (el[kmx, other.us]
                                          + (other.sina * dlx[other.us]
                                             + branch.sina * dlx[branch.ds]) * 0.5)
                return branch, 'upstream', None

            # A visited branch's upstream head attaches inside this branch
            attach = uhs[other.number]
            if branch.us <= attach <= branch.ds:
                el[kmx, attach] = el[kmx, other.us] + other.sina * dlx[other.us] * 0.5
                return branch, 'internal', attach

            # This branch's upstream head attaches inside a visited branch
            head = uhs[branch.number]
            if other.us <= head <= other.ds:
                el[kmx, branch.us - 1] = el[kmx, head] - branch.sina * dlx[branch.us] * 0.5
                return branch, 'downstream', None

    unvisited = [branch.number for branch in branches if not visited[branch.number]]
    raise GeometryNotReadyError(f"Branches {unvisited} are not connected to the "
                                f"downstream branch; cannot compute grid geometry.")


def compute_elevations(network, jw):
    """
    Compute layer-top elevations for every segment of waterbody jw

    Parameters:
    -----------
    network : BranchNetwork
        Network with control-file and bathymetry data
    jw : int
        Waterbody number

    Returns:
    --------
    ElevationGrid
        View over network.el for the waterbody

    Raises:
    -------
    GeometryNotReadyError : control or bathymetry data missing, or the
        branches cannot all be reached from the downstream branch
    """
    require_control_data(network, jw)
    require_bathymetry(network, jw)

    kmx = network.kmx
    wb = network.waterbody(jw)
    h = wb.h
    dlx = network.dlx
    if network.el is None:
        network.el = network.grid_array(np.nan)
    el = network.el

    branches = network.branches_in(jw)
    up_head, dn_head, uhs = layer_head_flags(network)

    if all(branch.slope == 0.0 for branch in branches):
        for i in network.segment_range(jw):
            el[kmx, i] = wb.elbot
            _fill_column(el, i, kmx, h, 1.0)
        return ElevationGrid(network, jw)

    # Sloped grid: follow the branches upstream from JBDN
    branch = network.branch(wb.jbdn)
    el[kmx, branch.ds + 1] = wb.elbot
    visited = {b.number: False for b in branches}
    visited[branch.number] = True
    mode, attach = 'upstream', None
    nvisited = 1

    while True:
        if mode == 'internal':
            _sweep_internal(el, branch, attach, kmx, h, dlx)
        elif mode == 'downstream':
            _sweep_downstream(el, branch, kmx, h, dlx)
        else:
            _sweep_upstream(el, branch, kmx, h, dlx)
        _mirror_ghosts(el, branch, kmx, dlx, up_head[branch.number], dn_head[branch.number])

        if nvisited == len(branches):
            break

        branch, mode, attach = _next_branch(el, branches, visited, uhs, kmx, dlx)
        visited[branch.number] = True
        nvisited += 1

    return ElevationGrid(network, jw)
