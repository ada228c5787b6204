"""
Branch network data model for CE-QUAL-W2 grids
Branches, waterbodies and segment/layer containers

Layer and segment numbers follow W2 conventions (1-based, with ghost
segments us-1 and ds+1 around every branch). Containers are padded so
those numbers index them directly.
"""
import math
import numpy as np


class Branch:
    """One branch: a 1-D chain of segments"""

    def __init__(self, number, us, ds, uhs=0, dhs=0, slope=0.0):
        """
        Args:
            number: Branch number (1-based)
            us: Upstream segment
            ds: Downstream segment
            uhs: Upstream head segment (0 = none, sign encodes end connection)
            dhs: Downstream head segment (0 = none)
            slope: Bed slope (rise/run)
        """
        self.number = int(number)
        self.us = int(us)
        self.ds = int(ds)
        self.uhs = int(uhs)
        self.dhs = int(dhs)
        self.slope = float(slope)

    @property
    def sina(self):
        return math.sin(math.atan2(self.slope, 1.0))

    @property
    def cosa(self):
        return math.cos(math.atan2(self.slope, 1.0))

    def contains(self, segment):
        """True if segment lies within us..ds"""
        return self.us <= segment <= self.ds

    def segments(self):
        return range(self.us, self.ds + 1)

    def __repr__(self):
        return (f"Branch({self.number}, us={self.us}, ds={self.ds}, "
                f"uhs={self.uhs}, dhs={self.dhs}, slope={self.slope})")


class Waterbody:
    """A contiguous stack of layers shared by branches bs..be"""

    def __init__(self, number, bs, be, jbdn, elbot, h=None):
        """
        Args:
            number: Waterbody number (1-based)
            bs, be: First and last branch of the waterbody
            jbdn: Most-downstream branch (traversal root)
            elbot: Bottom elevation [m]
            h: Layer heights indexed by layer number [m] (from bathymetry)
        """
        self.number = int(number)
        self.bs = int(bs)
        self.be = int(be)
        self.jbdn = int(jbdn)
        self.elbot = float(elbot)
        self.h = None if h is None else np.asarray(h, dtype=np.float64)

    def __repr__(self):
        return (f"Waterbody({self.number}, bs={self.bs}, be={self.be}, "
                f"jbdn={self.jbdn}, elbot={self.elbot})")


class BranchNetwork:
    """
    Static description of a W2 grid: branches, waterbodies, segment
    lengths and cell widths. Populated by the file readers; the core only
    adds the `el` array.
    """

    def __init__(self, kmx, imx, branches=None, waterbodies=None):
        """
        Args:
            kmx: Number of layers (including boundary layers)
            imx: Number of segments (including boundary segments)
            branches: Iterable of Branch
            waterbodies: Iterable of Waterbody
        """
        self.kmx = int(kmx)
        self.imx = int(imx)
        self.branches = {}
        self.waterbodies = {}
        for branch in branches or []:
            self.add_branch(branch)
        for wb in waterbodies or []:
            self.add_waterbody(wb)

        # Bathymetry (filled by set_bathymetry)
        self.dlx = None
        self.b = None
        self.kb = None

        # Layer-top elevations, filled one waterbody at a time
        self.el = None

    @property
    def nbr(self):
        return len(self.branches)

    @property
    def nwb(self):
        return len(self.waterbodies)

    def add_branch(self, branch):
        self.branches[branch.number] = branch

    def add_waterbody(self, wb):
        self.waterbodies[wb.number] = wb

    def branch(self, jb):
        try:
            return self.branches[jb]
        except KeyError:
            raise KeyError(f"Branch {jb} is not defined") from None

    def waterbody(self, jw):
        try:
            return self.waterbodies[jw]
        except KeyError:
            raise KeyError(f"Waterbody {jw} is not defined") from None

    def branches_in(self, jw):
        """Branches of waterbody jw in branch-number order"""
        wb = self.waterbody(jw)
        return [self.branch(jb) for jb in range(wb.bs, wb.be + 1)]

    def segment_range(self, jw):
        """Segments of waterbody jw including the two outer ghost cells"""
        wb = self.waterbody(jw)
        return range(self.branch(wb.bs).us - 1, self.branch(wb.be).ds + 2)

    def layer_array(self, fill=0.0):
        """Array indexed by layer number 0..kmx+1"""
        return np.full(self.kmx + 2, fill, dtype=np.float64)

    def segment_array(self, fill=0.0):
        """Array indexed by segment number 0..imx+1"""
        return np.full(self.imx + 2, fill, dtype=np.float64)

    def grid_array(self, fill=0.0):
        """Array indexed by [layer, segment]"""
        return np.full((self.kmx + 2, self.imx + 2), fill, dtype=np.float64)

    def set_bathymetry(self, dlx, h, b=None, kb=None):
        """
        Attach bathymetry to the network

        Args:
            dlx: Segment lengths indexed by segment number [m]
            h: Dict {waterbody: layer heights indexed by layer} or a single
               array applied to every waterbody [m]
            b: Cell widths indexed by [layer, segment] [m]
            kb: Bottom-most active layer per segment
        """
        dlx = np.asarray(dlx, dtype=np.float64)
        if dlx.shape[0] < self.imx + 1:
            raise ValueError(f"dlx has {dlx.shape[0]} entries, expected at least {self.imx + 1}")
        self.dlx = self.segment_array()
        self.dlx[:dlx.shape[0]] = dlx[:self.imx + 2]

        if isinstance(h, dict):
            for jw, hw in h.items():
                self.waterbody(jw).h = self._pad_layers(hw)
        else:
            hw = self._pad_layers(h)
            for wb in self.waterbodies.values():
                wb.h = hw.copy()

        if b is not None:
            b = np.asarray(b, dtype=np.float64)
            self.b = self.grid_array()
            self.b[:b.shape[0], :b.shape[1]] = b[:self.kmx + 2, :self.imx + 2]
        if kb is not None:
            kb = np.asarray(kb, dtype=np.int64)
            self.kb = np.zeros(self.imx + 2, dtype=np.int64)
            self.kb[:kb.shape[0]] = kb[:self.imx + 2]

    def _pad_layers(self, values):
        values = np.asarray(values, dtype=np.float64)
        if values.shape[0] < self.kmx:
            raise ValueError(f"Layer array has {values.shape[0]} entries, expected at least {self.kmx}")
        padded = self.layer_array()
        padded[:values.shape[0]] = values[:self.kmx + 2]
        return padded

    def __repr__(self):
        return f"BranchNetwork(kmx={self.kmx}, imx={self.imx}, nbr={self.nbr}, nwb={self.nwb})"
