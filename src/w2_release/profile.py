"""
Vertical profile at one segment

Holds the layer-top elevations, cell widths, temperatures and densities of
a single water column, indexed by W2 layer number.
"""
import numpy as np
from w2_grid.validation import GeometryNotReadyError
from .density import density_profile


class LayerProfile:
    """Density/temperature profile of one segment on one date"""

    def __init__(self, el, b, t, rho, kb, wsel, kmx=None):
        """
        Initialize profile

        Parameters:
        -----------
        el : array-like
            Layer-top elevations indexed by layer number [m]
        b : array-like
            Cell widths indexed by layer number [m]
        t : array-like
            Temperatures indexed by layer number [deg C]
        rho : array-like or None
            Densities indexed by layer number [kg/m3]; computed from t if None
        kb : int
            Bottom-most active layer
        wsel : float
            Water-surface elevation [m]
        kmx : int, optional
            Number of layers; defaults to len(el) - 2
        """
        if el is None or b is None or t is None:
            raise GeometryNotReadyError("Layer elevations, widths and temperatures "
                                        "are required for withdrawal calculations.")
        self.el = np.asarray(el, dtype=np.float64)
        self.b = np.asarray(b, dtype=np.float64)
        self.t = np.asarray(t, dtype=np.float64)
        self.rho = density_profile(self.t) if rho is None else np.asarray(rho, dtype=np.float64)
        self.kb = int(kb)
        self.wsel = float(wsel)
        self.kmx = int(kmx) if kmx is not None else self.el.shape[0] - 2

        self._check()

    def _check(self):
        if self.kb < 2 or self.kb > self.kmx:
            raise GeometryNotReadyError(f"Bottom layer KB={self.kb} outside 2..{self.kmx}")
        for name in ('el', 'b', 't', 'rho'):
            values = getattr(self, name)
            needed = self.kb + 2 if name == 'el' else self.kb + 1
            if values.shape[0] < needed:
                raise GeometryNotReadyError(
                    f"Profile array '{name}' has {values.shape[0]} layers, need {needed}"
                )
        if not np.all(np.isfinite(self.el[1:self.kb + 2])):
            raise GeometryNotReadyError("Grid elevations are missing for this segment; "
                                        "compute grid elevations first.")

    @classmethod
    def from_grid(cls, grid, i, wsel, t, rho=None, b=None, kb=None):
        """
        Build a profile from an ElevationGrid column

        Parameters:
        -----------
        grid : ElevationGrid
            Computed elevations for the waterbody
        i : int
            Segment number
        wsel : float
            Water-surface elevation [m]
        t, rho : array-like
            Temperatures and (optionally) densities by layer
        b, kb : optional
            Widths and bottom layer; taken from the network bathymetry if omitted
        """
        network = grid.network
        if b is None:
            if network.b is None:
                raise GeometryNotReadyError("Cell widths are required; read the W2 bathymetry file first.")
            b = network.b[:, i]
        if kb is None:
            if network.kb is None:
                raise GeometryNotReadyError("Bottom layer indices are required; read the W2 bathymetry file first.")
            kb = network.kb[i]
        return cls(grid.column(i), b, t, rho, kb, wsel, kmx=grid.kmx)

    @property
    def kt(self):
        """Surface layer: first layer whose top is below the water surface, less one"""
        for k in range(2, self.kb + 1):
            if self.el[k] < self.wsel:
                return k - 1
        return self.kb

    def layer_at(self, elevation):
        """Layer k with el[k+1] < elevation <= el[k], or None"""
        for k in range(1, self.kmx + 1):
            if k + 1 >= self.el.shape[0]:
                break
            if self.el[k + 1] < elevation <= self.el[k]:
                return k
        return None

    def __repr__(self):
        return f"LayerProfile(kmx={self.kmx}, kb={self.kb}, wsel={self.wsel:.3f})"
