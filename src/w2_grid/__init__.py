"""
W2 Grid Geometry Package
Branch network model and layer elevation reconstruction for CE-QUAL-W2 grids
"""
from .network import Branch, Waterbody, BranchNetwork
from .validation import NetworkValidator, ValidationError, GeometryNotReadyError
from .elevations import ElevationGrid, compute_elevations, layer_head_flags

__version__ = '1.0.0'
__all__ = [
    'Branch',
    'Waterbody',
    'BranchNetwork',
    'NetworkValidator',
    'ValidationError',
    'GeometryNotReadyError',
    'ElevationGrid',
    'compute_elevations',
    'layer_head_flags',
]
