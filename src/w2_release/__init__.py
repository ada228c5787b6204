"""
Release temperature module
Selective withdrawal and multi-outlet wet-well mixing for W2 model output
"""
from .config import Config, create_default_config
from .diagnostics import DiagnosticSink
from .density import water_density, density_profile
from .profile import LayerProfile
from .withdrawal import Outlet, withdraw, withdrawal_limits
from .bulkhead import (
    BulkheadConfig,
    BulkheadValidator,
    ConfigurationError,
    VirtualOutlet,
    build_virtual_outlets,
    make_schedule,
)
from .zbrent import zbrent, UnbracketedRootError
from .howington import WetWellEvaluation
from .mixing import mix, solve_head_drop
from .output import ReleaseWriter

__all__ = [
    'Config',
    'create_default_config',
    'DiagnosticSink',
    'water_density',
    'density_profile',
    'LayerProfile',
    'Outlet',
    'withdraw',
    'withdrawal_limits',
    'BulkheadConfig',
    'BulkheadValidator',
    'ConfigurationError',
    'VirtualOutlet',
    'build_virtual_outlets',
    'make_schedule',
    'zbrent',
    'UnbracketedRootError',
    'WetWellEvaluation',
    'mix',
    'solve_head_drop',
    'ReleaseWriter',
]
