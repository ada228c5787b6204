"""
Water density from temperature

Freshwater density polynomial (UNESCO 1981, zero salinity) used by
CE-QUAL-W2 to convert outlet release temperatures to densities.
"""
import numpy as np
from numba import njit


@njit(cache=True)
def water_density(t):
    """
    Density of fresh water [kg/m3] at temperature t [deg C]
    """
    return (((((6.536332e-9 * t - 1.120083e-6) * t + 1.001685e-4) * t
              - 9.09529e-3) * t + 6.793952e-2) * t + 999.842594)


def density_profile(temperatures):
    """Densities for an array of temperatures"""
    t = np.asarray(temperatures, dtype=np.float64)
    rho = np.empty_like(t)
    for k in range(t.shape[0]):
        rho[k] = water_density(t[k])
    return rho
