import os
import sys
import numpy as np
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from w2_grid import Branch, Waterbody, BranchNetwork
from w2_release import BulkheadConfig, LayerProfile


@pytest.fixture
def flat_network():
    """Single branch, five layers of 2 m above a 100 m bed"""
    net = BranchNetwork(kmx=5, imx=6,
                        branches=[Branch(1, us=2, ds=5)],
                        waterbodies=[Waterbody(1, bs=1, be=1, jbdn=1, elbot=100.0)])
    net.set_bathymetry(dlx=np.full(8, 500.0), h=[0.0, 2.0, 2.0, 2.0, 2.0, 2.0])
    return net


@pytest.fixture
def sloped_network():
    """
    Main stem (branch 1) with a tributary joining through DHS (branch 2)
    and an upstream branch that branch 1's UHS attaches inside (branch 3)
    """
    net = BranchNetwork(kmx=6, imx=21,
                        branches=[Branch(1, us=2, ds=8, uhs=19, slope=0.001),
                                  Branch(2, us=11, ds=14, dhs=5, slope=0.002),
                                  Branch(3, us=17, ds=20, slope=0.0005)],
                        waterbodies=[Waterbody(1, bs=1, be=3, jbdn=1, elbot=50.0)])
    net.set_bathymetry(dlx=np.full(23, 1000.0), h=[0.0, 2.0, 2.0, 2.0, 2.0, 2.0, 2.0])
    return net


def _column(kmx, top, dz):
    el = np.zeros(kmx + 2)
    for k in range(1, kmx + 2):
        el[k] = top - dz * (k - 1)
    return el


@pytest.fixture
def stratified_profile():
    """Twelve layers of 2 m, warm over cold with a thermocline near 108 m"""
    kmx = 12
    el = _column(kmx, 122.0, 2.0)     # el[12] = 100 m
    b = np.zeros(kmx + 2)
    b[2:12] = 20.0
    t = np.zeros(kmx + 2)
    t[:7] = 20.0
    t[7] = 14.0
    t[8:] = 8.0
    return LayerProfile(el, b, t, None, kb=11, wsel=115.0, kmx=kmx)


@pytest.fixture
def uniform_profile():
    kmx = 12
    el = _column(kmx, 122.0, 2.0)
    b = np.zeros(kmx + 2)
    b[2:12] = 20.0
    t = np.full(kmx + 2, 12.0)
    return LayerProfile(el, b, t, None, kb=11, wsel=115.0, kmx=kmx)


@pytest.fixture
def wetwell_profile():
    """Forty layers of 2 m from 750 m down to a 672 m bed, surface at 740 m"""
    kmx = 40
    el = _column(kmx, 750.0, 2.0)
    b = np.zeros(kmx + 2)
    b[2:40] = 300.0
    t = np.zeros(kmx + 2)
    for k in range(kmx + 2):
        if el[k] >= 720.0:
            t[k] = 20.0
        elif el[k] <= 700.0:
            t[k] = 6.0
        else:
            t[k] = 6.0 + 14.0 * (el[k] - 700.0) / 20.0
    return LayerProfile(el, b, t, None, kb=39, wsel=740.0, kmx=kmx)


def libby_schedule(rows_ww1, rows_ww2=None, date='2020-01-01'):
    counts = np.zeros((2, 18), dtype=int)
    for row, nopen in rows_ww1.items():
        counts[0, row] = nopen
    for row, nopen in (rows_ww2 or {}).items():
        counts[1, row] = nopen
    return {date: counts}


@pytest.fixture
def libby_config():
    """Two wet wells of five slots; WW1 has two partly open rows, WW2 an open top row"""
    schedule = libby_schedule({2: 2, 5: 3}, {17: 5})
    return BulkheadConfig.libby_defaults(['WW1', 'WW2'], [5, 5], schedule)
