import math
import numpy as np
import pytest

from w2_grid import (Branch, Waterbody, BranchNetwork, NetworkValidator, ValidationError,
                     GeometryNotReadyError, compute_elevations, layer_head_flags)


def test_flat_waterbody_example(flat_network):
    grid = compute_elevations(flat_network, 1)
    for i in range(1, 7):
        assert grid.at(5, i) == pytest.approx(100.0)
        assert grid.at(4, i) == pytest.approx(102.0)
        assert grid.at(3, i) == pytest.approx(104.0)
        assert grid.at(2, i) == pytest.approx(106.0)
        assert grid.at(1, i) == pytest.approx(108.0)
    assert grid.is_complete()


def test_flat_layer_spacing_independent_of_topology(sloped_network):
    for branch in sloped_network.branches.values():
        branch.slope = 0.0
    grid = compute_elevations(sloped_network, 1)
    h = sloped_network.waterbody(1).h
    for i in grid.segments:
        for k in range(1, sloped_network.kmx):
            assert grid.at(k, i) - grid.at(k + 1, i) == pytest.approx(h[k])


def test_sloped_network_fully_defined(sloped_network):
    grid = compute_elevations(sloped_network, 1)
    assert grid.is_complete()
    for i in grid.segments:
        column = grid.column(i)
        assert np.all(np.diff(column[1:sloped_network.kmx + 1]) < 0.0)


def test_root_branch_integrates_upstream(sloped_network):
    grid = compute_elevations(sloped_network, 1)
    kmx = sloped_network.kmx
    sina = math.sin(math.atan2(0.001, 1.0))
    cosa = math.cos(math.atan2(0.001, 1.0))
    assert grid.at(kmx, 8) == pytest.approx(50.0)
    assert grid.at(kmx, 7) == pytest.approx(50.0 + sina * 1000.0)
    assert grid.at(kmx, 2) == pytest.approx(50.0 + 6 * sina * 1000.0)
    assert grid.at(kmx - 1, 2) - grid.at(kmx, 2) == pytest.approx(2.0 * cosa)


def test_downstream_head_junction(sloped_network):
    grid = compute_elevations(sloped_network, 1)
    kmx = sloped_network.kmx
    sina2 = math.sin(math.atan2(0.002, 1.0))
    expected = grid.at(kmx, 5) + sina2 * 1000.0
    assert grid.at(kmx, 14) == pytest.approx(expected)
    # Ghost cell beyond a head-flagged downstream end is offset by the slope
    assert grid.at(kmx, 15) == pytest.approx(expected - sina2 * 1000.0)


def test_internal_junction(sloped_network):
    grid = compute_elevations(sloped_network, 1)
    kmx = sloped_network.kmx
    sina1 = math.sin(math.atan2(0.001, 1.0))
    sina3 = math.sin(math.atan2(0.0005, 1.0))
    seed = grid.at(kmx, 2) + sina1 * 1000.0 * 0.5
    assert grid.at(kmx, 19) == pytest.approx(seed)
    assert grid.at(kmx, 20) == pytest.approx(seed - sina3 * 1000.0)
    assert grid.at(kmx, 17) == pytest.approx(seed + 2 * sina3 * 1000.0)


def test_upstream_head_junction():
    net = BranchNetwork(kmx=4, imx=15,
                        branches=[Branch(1, us=2, ds=6, slope=0.001),
                                  Branch(2, us=9, ds=13, uhs=4, slope=0.001)],
                        waterbodies=[Waterbody(1, bs=1, be=2, jbdn=1, elbot=10.0)])
    net.set_bathymetry(dlx=np.full(17, 200.0), h=[0.0, 1.0, 1.0, 1.0, 1.0])
    grid = compute_elevations(net, 1)
    sina = math.sin(math.atan2(0.001, 1.0))
    seed = grid.at(4, 4) - sina * 200.0 * 0.5
    assert grid.at(4, 9) == pytest.approx(seed)
    assert grid.at(4, 13) == pytest.approx(seed - 4 * sina * 200.0)
    assert grid.is_complete()


def test_downstream_to_upstream_start():
    # Branch 2 is the reach upstream of branch 1; branch 1's UHS is branch 2's last segment
    net = BranchNetwork(kmx=4, imx=15,
                        branches=[Branch(1, us=2, ds=6, uhs=13, slope=0.001),
                                  Branch(2, us=9, ds=13, slope=0.002)],
                        waterbodies=[Waterbody(1, bs=1, be=2, jbdn=1, elbot=10.0)])
    net.set_bathymetry(dlx=np.full(17, 200.0), h=[0.0, 1.0, 1.0, 1.0, 1.0])
    grid = compute_elevations(net, 1)
    sina1 = math.sin(math.atan2(0.001, 1.0))
    sina2 = math.sin(math.atan2(0.002, 1.0))
    expected = grid.at(4, 2) + (sina1 * 200.0 + sina2 * 200.0) * 0.5
    assert grid.at(4, 13) == pytest.approx(expected)
    assert grid.is_complete()


def test_disconnected_branches_raise():
    net = BranchNetwork(kmx=4, imx=15,
                        branches=[Branch(1, us=2, ds=6, slope=0.001),
                                  Branch(2, us=9, ds=13, slope=0.001)],
                        waterbodies=[Waterbody(1, bs=1, be=2, jbdn=1, elbot=10.0)])
    net.set_bathymetry(dlx=np.full(17, 200.0), h=[0.0, 1.0, 1.0, 1.0, 1.0])
    with pytest.raises(GeometryNotReadyError, match="not connected"):
        compute_elevations(net, 1)


def test_missing_bathymetry_raises():
    net = BranchNetwork(kmx=4, imx=7,
                        branches=[Branch(1, us=2, ds=6)],
                        waterbodies=[Waterbody(1, bs=1, be=1, jbdn=1, elbot=10.0)])
    with pytest.raises(GeometryNotReadyError, match="bathymetry"):
        compute_elevations(net, 1)


def test_missing_control_data_raises():
    with pytest.raises(GeometryNotReadyError, match="control file"):
        compute_elevations(BranchNetwork(kmx=4, imx=7), 1)


def test_head_flags_leave_network_untouched():
    net = BranchNetwork(kmx=4, imx=15,
                        branches=[Branch(1, us=2, ds=6, uhs=-13),
                                  Branch(2, us=9, ds=13)],
                        waterbodies=[Waterbody(1, bs=1, be=2, jbdn=1, elbot=10.0)])
    up_head, dn_head, uhs = layer_head_flags(net)
    assert up_head[1] is False
    assert uhs[1] == 13
    assert net.branch(1).uhs == -13
    assert dn_head == {1: False, 2: False}


def test_grid_bounds_checked(flat_network):
    grid = compute_elevations(flat_network, 1)
    with pytest.raises(IndexError):
        grid.at(0, 2)
    with pytest.raises(IndexError):
        grid.at(2, 7)


def test_validator_rejects_dangling_head(sloped_network):
    sloped_network.branch(2).dhs = 40
    validator = NetworkValidator(sloped_network, verbose=False)
    with pytest.raises(ValidationError):
        validator.validate_all()
    assert any('DHS=40' in e for e in validator.errors)


def test_validator_accepts_network(sloped_network):
    assert NetworkValidator(sloped_network, verbose=False).validate_all()
