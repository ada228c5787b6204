import math
import pytest
from scipy.optimize import brentq

from w2_release import DiagnosticSink, UnbracketedRootError, zbrent


def cubic(x):
    return x ** 3 - 2.0


def test_matches_scipy_brentq():
    root = zbrent(cubic, 0.0, 3.0, 1.0e-10)
    assert root == pytest.approx(brentq(cubic, 0.0, 3.0, xtol=1.0e-12), abs=1.0e-8)
    assert root == pytest.approx(2.0 ** (1.0 / 3.0), abs=1.0e-8)


def test_decreasing_function():
    root = zbrent(lambda x: math.cos(x) - x, 0.0, 1.0, 1.0e-10)
    assert root == pytest.approx(brentq(lambda x: math.cos(x) - x, 0.0, 1.0), abs=1.0e-8)


def test_root_at_bracket_end():
    assert zbrent(lambda x: x - 1.0, 1.0, 2.0, 1.0e-8) == 1.0


def test_unbracketed_root_reported_and_raised():
    sink = DiagnosticSink(verbose=False)
    with pytest.raises(UnbracketedRootError) as excinfo:
        zbrent(lambda x: x * x + 1.0, -1.0, 1.0, 1.0e-8, diagnostics=sink)
    assert excinfo.value.fa == pytest.approx(2.0)
    assert excinfo.value.fb == pytest.approx(2.0)
    assert len(sink.errors) == 1
    assert 'Root not bracketed' in sink.errors[0]


def test_iteration_budget_warns():
    sink = DiagnosticSink(verbose=False)
    root = zbrent(cubic, 0.0, 3.0, 1.0e-14, max_iter=2, diagnostics=sink)
    assert 0.0 <= root <= 3.0
    assert len(sink.warnings) == 1
    assert 'exceeded 2 iterations' in sink.warnings[0]
    assert not sink.has_errors


def test_summary_lists_warnings(capsys):
    sink = DiagnosticSink(verbose=False)
    zbrent(cubic, 0.0, 3.0, 1.0e-14, max_iter=2, diagnostics=sink)
    sink.print_summary()
    out = capsys.readouterr().out
    assert 'Errors: 0' in out
    assert 'Warnings: 1' in out
    assert 'exceeded 2 iterations' in out
