"""
Brent's method root search

Bracketing root finder combining bisection with inverse quadratic and
secant interpolation (Brent, 1973), via scipy.optimize.brentq. The bracket
check and the reporting of unbracketed or non-converged searches follow
the W2 post-processing conventions.
"""
from scipy.optimize import brentq
from .config import DEFAULT_CONFIG
from .diagnostics import get_sink


class UnbracketedRootError(Exception):
    """Raised when the residuals at both ends of the bracket share a sign"""

    def __init__(self, a, b, fa, fb):
        self.a = a
        self.b = b
        self.fa = fa
        self.fb = fb
        super().__init__(f"Root not bracketed.\nA= {a}, B= {b}, fA= {fa}, fB= {fb}")


def zbrent(func, a, b, tol, max_iter=None, eps=None, diagnostics=None):
    """
    Find a root of func known to lie between a and b

    The search stops once the bracket half-width falls below
    0.5*tol + 2*eps*|b|, i.e. brentq with xtol=tol and rtol=4*eps.

    Parameters:
    -----------
    func : callable
        Residual function of one float
    a, b : float
        Bracket ends
    tol : float
        Absolute tolerance on the root
    max_iter : int, optional
        Iteration budget (default 100)
    eps : float, optional
        Machine-precision term of the tolerance (default 3e-10)
    diagnostics : DiagnosticSink, optional
        Receives the unbracketed-root error or the non-convergence warning

    Returns:
    --------
    root : float
        Converged root, or the best estimate when the budget runs out

    Raises:
    -------
    UnbracketedRootError : func(a) and func(b) share a sign
    """
    sink = get_sink(diagnostics)
    if max_iter is None:
        max_iter = DEFAULT_CONFIG.solver_max_iterations
    if eps is None:
        eps = DEFAULT_CONFIG.solver_eps

    fa = func(a)
    fb = func(b)
    if fb * fa > 0.0:
        err = UnbracketedRootError(a, b, fa, fb)
        sink.error(str(err))
        raise err

    root, result = brentq(func, a, b, xtol=tol, rtol=4.0 * eps, maxiter=max_iter,
                          full_output=True, disp=False)
    if not result.converged:
        sink.warning(f"Root search exceeded {max_iter} iterations; "
                     f"using b= {root} ({result.flag})")
    return root
