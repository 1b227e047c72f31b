"""
Densities of states and their integration.

A density of states is either a plain function D(w) (FunctionDOS) or a
SingularDOS decomposed as

    D(w) = R(w) + sum_p S_p(w),

with R smooth on [wmin, wmax] and each S_p regular on the support except at
its own position W_p. Integrals against a smooth test function are computed
as

    int D f = int R f + sum_p int S_p (f - f(W_p)) + sum_p f(W_p) int S_p,

where the last integrals are known in closed form.
"""
import logging
import math

import numpy as np
from numba import njit
from scipy import integrate
from scipy.special import ellipkm1

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


DEFAULT_ATOL = 1e-10
DEFAULT_RTOL = 1e-10
DEFAULT_MAXEVALS = 10**9
GK_ORDER = 21
MAX_SUBINTERVALS = 100000

# Relative tolerance under which a frequency is taken to sit on a singularity
SINGULARITY_RTOL = math.sqrt(np.finfo(np.float64).eps)



class DOSSingularity:
    """
    Integrable singularity of a density of states.

    Parameters
    ----------
    position : float
        Position W_p of the singularity.
    asymptotics : callable
        S_p(w), chosen such that D(w) - S_p(w) -> 0 for w -> W_p.
    integral : float
        Exact integral of S_p over the support of the DOS.

    """
    def __init__(self, position, asymptotics, integral):
        self.position = float(position)
        self.asymptotics = asymptotics
        self.integral = float(integral)

    def __repr__(self):
        return "DOSSingularity(position=%r, integral=%r)" % (self.position, self.integral)



class DOS:
    """Common interface of the density of states variants."""

    def evaluate(self, w):
        raise NotImplementedError

    def support_limits(self):
        raise NotImplementedError

    def integration_limits(self, cutoff=None):
        raise NotImplementedError

    def integrate(self, f, atol=DEFAULT_ATOL, rtol=DEFAULT_RTOL, maxevals=DEFAULT_MAXEVALS,
                  cutoff=None, complex_func=False):
        """Return (integral of f*D, absolute error estimate)."""
        raise NotImplementedError

    def __call__(self, w):
        return self.evaluate(w)



class FunctionDOS(DOS):
    """
    DOS given by a plain function.

    Parameters
    ----------
    func : callable
        D(w).
    limits : tuple of float, optional
        Effective support, (-inf, inf) by default.
    points : sequence of float, optional
        Interior points where the integration range is split, e.g. peaks
        narrow enough to be missed by a single quadrature rule.

    """
    def __init__(self, func, limits=(-np.inf, np.inf), points=()):
        self.func = func
        self.wmin, self.wmax = float(limits[0]), float(limits[1])
        if self.wmin > self.wmax:
            raise ConfigurationError("Empty DOS support (%r, %r)" % (self.wmin, self.wmax))
        self.points = tuple(sorted(float(p) for p in points))

    def evaluate(self, w):
        return self.func(w)

    def support_limits(self):
        return (self.wmin, self.wmax)

    def integration_limits(self, cutoff=None):
        if cutoff is None:
            return (self.wmin, self.wmax)
        return (max(self.wmin, -cutoff), min(self.wmax, cutoff))

    def integrate(self, f, atol=DEFAULT_ATOL, rtol=DEFAULT_RTOL, maxevals=DEFAULT_MAXEVALS,
                  cutoff=None, complex_func=False):
        a, b = self.integration_limits(cutoff)
        func = self.func
        return _quad(lambda w: f(w) * func(w), a, b, self.points,
                     atol, rtol, maxevals, complex_func)



class SingularDOS(DOS):
    """
    DOS with integrable singularities, D(w) = R(w) + sum_p S_p(w).

    Parameters
    ----------
    wmin, wmax : float
        Support limits.
    regular : callable
        Smooth part R(w).
    singularities : list of DOSSingularity
        Singular contributions, with pairwise distinct positions.

    """
    def __init__(self, wmin, wmax, regular, singularities):
        self.wmin = float(wmin)
        self.wmax = float(wmax)
        if self.wmin > self.wmax:
            raise ConfigurationError("Empty DOS support (%r, %r)" % (self.wmin, self.wmax))
        self.regular = regular
        self.singularities = sorted(singularities, key=lambda s: s.position)
        positions = [s.position for s in self.singularities]
        if len(set(positions)) != len(positions):
            raise ConfigurationError("Singularity positions must be distinct: %r" % (positions,))

    def evaluate(self, w):
        return self.regular(w) + sum(s.asymptotics(w) for s in self.singularities)

    def support_limits(self):
        return (self.wmin, self.wmax)

    def integration_limits(self, cutoff=None):
        # The closed-form singular integrals hold for the full support only
        return (self.wmin, self.wmax)

    def integrate(self, f, atol=DEFAULT_ATOL, rtol=DEFAULT_RTOL, maxevals=DEFAULT_MAXEVALS,
                  cutoff=None, complex_func=False):
        a, b = self.integration_limits(cutoff)
        points = [s.position for s in self.singularities]
        regular = self.regular

        val, err = _quad(lambda w: f(w) * regular(w), a, b, points,
                         atol, rtol, maxevals, complex_func)

        for s in self.singularities:
            f_s = f(s.position)
            v, e = _quad(_subtracted(f, f_s, s), a, b, points,
                         atol, rtol, maxevals, complex_func)
            val += v + f_s * s.integral
            err += e
        return val, err


def _subtracted(f, f_s, s):
    position = s.position
    asymptotics = s.asymptotics

    def integrand(w):
        # Removable singularity, the product vanishes at the position itself
        if math.isclose(w, position, rel_tol=SINGULARITY_RTOL):
            return 0.0
        return asymptotics(w) * (f(w) - f_s)
    return integrand


def _quad(func, a, b, points, atol, rtol, maxevals, complex_func):
    limit = max(1, min(maxevals // GK_ORDER, MAX_SUBINTERVALS))
    edges = [a] + [p for p in points if a < p < b] + [b]
    val, err = 0.0, 0.0
    for lo, hi in zip(edges[:-1], edges[1:]):
        if lo == hi:
            continue
        v, e = integrate.quad(func, lo, hi, epsabs=atol, epsrel=rtol, limit=limit,
                              complex_func=complex_func)
        val += v
        err += abs(e)
    return val, err



def as_dos(dos):
    if isinstance(dos, DOS):
        return dos
    if callable(dos):
        return FunctionDOS(dos)
    raise TypeError("Expected a DOS or a callable, got %r" % (dos,))


def dos_support_limits(dos):
    return as_dos(dos).support_limits()


def dos_integrator(f, dos, atol=DEFAULT_ATOL, rtol=DEFAULT_RTOL, maxevals=DEFAULT_MAXEVALS,
                   cutoff=None, complex_func=False, full_output=False):
    """
    Integrate f(w) * D(w) over the support of the DOS.

    Parameters
    ----------
    f : callable
        Smooth test function.
    dos : DOS or callable
        Density of states. Plain callables are integrated over (-inf, inf).
    atol, rtol : float, optional
        Requested absolute and relative accuracy.
    maxevals : int, optional
        Evaluation budget, turned into a subinterval limit of the adaptive
        Gauss-Kronrod rule (at least one subinterval per integration range).
    cutoff : float, optional
        Restrict plain DOS functions to [-cutoff, cutoff]. Ignored for
        SingularDOS, whose support is always finite.
    complex_func : bool, optional
        Set if f returns complex values.
    full_output : bool, optional
        Also return the absolute error estimate.

    Returns
    -------
    value or (value, abserr)

    """
    val, err = as_dos(dos).integrate(f, atol=atol, rtol=rtol, maxevals=maxevals,
                                     cutoff=cutoff, complex_func=complex_func)
    if err > max(atol, rtol * abs(val)):
        logger.warning("DOS integral did not reach the requested tolerance: value %s, error estimate %.3e",
                       val, err)
    if full_output:
        return val, err
    return val



# DOS factory functions

@njit
def _flat_dos(w, nu, D):
    return (1.0 / np.pi) / ((1.0 + np.exp(nu * (w - D))) * (1.0 + np.exp(-nu * (w + D))))


@njit
def _gaussian_dos(w, eps, nu):
    return (1.0 / (2.0 * np.sqrt(np.pi * nu))) * np.exp(-((w - eps)**2) / (4.0 * nu))


@njit
def _bethe_regular(w, t):
    if w == -2*t or w == 2*t:
        return -2.0 / (np.pi * t)
    x = w / (2*t)
    return (np.sqrt(1.0 - x*x) - np.sqrt(2.0 * (1.0 - x)) - np.sqrt(2.0 * (1.0 + x))) / (np.pi * t)


@njit
def _bethe_edge(w, t, side):
    # side = +1 for the upper band edge, -1 for the lower one
    return np.sqrt(2.0 * (1.0 - side * w / (2*t))) / (np.pi * t)


@njit
def _chain_edge(w, t, side):
    s = np.sqrt(2.0 * (1.0 - side * w / (2*t)))
    if s == 0.0:
        return np.inf
    # The second term regularizes the derivative at the band edge
    return 1.0 / (2.0*np.pi*t * s) + s / (16.0*np.pi*t)


@njit
def _chain_regular(w, t):
    if w == -2*t or w == 2*t:
        return -3.0 / (8.0*np.pi*t)
    x = w / (2*t)
    return (1.0 / (2.0*np.pi*t)) / np.sqrt(1.0 - x*x) - _chain_edge(w, t, 1.0) - _chain_edge(w, t, -1.0)


def _square_regular(w, t):
    if w == 0.0:
        return 0.0
    x = w / (4*t)
    # ellipkm1(p) = K(1 - p), accurate close to the logarithmic singularity
    return (1.0 / (2.0 * np.pi**2 * t)) * (float(ellipkm1(x*x)) + math.log(abs(x) / 4.0))


def _square_center(w, t):
    if w == 0.0:
        return np.inf
    return -1.0 / (2.0 * np.pi**2 * t) * math.log(abs(w) / (16.0*t))


def flat_dos(nu=1.0, D=5.0):
    """Flat band of half-bandwidth D with smooth edges of inverse width nu."""
    return FunctionDOS(lambda w: _flat_dos(w, nu, D), points=(-D, D))


def gaussian_dos(eps=1.0, nu=1.0):
    """
    Normalized Gaussian centered at eps, exp(-(w-eps)^2 / (4 nu)).

    Its support is reported as eps +- 20 sqrt(nu) rather than (-inf, inf).
    """
    # Beyond eps +- 20 sqrt(nu) the Gaussian is below exp(-100)
    half_width = 20.0 * math.sqrt(nu)
    return FunctionDOS(lambda w: _gaussian_dos(w, eps, nu),
                       limits=(eps - half_width, eps + half_width), points=(eps,))


def bethe_dos(t=1.0):
    """Normalized semicircular DOS of the Bethe lattice with hopping t."""
    return SingularDOS(-2*t, 2*t,
                       lambda w: _bethe_regular(w, t),
                       [DOSSingularity(-2*t, lambda w: _bethe_edge(w, t, -1.0), 16 / (3*np.pi)),
                        DOSSingularity( 2*t, lambda w: _bethe_edge(w, t,  1.0), 16 / (3*np.pi))])


def chain_dos(t=1.0):
    """Normalized DOS of the linear chain with hopping t."""
    return SingularDOS(-2*t, 2*t,
                       lambda w: _chain_regular(w, t),
                       [DOSSingularity(-2*t, lambda w: _chain_edge(w, t, -1.0), 7 / (3*np.pi)),
                        DOSSingularity( 2*t, lambda w: _chain_edge(w, t,  1.0), 7 / (3*np.pi))])


def square_dos(t=1.0):
    """Normalized DOS of the 2D square lattice with hopping t."""
    return SingularDOS(-4*t, 4*t,
                       lambda w: _square_regular(w, t),
                       [DOSSingularity(0.0, lambda w: _square_center(w, t),
                                       4 / np.pi**2 * (1 + 2 * np.log(2)))])
