import logging

import numpy as np

from .contour import BranchEnum, heaviside
from .dos import as_dos, dos_integrator, DEFAULT_ATOL, DEFAULT_RTOL
from .errors import ConfigurationError
from .utils import fermi, hybridization_kernel

logger = logging.getLogger(__name__)



def get_beta(grid, beta=None):
    """
    Inverse temperature of a grid: taken from the imaginary branch of its
    contour, or given explicitly when the contour has none. Exactly one of
    the two sources must be available.
    """
    im_b = grid.contour.get_branch(BranchEnum.imaginary)
    if im_b is not None and beta is not None:
        raise ConfigurationError("beta is fixed by the imaginary branch of the contour and cannot be given explicitly")
    if im_b is None and beta is None:
        raise ConfigurationError("beta must be given for a contour without imaginary branch")
    return im_b.length if beta is None else beta


def make_gf(f, grid):
    n = len(grid)
    G = np.zeros((n, n), dtype=np.complex128)
    for t1 in grid:
        for t2 in grid:
            G[t1.idx-1, t2.idx-1] = f(t1, t2)
    return G


def gf_1level(grid, eps, beta=None):
    """
    Bare Green's function of a single level of energy eps,
    G(t1, t2) = -i (theta(t1, t2) - f(eps)) exp(-i eps (t1 - t2)).
    """
    beta = get_beta(grid, beta)
    logger.info("Single level Green's function, eps=%g, beta=%g, %d grid points", eps, beta, len(grid))
    n_eps = fermi(eps, beta)

    def g(t1, t2):
        return -1.0j * (heaviside(t1, t2) - n_eps) * np.exp(-1.0j * (t1.val.val - t2.val.val) * eps)
    return make_gf(g, grid)


def dos2gf(grid, dos, beta=None, D=100.0, atol=DEFAULT_ATOL, rtol=DEFAULT_RTOL, maxevals=10**8):
    """
    Hybridization function of a density of states,
    Delta(t1, t2) = -i (2 theta(t1, t2) - 1) int dw D(w) K(w, t1, t2).

    Parameters
    ----------
    grid : TimeGrid
        Contour discretization.
    dos : DOS or callable
        Density of states.
    beta : float, optional
        Inverse temperature, only for contours without imaginary branch.
    D : float, optional
        Frequency cutoff for DOS given as plain functions.

    """
    beta = get_beta(grid, beta)
    dos = as_dos(dos)
    logger.info("Hybridization function, beta=%g, %d grid points", beta, len(grid))

    def g(t1, t2):
        theta = float(heaviside(t1, t2))
        dt = complex(t1.val.val - t2.val.val)
        integral = dos_integrator(lambda w: hybridization_kernel(w, dt, theta, beta), dos,
                                  atol=atol, rtol=rtol, maxevals=maxevals, cutoff=D, complex_func=True)
        logger.debug("Delta(%d, %d) = %s", t1.idx, t2.idx, integral)
        return -1.0j * (2 * theta - 1) * integral
    return make_gf(g, grid)
