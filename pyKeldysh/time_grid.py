import logging
from collections import namedtuple

import numpy as np

from .contour import BranchEnum, heaviside
from .errors import ConfigurationError
from .utils import trapezoid

logger = logging.getLogger(__name__)



class TimeGridPoint(namedtuple("TimeGridPoint", ["idx", "val"])):
    """
    Discretized contour point: 1-based global index `idx` and the
    BranchPoint `val` it sits on.
    """
    __slots__ = ()

    @property
    def domain(self):
        return self.val.domain

    @property
    def ref(self):
        return self.val.ref



class TimeGrid:
    """
    Uniform discretization of every branch of a contour.

    Parameters
    ----------
    contour : Contour
        Contour to discretize. Points are laid out in the order of
        `contour.branches` at construction time.
    npts_real : int, optional
        Number of points on each real-time branch, both ends included.
        Required iff the contour has real-time branches.
    npts_imag : int, optional
        Number of points on the imaginary branch, both ends included.
        Required iff the contour has an imaginary branch.

    """
    def __init__(self, contour, npts_real=None, npts_imag=None):
        has_imag = contour.get_branch(BranchEnum.imaginary) is not None
        has_real = any(b.domain != BranchEnum.imaginary for b in contour.branches)
        _check_npts("npts_real", npts_real, has_real)
        _check_npts("npts_imag", npts_imag, has_imag)

        self.contour = contour
        self.npts_real = npts_real
        self.npts_imag = npts_imag

        self.points = []
        self.step = []
        self.branch_bounds = []
        idx = 1
        for b in contour.branches:
            npts = npts_imag if b.domain == BranchEnum.imaginary else npts_real
            first = idx
            for ref in np.linspace(0.0, 1.0, npts):
                self.points.append(TimeGridPoint(idx, b.evaluate(float(ref))))
                idx += 1
            self.step.append((b.stop - b.start) / (npts - 1))
            self.branch_bounds.append((self.points[first-1], self.points[-1]))

        logger.debug("Built time grid with %d points on %r", len(self.points), contour)

    def __len__(self):
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def __getitem__(self, idx):
        # Grid indices are 1-based
        return self.points[idx-1]

    def times(self):
        return np.array([p.val.val for p in self.points], dtype=np.complex128)

    def heaviside(self, t1, t2):
        return heaviside(self.contour, t1, t2)


def _check_npts(name, npts, required):
    if required and npts is None:
        raise ConfigurationError("%s is required for this contour" % name)
    if not required and npts is not None:
        raise ConfigurationError("%s given, but the contour has no matching branch" % name)
    if required and npts < 2:
        raise ConfigurationError("%s must be at least 2, got %r" % (name, npts))



def integrate(f, grid, t1=None, t2=None):
    """
    Trapezoidal contour integral of f(t) over grid points.

    integrate(f, grid) runs over the whole contour. integrate(f, grid, t1, t2)
    runs along the contour from t2 to t1, so that for f = 1 the result is
    t1.val - t2.val whenever the path between them is continuous. If t1
    precedes t2 on the contour the path is reversed and the sign flips.
    """
    if t1 is None and t2 is None:
        res = 0.0j
        for (first, last), h in zip(grid.branch_bounds, grid.step):
            res += _branch_sum(f, grid, first.idx, last.idx, h)
        return res

    if t1 is None or t2 is None:
        raise ConfigurationError("Both end points are needed for a partial contour integral")

    sign = 1.0
    if t1.idx < t2.idx:
        t1, t2 = t2, t1
        sign = -1.0

    res = 0.0j
    for (first, last), h in zip(grid.branch_bounds, grid.step):
        lo = max(first.idx, t2.idx)
        hi = min(last.idx, t1.idx)
        if lo < hi:
            res += _branch_sum(f, grid, lo, hi, h)
    return sign * res


def _branch_sum(f, grid, lo, hi, h):
    values = np.array([f(grid[i]) for i in range(lo, hi+1)], dtype=np.complex128)
    return trapezoid(values, h)
