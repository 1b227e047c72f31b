from collections import namedtuple
from enum import IntEnum

from .errors import ConfigurationError



class BranchEnum(IntEnum):
    forward = 1
    backward = 2
    imaginary = 3


class ContourEnum(IntEnum):
    full = 1
    keldysh = 2
    imaginary = 3


# Canonical branch order, shared by the contour constructor and the
# contour-free Heaviside function
BRANCH_ORDER = (BranchEnum.forward, BranchEnum.backward, BranchEnum.imaginary)

CONTOUR_BRANCHES = {
    ContourEnum.full: BRANCH_ORDER,
    ContourEnum.keldysh: BRANCH_ORDER[:2],
    ContourEnum.imaginary: BRANCH_ORDER[2:],
}

# (start, stop) of each branch kind as a function of its length
_BRANCH_ENDPOINTS = {
    BranchEnum.forward: lambda length: (0.0 + 0.0j, length + 0.0j),
    BranchEnum.backward: lambda length: (length + 0.0j, 0.0 + 0.0j),
    BranchEnum.imaginary: lambda length: (0.0 + 0.0j, -1.0j * length),
}


BranchPoint = namedtuple("BranchPoint", ["val", "ref", "domain"])
BranchPoint.__doc__ = """
Point on a contour branch: complex time `val`, normalized position
`ref` in [0,1] along the branch and the branch tag `domain`.
"""


def nbranches(domain):
    return len(CONTOUR_BRANCHES[ContourEnum(domain)])



class Branch:
    """
    Directed straight segment of the contour.

    Parameters
    ----------
    domain : BranchEnum
        Kind of branch. Forward runs 0 -> length, backward runs length -> 0
        and imaginary runs 0 -> -i*length.
    length : float
        tmax for the real branches, beta for the imaginary one.

    """
    def __init__(self, domain, length):
        if length < 0:
            raise ConfigurationError("Branch length must be non-negative, got %r" % (length,))
        self.domain = BranchEnum(domain)
        self.length = float(length)
        self.start, self.stop = _BRANCH_ENDPOINTS[self.domain](self.length)

    def evaluate(self, ref):
        return BranchPoint(self.start + (self.stop - self.start) * ref, ref, self.domain)

    def __call__(self, ref):
        return self.evaluate(ref)

    def __repr__(self):
        return "Branch(%s, %r)" % (self.domain.name, self.length)



class Contour:
    """
    Ordered collection of branches. The set of branches is fixed by `domain`,
    only their order can change through `twist`.
    """
    def __init__(self, domain, tmax=0.0, beta=0.0):
        if tmax < 0 or beta < 0:
            raise ConfigurationError("tmax and beta must be non-negative")
        self.domain = ContourEnum(domain)
        lengths = {BranchEnum.forward: tmax, BranchEnum.backward: tmax, BranchEnum.imaginary: beta}
        self.branches = [Branch(d, lengths[d]) for d in CONTOUR_BRANCHES[self.domain]]

    def twist(self):
        self.branches = self.branches[1:] + self.branches[:1]
        return self

    def get_branch(self, domain):
        for b in self.branches:
            if b.domain == domain:
                return b
        return None

    def __len__(self):
        return len(self.branches)

    def __iter__(self):
        return iter(self.branches)

    def __repr__(self):
        return "Contour(%s, [%s])" % (self.domain.name, ", ".join(b.domain.name for b in self.branches))


def twist(c):
    return c.twist()


def get_branch(c, domain):
    return c.get_branch(domain)



def heaviside(*args):
    """
    theta(t1, t2) = 1 if t1 is later than t2, else 0.

    Called as heaviside(contour, t1, t2) or heaviside(t1, t2). Points on the
    same branch are compared by their position `ref`. For points on different
    branches only branch membership matters (coinciding end points of
    adjacent branches are never compared by value): with a contour, the
    point whose branch is met first in `contour.branches` is the later one;
    without a contour, the branch with the larger canonical rank is later.
    """
    if len(args) == 3:
        c, t1, t2 = args
    elif len(args) == 2:
        c = None
        t1, t2 = args
    else:
        raise TypeError("heaviside expects (contour, t1, t2) or (t1, t2)")

    if t1.domain == t2.domain:
        return t1.ref >= t2.ref

    if c is None:
        return BRANCH_ORDER.index(t1.domain) > BRANCH_ORDER.index(t2.domain)

    for b in c.branches:
        if b.domain == t1.domain:
            return True
        if b.domain == t2.domain:
            return False
    raise ConfigurationError("Points do not belong to the branches of %r" % (c,))


theta = heaviside
