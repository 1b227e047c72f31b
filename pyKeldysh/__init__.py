import logging

__all__ = []

from .errors import ConfigurationError
from .contour import BranchEnum, ContourEnum, BranchPoint, Branch, Contour, nbranches, twist, get_branch, heaviside, theta
from .time_grid import TimeGridPoint, TimeGrid, integrate
from .dos import DOSSingularity, DOS, FunctionDOS, SingularDOS, as_dos, dos_support_limits, dos_integrator
from .dos import flat_dos, gaussian_dos, bethe_dos, chain_dos, square_dos
from .generate_gf import get_beta, make_gf, gf_1level, dos2gf
from .utils import fermi

logging.getLogger(__name__).addHandler(logging.NullHandler())
