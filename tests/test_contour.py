import pytest
import numpy as np

from pyKeldysh import Branch, BranchEnum, BranchPoint, Contour, ContourEnum, ConfigurationError
from pyKeldysh import nbranches, twist, get_branch, heaviside, theta


class TestBranch:

    def setup_method(self):
        self.tmax = 2.0
        self.beta = 3.0
        self.fwd = Branch(BranchEnum.forward, self.tmax)
        self.back = Branch(BranchEnum.backward, self.tmax)
        self.imag = Branch(BranchEnum.imaginary, self.beta)

    def test_domain_and_length(self):
        assert self.fwd.domain == BranchEnum.forward
        assert self.back.domain == BranchEnum.backward
        assert self.imag.domain == BranchEnum.imaginary

        assert self.fwd.length == self.tmax
        assert self.back.length == self.tmax
        assert self.imag.length == self.beta

    def test_end_points(self):
        assert self.fwd(0.0).val == 0.0
        assert self.fwd(1.0).val == self.tmax

        assert self.back(0.0).val == self.tmax
        assert self.back(1.0).val == 0.0

        assert self.imag(0.0).val == 0.0
        assert self.imag(1.0).val == -1.0j * self.beta

    def test_evaluate_midpoint(self):
        p = self.back.evaluate(0.25)
        assert p == BranchPoint(1.5, 0.25, BranchEnum.backward)
        assert np.isclose(self.imag(0.5).val, -1.5j)

    def test_negative_length(self):
        with pytest.raises(ConfigurationError):
            Branch(BranchEnum.forward, -1.0)


class TestContour:

    def test_branches_in_canonical_order(self):
        c = Contour(ContourEnum.full, tmax=2.0, beta=5.0)
        assert [b.domain for b in c.branches] == [BranchEnum.forward, BranchEnum.backward, BranchEnum.imaginary]

        k = Contour(ContourEnum.keldysh, tmax=2.0)
        assert [b.domain for b in k.branches] == [BranchEnum.forward, BranchEnum.backward]

        m = Contour(ContourEnum.imaginary, beta=5.0)
        assert [b.domain for b in m.branches] == [BranchEnum.imaginary]

    def test_twist(self):
        c = Contour(ContourEnum.full, tmax=2.0, beta=5.0)
        original = [b.domain for b in c.branches]

        same = twist(c)
        assert same is c
        assert [b.domain for b in c.branches] == [BranchEnum.backward, BranchEnum.imaginary, BranchEnum.forward]

        c.twist().twist()
        assert [b.domain for b in c.branches] == original

    def test_nbranches(self):
        assert nbranches(ContourEnum.full) == 3
        assert nbranches(ContourEnum.keldysh) == 2
        assert nbranches(ContourEnum.imaginary) == 1

    def test_get_branch(self):
        c = twist(Contour(ContourEnum.full, tmax=2.0, beta=5.0))
        for d in BranchEnum:
            assert get_branch(c, d).domain == d
        assert c.get_branch(BranchEnum.imaginary).length == 5.0

        k = Contour(ContourEnum.keldysh, tmax=2.0)
        assert k.get_branch(BranchEnum.imaginary) is None

    def test_negative_parameters(self):
        with pytest.raises(ConfigurationError):
            Contour(ContourEnum.full, tmax=-1.0, beta=1.0)
        with pytest.raises(ConfigurationError):
            Contour(ContourEnum.imaginary, beta=-1.0)


class TestHeaviside:

    def setup_method(self):
        self.c = Contour(ContourEnum.full, tmax=2.0, beta=5.0)
        self.fwd, self.back, self.imag = self.c.branches

    def test_same_branch(self):
        assert heaviside(self.fwd(0.7), self.fwd(0.2))
        assert not heaviside(self.fwd(0.2), self.fwd(0.7))
        assert heaviside(self.fwd(0.5), self.fwd(0.5))
        assert heaviside(self.c, self.back(0.7), self.back(0.2))

    def test_canonical_order(self):
        assert theta(self.imag(0.0), self.back(1.0))
        assert theta(self.back(0.0), self.fwd(1.0))
        assert not theta(self.fwd(1.0), self.back(0.0))
        assert not theta(self.fwd(0.0), self.imag(0.0))

    def test_contour_order(self):
        # The point on the branch met first in the contour is the later one
        assert heaviside(self.c, self.fwd(0.0), self.imag(1.0))
        assert not heaviside(self.c, self.imag(1.0), self.fwd(0.0))

        self.c.twist()
        assert heaviside(self.c, self.back(0.5), self.fwd(0.5))
        assert heaviside(self.c, self.imag(0.5), self.fwd(0.5))
        assert not heaviside(self.c, self.imag(0.5), self.back(0.5))

    def test_shared_end_points_use_branch_membership(self):
        # fwd(1) and back(0) carry the same time value
        assert self.fwd(1.0).val == self.back(0.0).val
        assert theta(self.back(0.0), self.fwd(1.0))
        assert not theta(self.fwd(1.0), self.back(0.0))

    def test_foreign_branch(self):
        m = Contour(ContourEnum.imaginary, beta=5.0)
        with pytest.raises(ConfigurationError):
            heaviside(m, self.fwd(0.1), self.back(0.2))
