import numpy as np
from numba import njit



@njit
def fermi(e, beta):
    return 1.0 / (np.exp(beta * e) + 1.0)


@njit
def hybridization_kernel(w, dt, theta, beta):
    # Both branches keep the exponentials bounded for either sign of w
    if w > 0.0:
        return np.exp(-1j * w * (dt - 1j * (1.0 - theta) * beta)) / (np.exp(-beta * w) + 1.0)
    else:
        return np.exp(-1j * w * (dt + 1j * theta * beta)) / (np.exp(beta * w) + 1.0)


@njit
def trapezoid(values, h):
    n = values.shape[0]
    if n < 2:
        return 0.0 * h
    s = 0.5 * (values[0] + values[n-1])
    for i in range(1, n-1):
        s += values[i]
    return h * s
