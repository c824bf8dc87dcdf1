import numpy as np
import pytest

from qnopt.optimize.utils import approx_grad


def test_approx_grad_matches_linear_function():
    def fun(x: np.ndarray) -> float:
        return float(3 * x[0] - 2 * x[1])

    grad = approx_grad(fun, np.array([0.2, -0.1]))
    assert np.allclose(grad, np.array([3.0, -2.0]), atol=1e-6)


def test_approx_grad_matches_quadratic():
    def fun(x: np.ndarray) -> float:
        return float(x[0] ** 2 + 3 * x[1] ** 2)

    grad = approx_grad(fun, np.array([0.5, -1.5]))
    assert np.allclose(grad, np.array([1.0, -9.0]), atol=1e-6)


def test_approx_grad_counts_evaluations():
    grad, evals = approx_grad(lambda x: float(np.sum(x)), np.zeros(4), return_evals=True)
    assert evals == 8
    assert np.allclose(grad, np.ones(4))


def test_approx_grad_invalid_eps():
    with pytest.raises(ValueError):
        approx_grad(lambda x: float(x[0]), np.array([0.0]), eps=0.0)
