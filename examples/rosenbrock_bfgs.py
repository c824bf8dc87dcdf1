"""
Example: BFGS on classic test functions.

Minimizes the Rosenbrock and Himmelblau functions with the packed-Hessian
BFGS minimizer and shows the effect of the recovery settings.
"""

import numpy as np

from qnopt import BFGSConfig, Problem, Status, bfgs


def rosenbrock(x):
    return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2


def rosenbrock_grad(x):
    return np.array(
        [
            -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
            200 * (x[1] - x[0] ** 2),
        ]
    )


def himmelblau(x):
    return (x[0] ** 2 + x[1] - 11) ** 2 + (x[0] + x[1] ** 2 - 7) ** 2


def example_rosenbrock():
    """Example: the banana valley from the classic start point."""
    print("=" * 60)
    print("Example 1: Rosenbrock function")
    print("=" * 60)

    problem = Problem(fun=rosenbrock, grad=rosenbrock_grad, dim=2)
    config = BFGSConfig(tolerance=1e-8, max_num_evaluations_wolfe_search=30)
    result = bfgs(problem, np.array([-1.2, 1.0]), config=config)
    print(f"Status: {result.status.value}")
    print(f"Minimizer: {result.x}")
    print(f"Energy: {result.fun:.3e}")
    print(f"Iterations: {result.nit}, evaluations: {result.nfev}")
    print()


def example_finite_differences():
    """Example: no analytic gradient, central differences instead."""
    print("=" * 60)
    print("Example 2: Himmelblau function without a gradient")
    print("=" * 60)

    problem = Problem(fun=himmelblau, dim=2)
    result = bfgs(problem, np.array([3.0, 1.5]), tolerance=1e-5, max_num_evaluations_wolfe_search=20)
    print(f"Status: {result.status.value}")
    print(f"Minimizer: {result.x}")
    print(f"Energy: {result.fun:.3e}")
    print()


def example_recovery():
    """Example: a badly scaled inverse Hessian forces kick-starts."""
    print("=" * 60)
    print("Example 3: Kick-start recovery")
    print("=" * 60)

    problem = Problem(fun=rosenbrock, grad=rosenbrock_grad, dim=2)
    config = BFGSConfig(allowed_max_h_factor=1e-2, max_num_kick_starts=2, num_steps_steepest_descent=5)
    result = bfgs(problem, np.array([-1.2, 1.0]), config=config)
    print(f"Status: {result.status.value}")
    print(f"Kick-starts used: {result.n_kick_starts}")
    if result.status is Status.ABORTED:
        print(f"Failure: {result.failure.value}")
        print(f"Best energy kept: {result.fun:.3e}")
    print()


if __name__ == "__main__":
    print("\n" + "=" * 60)
    print("qnopt - BFGS Examples")
    print("=" * 60 + "\n")

    example_rosenbrock()
    example_finite_differences()
    example_recovery()

    print("=" * 60)
    print("All examples completed successfully!")
    print("=" * 60)
