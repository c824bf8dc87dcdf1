import numpy as np
import pytest

from qnopt.diagnostics import debug_context
from qnopt.optimize import Problem, ProblemModel
from qnopt.optimize.line_search import WolfeLineSearch, simple_step_length


def quadratic_fun(x: np.ndarray) -> float:
    return float(x.T @ x)


def quadratic_grad(x: np.ndarray) -> np.ndarray:
    return 2 * x


def rosen(x: np.ndarray) -> float:
    return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2


def rosen_grad(x: np.ndarray) -> np.ndarray:
    return np.array(
        [
            -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
            200 * (x[1] - x[0] ** 2),
        ]
    )


def evaluated_model(fun, grad, x0) -> ProblemModel:
    model = ProblemModel(Problem(fun=fun, grad=grad), np.asarray(x0, dtype=float))
    model.evaluate()
    return model


def test_simple_step_length_decreases_energy():
    model = evaluated_model(quadratic_fun, quadratic_grad, [1.0, -2.0])
    energy = model.current_energy()
    result = simple_step_length(model, -model.current_gradient(), energy, step=1.0)
    # Step 1.0 overshoots to (-1, 2) with equal energy; 0.5 hits the minimum.
    assert result.success
    assert result.alpha == pytest.approx(0.5)
    assert result.fun < energy
    assert np.allclose(model.current_parameters(), 0.0)


def test_simple_step_length_restores_start_on_failure():
    model = evaluated_model(quadratic_fun, quadratic_grad, [1.0, -2.0])
    start = model.current_parameters()
    # Uphill direction never decreases the energy.
    result = simple_step_length(model, model.current_gradient(), model.current_energy(), max_tries=5)
    assert not result.success
    assert result.nfev == 6
    assert np.array_equal(model.current_parameters(), start)


def test_wolfe_conditions_rosenbrock():
    model = evaluated_model(rosen, rosen_grad, [-1.2, 1.0])
    x = model.current_parameters()
    grad = rosen_grad(x)
    direction = -grad
    search = WolfeLineSearch(model, max_num_evaluations=30)
    result = search.find_step_length(direction, initial_step=1.0)
    assert result.success
    alpha = result.alpha
    phi_alpha = rosen(x + alpha * direction)
    directional_derivative = rosen_grad(x + alpha * direction) @ direction
    assert phi_alpha <= rosen(x) + 1e-4 * alpha * (grad @ direction)
    assert abs(directional_derivative) <= 0.9 * abs(grad @ direction)
    assert np.allclose(model.current_parameters(), x + alpha * direction)


def test_wolfe_zoom_phase_triggered():
    model = evaluated_model(rosen, rosen_grad, [-1.2, 1.0])
    direction = -model.current_gradient()
    search = WolfeLineSearch(model, max_num_evaluations=30)
    result = search.find_step_length(direction, initial_step=5.0)
    assert result.success
    assert result.alpha < 1.0


def test_wolfe_bracketing_expands_short_steps():
    model = evaluated_model(quadratic_fun, quadratic_grad, [4.0, -3.0])
    direction = -model.current_gradient()
    search = WolfeLineSearch(model, extend_alpha_factor=3.0)
    search.reset(1e-3)
    result = search.find_step_length(direction)
    assert result.success
    assert result.alpha > 1e-3
    assert result.nfev > 1


def test_wolfe_memory_comes_from_reset():
    model = evaluated_model(quadratic_fun, quadratic_grad, [1.0, 1.0])
    search = WolfeLineSearch(model)
    search.reset(0.25)
    assert search.next_step_length == 0.25
    with pytest.raises(ValueError):
        search.reset(0.0)


def test_wolfe_memory_grows_back_to_unit_step():
    model = evaluated_model(quadratic_fun, quadratic_grad, [1.0, 2.0])
    search = WolfeLineSearch(model, c2=0.1)
    result = search.find_step_length(-model.current_gradient(), initial_step=2.0)
    assert result.alpha == pytest.approx(0.5)
    # 3 * 0.5 is capped at the unit step
    assert search.next_step_length == 1.0
    assert search.last_step_length == pytest.approx(0.5)


def test_wolfe_memory_after_short_step():
    # f = 50 x^2 along p = -g = -100: the exact step is 0.01
    model = evaluated_model(
        lambda x: float(50 * x @ x), lambda x: 100 * x, [1.0]
    )
    search = WolfeLineSearch(model, c2=0.1, extend_alpha_factor=3.0)
    result = search.find_step_length(-model.current_gradient(), initial_step=0.04)
    assert result.success
    assert result.alpha == pytest.approx(0.01)
    assert search.next_step_length == pytest.approx(0.03)

    # The next search starts from the remembered 0.03, overshoots and zooms in.
    model.set_parameters(np.array([0.5]))
    model.evaluate()
    second = search.find_step_length(-model.current_gradient())
    assert second.success
    assert second.alpha == pytest.approx(0.01)
    assert second.nfev == 2


def test_wolfe_exact_step_on_quadratic():
    # Cubic interpolation recovers the exact minimizer of a quadratic.
    model = evaluated_model(quadratic_fun, quadratic_grad, [1.0, 2.0])
    direction = -model.current_gradient()
    search = WolfeLineSearch(model, c2=0.1)
    result = search.find_step_length(direction, initial_step=2.0)
    assert result.success
    assert result.alpha == pytest.approx(0.5)


def test_wolfe_rejects_ascent_direction():
    model = evaluated_model(quadratic_fun, quadratic_grad, [1.0, 2.0])
    search = WolfeLineSearch(model)
    result = search.find_step_length(model.current_gradient())
    assert not result.success
    assert "descent" in result.message
    assert result.nfev == 0


def test_wolfe_budget_exhaustion_is_a_failure():
    # A linear objective has no Wolfe point: the slope never flattens.
    model = evaluated_model(lambda x: float(-x[0]), lambda x: np.array([-1.0]), [0.0])
    search = WolfeLineSearch(model, max_num_evaluations=4)
    result = search.find_step_length(np.array([1.0]))
    assert not result.success
    assert result.nfev == 4
    assert "budget" in result.message


def test_wolfe_budget_is_per_instance():
    model = evaluated_model(quadratic_fun, quadratic_grad, [1.0])
    first = WolfeLineSearch(model, max_num_evaluations=3)
    second = WolfeLineSearch(model, max_num_evaluations=25)
    assert first.max_num_evaluations == 3
    assert second.max_num_evaluations == 25


def test_wolfe_handles_non_finite_trial_energy():
    def fun(x):
        return np.inf if x[0] > 2.0 else float((x[0] - 1.0) ** 2)

    def grad(x):
        return np.array([np.inf if x[0] > 2.0 else 2.0 * (x[0] - 1.0)])

    model = evaluated_model(fun, grad, [0.0])
    search = WolfeLineSearch(model, max_num_evaluations=20)
    result = search.find_step_length(np.array([1.0]), initial_step=10.0)
    assert result.success
    assert 0.0 < result.alpha <= 2.0


def test_wolfe_invalid_parameters():
    model = evaluated_model(quadratic_fun, quadratic_grad, [1.0])
    with pytest.raises(ValueError):
        WolfeLineSearch(model, c1=0.9, c2=0.1)
    with pytest.raises(ValueError):
        WolfeLineSearch(model, extend_alpha_factor=1.0)
    with pytest.raises(ValueError):
        WolfeLineSearch(model, max_num_evaluations=0)


def test_debug_mode_rechecks_accepted_step():
    model = evaluated_model(rosen, rosen_grad, [-1.2, 1.0])
    search = WolfeLineSearch(model, max_num_evaluations=30)
    with debug_context(True):
        result = search.find_step_length(-model.current_gradient(), initial_step=1e-3)
    assert result.success
