import numpy as np
import pytest

from qnopt.models import LogisticRegression, likelihood_ratio
from qnopt.optimize import BFGSConfig, Status, approx_grad

CONFIG = BFGSConfig(max_num_evaluations_wolfe_search=20)


def synthetic_samples(rng, n_samples=300):
    X = rng.standard_normal((n_samples, 2))
    logits = 1.5 * X[:, 0] - 2.0 * X[:, 1] + 0.5
    y = (rng.random(n_samples) < 1.0 / (1.0 + np.exp(-logits))).astype(int)
    return X, y


def test_learn_converges_on_noisy_data(rng):
    X, y = synthetic_samples(rng)
    model = LogisticRegression(2)
    model.set_samples(X, y)
    result = model.learn(CONFIG)
    assert result.status is Status.CONVERGED
    assert np.max(np.abs(model.current_gradient())) <= CONFIG.tolerance
    assert model.weights[0] > 0
    assert model.weights[1] < 0
    assert np.allclose(model.weights, [1.5, -2.0], atol=1.0)


def test_gradient_matches_finite_differences(rng):
    X, y = synthetic_samples(rng, n_samples=50)
    model = LogisticRegression(2, l2=0.3)
    model.set_samples(X, y)

    def energy(theta):
        model.set_parameters(theta)
        return model.evaluate()

    theta = rng.standard_normal(3)
    numeric = approx_grad(energy, theta)
    energy(theta)
    assert np.allclose(model.current_gradient(), numeric, atol=1e-5)


def test_learn_restarts_from_zero(rng):
    X, y = synthetic_samples(rng, n_samples=100)
    model = LogisticRegression(2)
    model.set_samples(X, y)
    first = model.learn(CONFIG)
    model.set_parameters(np.array([50.0, -50.0, 50.0]))
    second = model.learn(CONFIG)
    assert np.allclose(first.x, second.x, atol=1e-6)


def test_log_likelihood_at_zero_parameters():
    model = LogisticRegression(1)
    model.set_samples(np.array([[0.5], [-1.0], [2.0], [0.0]]), np.array([1, 0, 1, 1]))
    assert model.log_likelihood() == pytest.approx(-4 * np.log(2.0))


def test_likelihood_ratio_of_nested_models(rng):
    X, y = synthetic_samples(rng)
    null = LogisticRegression(1)
    null.set_samples(X[:, :1], y)
    null.learn(CONFIG)
    alt = LogisticRegression(2)
    alt.set_samples(X, y)
    alt.learn(CONFIG)
    statistic = likelihood_ratio(null, alt)
    assert statistic > 10.0


def test_ridge_penalty_handles_separable_data():
    X = np.array([[-2.0], [-1.0], [1.0], [2.0]])
    y = np.array([0, 0, 1, 1])
    model = LogisticRegression(1, l2=1.0)
    model.set_samples(X, y)
    result = model.learn(CONFIG)
    assert result.success
    assert model.weights[0] > 0
    assert np.array_equal(model.predict(X), y)


def test_ridge_penalty_shrinks_weights(rng):
    X, y = synthetic_samples(rng)
    plain = LogisticRegression(2)
    plain.set_samples(X, y)
    plain.learn(CONFIG)
    ridge = LogisticRegression(2, l2=50.0)
    ridge.set_samples(X, y)
    ridge.learn(CONFIG)
    assert np.linalg.norm(ridge.weights) < np.linalg.norm(plain.weights)


def test_predict_proba_is_a_probability(rng):
    X, y = synthetic_samples(rng, n_samples=100)
    model = LogisticRegression(2)
    model.set_samples(X, y)
    model.learn(CONFIG)
    proba = model.predict_proba(X)
    assert np.all((proba > 0) & (proba < 1))
    assert np.mean(model.predict(X) == y) > 0.7


def test_invalid_samples():
    model = LogisticRegression(2)
    with pytest.raises(RuntimeError):
        model.evaluate()
    with pytest.raises(ValueError):
        model.set_samples(np.zeros((3, 3)), np.zeros(3))
    with pytest.raises(ValueError):
        model.set_samples(np.zeros((3, 2)), np.array([0, 1, 2]))
    with pytest.raises(ValueError):
        model.set_samples(np.zeros((3, 2)), np.zeros(4))
    with pytest.raises(ValueError):
        LogisticRegression(0)
