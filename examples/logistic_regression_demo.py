"""Logistic regression example: likelihood-ratio test for one covariate.

Fits a null model (one covariate) and an alternative (two covariates) to
synthetic data and reports the likelihood-ratio statistic 2 (LL_alt - LL_null).
"""

from __future__ import annotations

import numpy as np

from qnopt import BFGSConfig, LogisticRegression, likelihood_ratio


def main() -> None:
    """Fit nested logistic models and compare them."""
    rng = np.random.default_rng(0)
    n_samples = 500

    X = rng.standard_normal((n_samples, 2))
    logits = 0.8 * X[:, 0] - 1.2 * X[:, 1] - 0.3
    y = (rng.random(n_samples) < 1.0 / (1.0 + np.exp(-logits))).astype(int)

    config = BFGSConfig(max_num_evaluations_wolfe_search=20)

    null = LogisticRegression(1)
    null.set_samples(X[:, :1], y)
    null.learn(config)

    alt = LogisticRegression(2)
    alt.set_samples(X, y)
    result = alt.learn(config)

    print(f"Null model: {null}")
    print(f"Alternative model: {alt}")
    print(f"Alternative fit: {result.message}")
    print(f"Training accuracy: {np.mean(alt.predict(X) == y):.3f}")
    print(f"Likelihood ratio statistic: {likelihood_ratio(null, alt):.3f}")


if __name__ == "__main__":
    main()
