"""Objective models that plug into the BFGS minimizer."""

from .logistic import LogisticRegression, likelihood_ratio
from .quadratic import QuadraticModel

__all__ = ["LogisticRegression", "QuadraticModel", "likelihood_ratio"]
