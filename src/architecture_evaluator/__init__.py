"""Cloud Architecture Evaluator.

Deterministic, explainable scoring of structured cloud deployment
descriptions: category scores, risk inventory, cost projection, maturity
tier and a phased improvement plan, with what-if simulation.
"""

__version__ = "1.0.0"
