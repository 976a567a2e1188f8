"""
Mathematical building blocks for the nonparametric tests.

Available methods:
- `common`: ranks, distribution functions, descriptive maths
- `exact`: exact null distributions
"""
