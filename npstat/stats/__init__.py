"""
Statistical methods and test schemes.

1. **Methods** (npstat.stats.methods):
   Mathematical building blocks independent of any request shape: the rank
   engine, distribution functions, descriptive maths and the exact
   Mann-Whitney U distribution.

2. **Schemes** (npstat.stats.schemes):
   One calculator per test family. Each calculator applies the validity
   filter to its raw inputs and composes the methods above.

Example:
--------
>>> from npstat.stats.methods.common.ranks import rank_table
>>> rank_table([2.0, 2.0, 1.0]).ranks
{1.0: 1.0, 2.0: 2.5}

>>> from npstat.stats.schemes.runs import RunsCalculator
>>> from npstat.core.variables import Variable
>>> calc = RunsCalculator(variable=Variable("x"), data=[1, 5, 1, 5, 1, 5])
>>> calc.runs_test()["median"].runs
6
"""
