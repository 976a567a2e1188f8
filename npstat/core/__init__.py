"""
npstat.core
===========

Infrastructure shared by every calculator: typed names and tags, the variable
model, the validity filter, calculator base classes and errors.
"""
