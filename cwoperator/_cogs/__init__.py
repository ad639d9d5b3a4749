"""
Cogs are the low-level building blocks of the operator: no domain logic here.

Everything in ``_cogs`` can be used by ``_core``, but never the other way around.
"""
