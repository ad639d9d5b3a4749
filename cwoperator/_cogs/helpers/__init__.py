"""
General-purpose helpers not related to the operator's domain.

These are things that should better be in the standard library
or in the dependencies. They do not depend on anything in the operator.
"""
