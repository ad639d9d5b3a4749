"""
A minimalistic client for the Kubernetes API, based on ``aiohttp``.

Only the calls needed by the reconciliation are implemented:
reading, listing, creating, replacing, deleting, patching, and posting events.
"""
