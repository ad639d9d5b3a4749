"""
The operator's domain: resolving the ports, building the manifests,
and reconciling them with the cluster in one sequential pass.
"""
