"""
One reconcile pass: apply the desired objects, prune the orphaned ones,
report the status back to the custom resource.
"""
