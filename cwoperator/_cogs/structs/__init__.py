"""
The data structures of the operator: raw bodies as they come from/to the API,
the typed view of the custom resource, resource references, and ports.

All the structures are purely data-manipulative and computational.
No external calls or any i/o activities are done here.
"""
