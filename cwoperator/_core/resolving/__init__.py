"""
Inference of the network surface (ports & protocols) from the agent's configs.
"""
