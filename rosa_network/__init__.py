"""
rosa-network: provision network resources for managed Kubernetes clusters.
"""
__version__ = "0.1.0"
