"""
Workstation provisioner: catalog, installers and installation orchestrator.
"""

__version__ = "0.1.0"
