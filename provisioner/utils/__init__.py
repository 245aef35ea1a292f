"""
Utility modules for the workstation provisioner.
"""

from .logging import get_logger, setup_root_logger

__all__ = ["get_logger", "setup_root_logger"]
