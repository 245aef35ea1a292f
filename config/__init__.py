"""
Configuration for the workstation provisioner.
"""
