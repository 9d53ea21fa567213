"""Mesh version warden (MESHWARDEN).

Decide and perform safe Istio install, upgrade, proxy reset and uninstall actions
while keeping every mesh component within one minor version of the target.
"""

__version__ = "0.1.0"
__author__ = "Platform Engineering Team"
__license__ = "Apache-2.0"
