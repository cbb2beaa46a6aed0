"""
hostreconcile

Host-side configuration reconciler. Observes network adapter and registry
settings through PowerShell, compares them with compiled-in desired values and
applies corrective actions only when they diverge, either once or from a
background monitor loop.
"""

__version__ = "0.1.0"
