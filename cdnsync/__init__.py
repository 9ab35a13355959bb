"""
cdnsync: static-site publish and CDN synchronization.

Builds a Hugo site and additively syncs the output to an
S3-compatible object store (Wasabi), one environment target per run.
"""

__version__ = "1.0.0"
__author__ = "SupportTools"
