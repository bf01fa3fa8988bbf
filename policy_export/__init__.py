"""
IAM Policy Export

Exports the default version document of every IAM managed policy visible to
the caller as <policy-name>.json files and bundles them into a zip archive.
"""

__version__ = "1.0.0"
