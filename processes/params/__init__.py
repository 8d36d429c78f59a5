"""Per-job parameter loading and three-tier merge.

Precedence, highest first: command line, parameter document, system
configuration, built-in defaults (``pipeline/defaults/param.yaml``).
"""
