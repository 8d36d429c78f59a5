"""Orchestrator for running the BFF pipeline stages end-to-end.

This package resolves a job, records it, and drives the
vcf2bff → bff2html → bff2mongodb stages as external programs, stopping at the
first failure.

CLI usage is available via `python -m processes.orchestrator` or `beacon`.
"""
