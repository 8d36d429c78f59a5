"""Job descriptor construction and the per-job reproducibility log."""
