"""
Job runners for the expiry notification feature.
"""

from .expiry_check_job import run_expiry_check_once, start_expiry_check_scheduler

__all__ = ["start_expiry_check_scheduler", "run_expiry_check_once"]
