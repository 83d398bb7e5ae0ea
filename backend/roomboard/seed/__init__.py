"""
Seed module for populating the Roomboard database with demo data.
"""

from .seed_data import run_seed

__all__ = ["run_seed"]
