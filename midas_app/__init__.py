"""
Midas App - Batch Trade-Simulation Orchestrator

Backend core of the Midas trading dashboard. Resolves which screened
candidates take part in a batch backtest, derives concrete stop-loss and
take-profit prices for each, drives the remote trade simulator across the
selection while tolerating per-item failures, and summarizes the results.
"""

__version__ = "0.1.0"
__author__ = "Midas Team"
