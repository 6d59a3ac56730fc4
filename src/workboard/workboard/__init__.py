"""Workboard package.

Scheduling and completion-tracking engine for the firm dashboard: recurring
obligations, per-client completion tracking and the monthly work roster.
Organized by feature modules with a thin Flask controller layer over
service/repository layers.
"""
