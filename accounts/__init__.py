"""Account provisioning and lifecycle management for the Patient 360 backend.

This package contains the account models, the reference catalog provider,
the lifecycle/audit/statistics services and the administrative API that
exposes them to the dashboards.
"""
