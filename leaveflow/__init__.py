"""leaveflow: multi-level approval workflow engine for leave requests."""

__version__ = "0.1.0"
