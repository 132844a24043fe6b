"""Database layer for leaveflow."""
