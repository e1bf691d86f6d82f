"""Storage roots and data movement.

This module implements the root capability contract for the local
filesystem and S3, temporary storage, and rollback-protected transfers.
"""
