"""Utility modules for CommitCraft."""
