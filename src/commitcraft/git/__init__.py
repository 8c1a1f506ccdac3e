"""Git-facing parts of CommitCraft: change collection, sanitizing and orchestration."""
