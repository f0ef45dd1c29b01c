from secretarchive.workflows.backup import BackupWorkflow, run_backup

__all__ = ["BackupWorkflow", "run_backup"]
