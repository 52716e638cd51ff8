"""Services for git-sync-keeper.

- file_classifier: recognise files written by automatic sync
- status_service: reduce repository state to a single SyncState
- remote_service: single named remote configuration
- workflow_service: publish/push/pull/sync under one operation guard
- scheduler_service: periodic automatic sync
- settings_service: persisted auto-sync settings and change notifications
"""
