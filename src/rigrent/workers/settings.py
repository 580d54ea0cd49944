"""arq worker settings module.

Import path for arq CLI: arq rigrent.workers.settings.WorkerSettings
"""

from __future__ import annotations

from rigrent.workers.sweep_worker import WorkerSettings

__all__ = ["WorkerSettings"]
