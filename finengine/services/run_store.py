import copy
import logging
from typing import Any, Dict, List, Optional

from finengine.core.types import RunConfiguration

logger = logging.getLogger(__name__)


class InMemoryRunStore:
    """Run configurations and snapshot history kept in process memory.

    Serves as both the configuration source and the snapshot store.
    """

    def __init__(self):
        self._configurations: Dict[str, RunConfiguration] = {}
        self._snapshots: Dict[str, List[Dict[str, Any]]] = {}

    def add_configuration(self, configuration: RunConfiguration) -> None:
        self._configurations[configuration.run_id] = configuration

    def load(self, run_id: str) -> Optional[RunConfiguration]:
        return self._configurations.get(run_id)

    def save(self, snapshot: Dict[str, Any]) -> None:
        run_id = snapshot.get('run_id')
        if not run_id:
            raise ValueError("Snapshot is missing run_id")
        self._snapshots.setdefault(run_id, []).append(copy.deepcopy(snapshot))
        logger.debug("Snapshot stored", extra={"run_id": run_id, "status": snapshot.get('status')})

    def history(self, run_id: str) -> List[Dict[str, Any]]:
        return list(self._snapshots.get(run_id, []))

    def latest(self, run_id: str) -> Optional[Dict[str, Any]]:
        history = self._snapshots.get(run_id)
        return history[-1] if history else None
