"""Keep nodes from earlier runs alive on the first pass of a process.

The host store garbage-collects nodes that were neither recreated nor touched,
and only checks this against the first pass after the process starts. Touching
every node this plugin owns on that pass keeps still-valid nodes around even
when a pass does not recreate them. Later passes skip the work.
"""

from typing import Optional

from payload_source.core.constants import PLUGIN_NAME
from payload_source.core.logging import ContextualLogger
from payload_source.core.logging import logger as default_logger
from payload_source.platform.contexts.protocol import NodeSink
from payload_source.platform.sync.context import SyncSession


class StaleNodeReconciler:
    """Touches owned nodes once per session."""

    def __init__(self, owner: str = PLUGIN_NAME, logger: Optional[ContextualLogger] = None):
        """Create the reconciler.

        Args:
            owner: Owner name the host records on nodes created by this plugin
            logger: Optional contextual logger
        """
        self.owner = owner
        self.logger = logger or default_logger

    def reconcile(self, session: SyncSession, sink: NodeSink) -> int:
        """Touch owned nodes if this is the session's first pass.

        Returns:
            Number of nodes touched (0 on every pass after the first)
        """
        if not session.first_pass:
            return 0

        touched = 0
        for node in sink.get_all_nodes():
            if (node.get("internal") or {}).get("owner") != self.owner:
                continue
            sink.touch_node(node)
            touched += 1

        session.first_pass = False
        self.logger.debug(f"Touched {touched} nodes from previous runs")
        return touched
