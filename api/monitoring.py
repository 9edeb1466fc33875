"""
MongoDB connection-state logging.

The driver reconnects on its own; this listener only reports transitions
(connected, error, disconnected). It never affects request handling.
"""

import structlog
from pymongo import monitoring

logger = structlog.get_logger(__name__)


class ConnectionStateLogger(monitoring.TopologyListener, monitoring.ServerHeartbeatListener):
    """Logs topology reachability changes and failed heartbeats."""

    def __init__(self):
        self.connected = False

    def opened(self, event):
        logger.info("Connecting to MongoDB", topology_id=str(event.topology_id))

    def description_changed(self, event):
        new_description = event.new_description
        reachable = new_description.has_readable_server() or new_description.has_writable_server()

        if reachable and not self.connected:
            self.connected = True
            logger.info("MongoDB connected", topology_type=new_description.topology_type_name)
        elif not reachable and self.connected:
            self.connected = False
            logger.warning("MongoDB disconnected", topology_type=new_description.topology_type_name)

    def closed(self, event):
        if self.connected:
            self.connected = False
            logger.warning("MongoDB disconnected", topology_id=str(event.topology_id))

    def started(self, event):
        pass

    def succeeded(self, event):
        pass

    def failed(self, event):
        logger.error(
            "MongoDB connection error",
            address=f"{event.connection_id[0]}:{event.connection_id[1]}",
            error=str(event.reply)
        )
