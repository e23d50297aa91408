"""Display publisher module for pub/sub screen updates."""

import copy
import logging
from pubsub import pub

from ..models.session import Session
from ..models.ui import DisplayState

logger = logging.getLogger(__name__)

DISPLAY_TOPIC = "scribelt.display"


class DisplayPublisher:
    """Publishes display snapshots using pubsub.pub so screens can redraw."""

    def __init__(self, topic: str = DISPLAY_TOPIC):
        """Initialize display publisher.

        Args:
            topic: Pub/sub topic name for display updates
        """
        self.topic = topic
        logger.info(f"DisplayPublisher initialized with topic: {topic}")

    def publish(self, display: DisplayState, session: Session) -> None:
        """Publish copies of the display and session state.

        Args:
            display: Current display state
            session: Current session state
        """
        pub.sendMessage(self.topic, display=copy.copy(display), session=copy.copy(session))
