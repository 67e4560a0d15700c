"""Payload-free notifications between the host and keyboard processes."""

import os
import socket
import logging
import threading
import uuid
from pathlib import Path
from typing import Callable, Dict, Optional

from pubsub import pub

from ..models.events import NotificationEvent

logger = logging.getLogger(__name__)

_MAX_NAME_BYTES = 256


class NotificationCenter:
    """Unreliable one-way signals keyed by :class:`NotificationEvent`.

    Each listening process binds a Unix datagram socket in a shared directory.
    Posting sends the event name to every socket found there, so delivery is
    best effort: a process that is not listening simply misses the signal and
    must re-read shared state on its own lifecycle events. Received names are
    dispatched through pypubsub on a topic private to this instance.
    """

    def __init__(self, directory: str):
        """Initialize notification center.

        Args:
            directory: Shared directory holding the listening endpoints
        """
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

        self.endpoint_id = uuid.uuid4().hex[:12]
        self.socket_path = self.directory / f"{os.getpid()}-{self.endpoint_id}.sock"
        self._topic_root = f"notify_{self.endpoint_id}"

        self._handlers: Dict[NotificationEvent, Callable[[], None]] = {}
        self._lock = threading.Lock()
        self._socket: Optional[socket.socket] = None
        self._listener_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

        logger.info(f"NotificationCenter initialized in: {self.directory}")

    def _topic(self, event: NotificationEvent) -> str:
        return f"{self._topic_root}_{event.topic_name}"

    @property
    def is_listening(self) -> bool:
        return self._socket is not None

    def post_notification(self, event: NotificationEvent) -> None:
        """Fire-and-forget ``event`` to every listening process, this one included."""
        payload = event.value.encode('utf-8')
        delivered = 0

        for endpoint in sorted(self.directory.glob("*.sock")):
            sender = socket.socket(socket.AF_UNIX, socket.SOCK_DGRAM)
            sender.setblocking(False)
            try:
                sender.sendto(payload, str(endpoint))
                delivered += 1
            except (ConnectionRefusedError, FileNotFoundError):
                # Nobody bound to it any more: the owning process is gone
                logger.debug(f"Removing stale endpoint: {endpoint.name}")
                try:
                    endpoint.unlink()
                except FileNotFoundError:
                    pass
            except OSError as e:
                logger.debug(f"Could not deliver {event.value} to {endpoint.name}: {e}")
            finally:
                sender.close()

        logger.info(f"[Bridge] Posted notification: {event.value} ({delivered} endpoints)")

    def add_observer(self, event: NotificationEvent, callback: Callable[[], None]) -> None:
        """Register the handler for ``event``, replacing any previous one."""
        with self._lock:
            self._ensure_listening()
            topic = self._topic(event)

            previous = self._handlers.get(event)
            if previous is not None:
                pub.unsubscribe(previous, topic)

            # pypubsub only keeps weak references; the dict keeps the handler alive
            self._handlers[event] = callback
            pub.subscribe(callback, topic)

        logger.info(f"[Bridge] Added observer for: {event.value}")

    def remove_observer(self, event: NotificationEvent) -> None:
        with self._lock:
            callback = self._handlers.pop(event, None)
            if callback is not None:
                pub.unsubscribe(callback, self._topic(event))
                logger.info(f"[Bridge] Removed observer for: {event.value}")

    def has_observer(self, event: NotificationEvent) -> bool:
        return event in self._handlers

    def _ensure_listening(self) -> None:
        if self._socket is not None:
            return

        sock = socket.socket(socket.AF_UNIX, socket.SOCK_DGRAM)
        try:
            sock.bind(str(self.socket_path))
        except OSError as e:
            # e.g. the path exceeds the AF_UNIX limit; state is still reconciled on appear
            sock.close()
            logger.warning(f"Not listening for notifications at {self.socket_path}: {e}")
            return
        sock.settimeout(0.2)
        self._socket = sock
        self._stop_event.clear()

        self._listener_thread = threading.Thread(target=self._listen_loop, daemon=True)
        self._listener_thread.name = "NotificationListener"
        self._listener_thread.start()
        logger.debug(f"Listening for notifications on {self.socket_path.name}")

    def _listen_loop(self) -> None:
        """Internal method: receive loop in background thread."""
        sock = self._socket
        while not self._stop_event.is_set():
            try:
                data = sock.recv(_MAX_NAME_BYTES)
            except socket.timeout:
                continue
            except OSError as e:
                if not self._stop_event.is_set():
                    logger.error(f"Notification listener stopped: {e}")
                break
            self._dispatch(data.decode('utf-8', errors='replace'))

    def _dispatch(self, wire_name: str) -> None:
        logger.info(f"[Bridge] Received notification: {wire_name}")
        event = NotificationEvent.from_wire(wire_name)
        if event is None:
            logger.warning(f"Ignoring unknown notification: {wire_name!r}")
            return
        if event not in self._handlers:
            logger.debug(f"No observer registered for: {wire_name}")
            return

        try:
            pub.sendMessage(self._topic(event))
        except Exception as e:
            logger.exception(f"Observer for {wire_name} failed: {e}")

    def close(self) -> None:
        """Stop listening, drop handlers and remove this process's endpoint."""
        with self._lock:
            for event, callback in list(self._handlers.items()):
                pub.unsubscribe(callback, self._topic(event))
            self._handlers.clear()

            if self._socket is None:
                return

            self._stop_event.set()
            listener = self._listener_thread
            if listener and listener.is_alive() and listener is not threading.current_thread():
                listener.join(timeout=1.0)
                if listener.is_alive():
                    logger.warning("Notification listener did not stop cleanly")
            self._socket.close()
            self._socket = None
            self._listener_thread = None

            try:
                self.socket_path.unlink()
            except FileNotFoundError:
                pass
        logger.info("NotificationCenter closed")
