"""
Connectivity tracking.

ConnectivityMonitor is the host-side event source (it knows whether the
machine is online and tells listeners when that changes). ConnectivityObserver
holds a read-only "online" signal for one consumer and releases its listener
on close. Neither gates or queues any storage work.
"""

import logging
import socket
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Listener = Callable[[bool], None]


def probe_connectivity(host: str = "1.1.1.1", port: int = 53, timeout: float = 1.5) -> bool:
	"""Return True if a TCP connection to host:port can be opened."""
	try:
		with socket.create_connection((host, port), timeout=timeout):
			return True
	except OSError:
		return False


class ConnectivityMonitor:
	"""Current online state plus transition events."""

	def __init__(self, online: bool = True):
		self._online = online
		self._listeners: list[Listener] = []

	@classmethod
	def from_probe(cls, host: str = "1.1.1.1", port: int = 53, timeout: float = 1.5) -> "ConnectivityMonitor":
		"""Create a monitor whose initial state comes from a reachability probe."""
		return cls(online=probe_connectivity(host, port, timeout))

	def is_online(self) -> bool:
		return self._online

	def add_listener(self, listener: Listener) -> None:
		self._listeners.append(listener)

	def remove_listener(self, listener: Listener) -> None:
		if listener in self._listeners:
			self._listeners.remove(listener)

	@property
	def listener_count(self) -> int:
		return len(self._listeners)

	def set_online(self, online: bool) -> None:
		"""Record a connectivity change; listeners only hear about transitions."""
		if online == self._online:
			return
		self._online = online
		logger.info(f"Connectivity changed: {'online' if online else 'offline'}")
		for listener in list(self._listeners):
			try:
				listener(online)
			except Exception:
				logger.exception("Connectivity listener failed")


class ConnectivityObserver:
	"""
	Read-only online/offline signal backed by a ConnectivityMonitor.

	Usage:
		with ConnectivityObserver(monitor) as observer:
			if not observer.online:
				...
	"""

	def __init__(self, monitor: ConnectivityMonitor):
		self._monitor: Optional[ConnectivityMonitor] = monitor
		self._online = monitor.is_online()
		monitor.add_listener(self._handle_change)

	@property
	def online(self) -> bool:
		return self._online

	def _handle_change(self, online: bool) -> None:
		self._online = online

	def close(self) -> None:
		"""Stop listening. Safe to call more than once."""
		if self._monitor is not None:
			self._monitor.remove_listener(self._handle_change)
			self._monitor = None

	def __enter__(self) -> "ConnectivityObserver":
		return self

	def __exit__(self, exc_type, exc, tb) -> None:
		self.close()
