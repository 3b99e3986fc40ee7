"""Socket reachability predicate."""

import logging
import socket
from typing import Callable

from ..models import IPSocket

logger = logging.getLogger(__name__)


class SocketOpen:
    """True once a TCP connection to the socket can be established.

    A refused or timed out connection means the socket is not reachable
    yet. It is reported as ``False`` so the poller keeps trying.

    :param timeout: Connect timeout in seconds for a single attempt
    :type timeout: float
    :param connect: Connection factory, ``socket.create_connection`` by default
    """

    def __init__(
        self,
        timeout: float = 3.0,
        connect: Callable[..., socket.socket] = socket.create_connection,
    ):
        self.timeout = timeout
        self._connect = connect

    def __call__(self, target: IPSocket) -> bool:
        logger.debug(f"testing socket {target}")
        try:
            conn = self._connect((target.address, target.port), timeout=self.timeout)
        except OSError as e:
            logger.debug(f"socket {target} not reachable: {e}")
            return False
        conn.close()
        return True

    def __repr__(self) -> str:
        return f"SocketOpen(timeout={self.timeout})"
