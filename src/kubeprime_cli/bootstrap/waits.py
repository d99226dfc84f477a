"""Bounded polling waits for cluster state.

This module blocks until a deployment exists and is ready, or until a
LoadBalancer service gets an external address. Every wait has a
wall-clock ceiling; expiry raises WaitTimeoutError.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeVar

from ..errors import CommandError, WaitTimeoutError
from ..shared.logging import get_logger
from .kubectl import KubectlClient, deployment_is_ready, load_balancer_address

T = TypeVar("T")

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL = 5.0
DEPLOYMENT_READY_TIMEOUT = 10 * 60
EXTERNAL_IP_TIMEOUT = 10 * 60
INJECTED_INGRESS_TIMEOUT = 30 * 60


class ClusterWaiter:
    """Poll cluster state until a condition holds or the timeout expires."""

    def __init__(
        self,
        kubectl: KubectlClient,
        interval_seconds: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize waiter.

        Args:
            kubectl: Client used to query the cluster.
            interval_seconds: Seconds between polls.
            sleep: Sleep function, replaceable in tests.
            clock: Monotonic clock, replaceable in tests.
        """
        self.kubectl = kubectl
        self.interval_seconds = interval_seconds
        self.sleep = sleep
        self.clock = clock

    def poll(
        self,
        what: str,
        probe: Callable[[], T | None],
        timeout_seconds: float,
    ) -> T:
        """Call probe until it returns a truthy value.

        Transient kubectl failures during a poll count as "not yet".

        Raises:
            WaitTimeoutError: If the deadline passes first.
        """
        deadline = self.clock() + timeout_seconds
        while True:
            try:
                value = probe()
            except CommandError as e:
                logger.debug("poll failed", what=what, error=str(e))
                value = None
            if value:
                return value
            if self.clock() >= deadline:
                raise WaitTimeoutError(what=what, timeout_seconds=timeout_seconds)
            self.sleep(self.interval_seconds)

    def wait_for_deployment_ready(
        self,
        name: str,
        namespace: str,
        timeout_seconds: float = DEPLOYMENT_READY_TIMEOUT,
    ) -> None:
        """Wait for a deployment to report all replicas ready.

        A deployment that does not exist yet counts as not ready, so this also
        covers deployments created by someone else (vendor-injected ingress).
        """
        self.poll(
            f"deployment {namespace}/{name} to be ready",
            lambda: deployment_is_ready(self.kubectl.get_deployment(name, namespace)),
            timeout_seconds,
        )

    def wait_for_external_ip(
        self,
        service: str,
        namespace: str,
        timeout_seconds: float = EXTERNAL_IP_TIMEOUT,
    ) -> str:
        """Wait for a LoadBalancer service to be assigned an address.

        Returns:
            The external IP or hostname.
        """
        return self.poll(
            f"an external IP on service {namespace}/{service}",
            lambda: load_balancer_address(self.kubectl.get_service(service, namespace)),
            timeout_seconds,
        )
