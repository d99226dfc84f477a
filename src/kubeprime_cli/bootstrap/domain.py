"""Domain resolution for the ingress endpoint.

Turns the ingress address (an external IP or a load balancer hostname) into
the wildcard domain used to expose services, defaulting to <ip>.nip.io.
"""

from __future__ import annotations

import ipaddress
import socket
import time
from collections.abc import Callable

from ..errors import KubeprimeError, ValidationError
from ..prompts import Prompter
from ..retry import RetryPolicy, retry
from ..shared.logging import get_logger
from .providers import Provider

logger = get_logger(__name__)

NIP_IO_SUFFIX = "nip.io"
AWS_HOST_SUFFIX = ".amazonaws.com"

# 30 attempts, 10 seconds apart: five minutes for DNS to catch up
ADDRESS_LOOKUP_POLICY = RetryPolicy(max_attempts=30, delay_seconds=10)


def is_ip_address(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def lookup_ip(hostname: str) -> str:
    """First non-loopback IP a hostname resolves to.

    Raises:
        KubeprimeError: If the name does not resolve (yet).
    """
    try:
        infos = socket.getaddrinfo(hostname, None)
    except socket.gaierror as e:
        raise KubeprimeError(f"Address cannot be resolved yet {hostname}", retryable=True) from e
    for info in infos:
        candidate = info[4][0]
        if candidate and not ipaddress.ip_address(candidate).is_loopback:
            return candidate
    raise KubeprimeError(f"Address cannot be resolved yet {hostname}", retryable=True)


class DomainResolver:
    """Derive the domain from the ingress address."""

    def __init__(
        self,
        prompter: Prompter,
        lookup: Callable[[str], str] = lookup_ip,
        lookup_policy: RetryPolicy = ADDRESS_LOOKUP_POLICY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.prompter = prompter
        self.lookup = lookup
        self.lookup_policy = lookup_policy
        self.sleep = sleep

    def default_domain(self, address: str) -> str:
        """Suggested domain for an address: <ip>.nip.io when it is (or resolves to) an IP."""
        if not address:
            return ""

        add_nip = True
        if not is_ip_address(address):
            logger.info("ingress address is not an IP address", address=address)
            resolved = ""
            if self.prompter.confirm(
                "Would you like to wait and resolve this address to an IP address "
                "and use it for the domain?",
                default=True,
            ):
                try:
                    resolved = retry(
                        self.lookup_policy,
                        lambda: self.lookup(address),
                        description=f"resolve {address}",
                        sleep=self.sleep,
                    )
                except KubeprimeError:
                    resolved = ""
            if resolved:
                address = resolved
            else:
                add_nip = False
                logger.warning(
                    "could not resolve the ingress address into an IP address, "
                    "please figure out the domain by hand",
                    address=address,
                )

        if add_nip and not address.endswith(AWS_HOST_SUFFIX):
            return f"{address}.{NIP_IO_SUFFIX}"
        return address

    def resolve(
        self,
        requested_domain: str,
        provider: Provider,
        address: str,
    ) -> str:
        """Return the domain to use.

        Args:
            requested_domain: Domain given by flag, configuration or an earlier prompt.
            provider: Resolved provider.
            address: External IP or load balancer hostname of the ingress service.

        Raises:
            ValidationError: If no domain can be determined.
        """
        if requested_domain:
            return requested_domain

        if provider in (Provider.AWS, Provider.EKS):
            logger.info(
                "on AWS a custom DNS name is recommended to use all availability zones",
                address=address,
            )

        default = self.default_domain(address)
        if self.prompter.interactive:
            logger.info("configure a wildcard DNS entry pointing at the load balancer", address=address)
        else:
            logger.info("no domain flag provided, using default", domain=default)

        domain = self.prompter.text("Domain", default=default).strip()
        if not domain:
            raise ValidationError("No domain was specified")
        return domain
