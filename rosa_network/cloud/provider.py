"""
Cloud provider interface for network resource stacks.
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Any, Optional
import logging

from rosa_network.network.models import StackRequest, StackState

logger = logging.getLogger(__name__)


class CloudProvider(ABC):
    """Abstract base class for cloud providers."""

    def __init__(self, config: Dict[str, Any]):
        """Initialize cloud provider.

        Args:
            config: Cloud provider configuration.
        """
        self.config = config
        self.name = self.__class__.__name__
        self.region = config.get("region")
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    @abstractmethod
    def get_account_id(self) -> str:
        """Get the account ID of the current credentials.

        Returns:
            Account ID.
        """
        pass

    @abstractmethod
    def create_stack(self, request: StackRequest) -> str:
        """Create a stack from a rendered request.

        Args:
            request: Stack request.

        Returns:
            Stack ID.
        """
        pass

    @abstractmethod
    def describe_stack(self, stack_name: str) -> StackState:
        """Get the current state of a stack.

        Args:
            stack_name: Stack name or ID.

        Returns:
            Stack state.
        """
        pass

    @abstractmethod
    def get_stack_failure_reasons(self, stack_name: str) -> List[str]:
        """Get the status reasons of a stack's failed events, oldest first.

        Args:
            stack_name: Stack name or ID.

        Returns:
            List of status reasons.
        """
        pass

    @abstractmethod
    def delete_stack(self, stack_name: str) -> None:
        """Request deletion of a stack.

        Args:
            stack_name: Stack name or ID.
        """
        pass

    @abstractmethod
    def list_stacks(self, name_prefix: Optional[str] = None) -> List[Dict[str, Any]]:
        """List live stacks, optionally filtered by name prefix.

        Args:
            name_prefix: Only return stacks whose name starts with this prefix.

        Returns:
            List of stack summaries with ``StackName``, ``StackStatus`` and ``CreationTime``.
        """
        pass

    def with_region(self, region: str) -> "CloudProvider":
        """Get a provider of the same type bound to another region.

        Args:
            region: Region name.

        Returns:
            This provider if it already targets the region, a new one otherwise.
        """
        if region == self.region:
            return self
        return self.__class__({**self.config, "region": region})

    def __str__(self) -> str:
        """String representation of this cloud provider.

        Returns:
            String representation.
        """
        return f"{self.name} ({self.region})"
