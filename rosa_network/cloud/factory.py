"""
Cloud provider factory for network resource stacks.
"""
import logging
from typing import Dict, Any

from rosa_network.cloud.provider import CloudProvider
from rosa_network.cloud.aws_provider import AWSProvider

logger = logging.getLogger(__name__)


class CloudProviderFactory:
    """Factory for creating cloud providers."""

    providers = {
        "aws": AWSProvider,
    }

    @staticmethod
    def create_provider(provider_type: str, config: Dict[str, Any]) -> CloudProvider:
        """Create a cloud provider of the specified type.

        Args:
            provider_type: Cloud provider type.
            config: Cloud provider configuration.

        Returns:
            Cloud provider instance.

        Raises:
            ValueError: If the provider type is not supported.
        """
        provider_class = CloudProviderFactory.providers.get(provider_type)
        if provider_class is None:
            raise ValueError(f"Unsupported cloud provider type: {provider_type}")
        provider = provider_class(config)
        logger.debug(f"Created cloud provider: {provider}")
        return provider
