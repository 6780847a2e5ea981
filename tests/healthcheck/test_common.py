from tests.test_template import TestTemplate
from common import global_config


class TestCommonHealthCheck(TestTemplate):
    """Test that the common health check flag is enabled."""

    def test_dot_global_config_health_check_enabled(self):
        """
        Test that the dot_global_config_health_check flag is set to True.

        This test ensures that the configuration system is working correctly.
        The value is set to True in global_config.yaml and should be properly loaded.
        """
        assert global_config.dot_global_config_health_check is True, (
            "The dot_global_config_health_check flag should be set to True in .global_config.yaml. "
            "This indicates that the custom configuration is being properly loaded."
        )

    def test_campaign_defaults(self):
        """Batching and image limits used by the workflow endpoints."""
        assert global_config.stock_photos.batch_size == 5
        assert global_config.stock_photos.batch_delay_seconds == 1.0
        assert global_config.campaign.max_images == 3
        assert global_config.campaign.max_image_prompts == 5
        assert global_config.webhook.create_path == "create-campaing"
        assert global_config.bulk_content.allowed_counts == [5, 25, 50, 100]
        assert global_config.bulk_content.batch_size == 10
        assert global_config.bulk_content.max_tokens == 2000
