"""Tests for configuration defaults, context overrides and validation"""
import pytest
from traefik_ecs.config import (
    ConfigurationError,
    TaskDefinitionConfig,
    TraefikEcsConfig
)


class TestDefaults:
    """Test the default demo configuration"""

    def test_default_configuration_is_valid(self):
        """Test that the defaults pass validation"""
        TraefikEcsConfig.default().validate()

    def test_default_target_groups(self):
        """Test target group names, ports and health check codes"""
        config = TraefikEcsConfig.default()
        assert config.load_balancer.traefik_target_group.name == "traefik"
        assert config.load_balancer.traefik_target_group.port == 80
        assert config.load_balancer.traefik_target_group.healthy_http_codes == "200-202,404"
        assert config.load_balancer.traefik_api_target_group.name == "traefikapi"
        assert config.load_balancer.traefik_api_target_group.port == 8080
        assert config.load_balancer.traefik_api_target_group.healthy_http_codes == "200-202,300-302"

    def test_default_services(self):
        """Test whoami and Traefik service defaults"""
        config = TraefikEcsConfig.default()
        assert config.whoami.desired_count == 3
        assert config.whoami.image == "containous/whoami:v1.5.0"
        assert config.traefik.desired_count == 1
        assert config.traefik.image == "traefik:v2.7"
        assert config.traefik.log_level == "DEBUG"
        assert config.traefik.task_definition.cpu == 256
        assert config.traefik.task_definition.memory_limit_mib == 512

    def test_policy_actions_are_not_shared_between_instances(self):
        """Test that each IamConfig gets its own action list"""
        first = TraefikEcsConfig.default()
        second = TraefikEcsConfig.default()
        first.iam.traefik_policy_actions.append("ecs:ListServices")
        assert "ecs:ListServices" not in second.iam.traefik_policy_actions


class TestFromContext:
    """Test building configuration from CDK context and environment"""

    def test_empty_context_matches_defaults(self):
        """Test that no context and no environment yields the defaults"""
        assert TraefikEcsConfig.from_context({}, {}) == TraefikEcsConfig.default()

    def test_context_overrides(self):
        """Test that context keys override defaults"""
        config = TraefikEcsConfig.from_context({
            "vpc_id": "vpc-0abc",
            "cluster_name": "edge",
            "container_insights": "true",
            "whoami_desired_count": "2",
            "traefik_desired_count": 2,
            "traefik_log_level": "info",
            "traefik_region": "us-east-1",
        }, {})

        assert config.network.vpc_id == "vpc-0abc"
        assert config.network.use_default_vpc is False
        assert config.ecs_cluster.cluster_name == "edge"
        assert config.ecs_cluster.enable_container_insights is True
        assert config.whoami.desired_count == 2
        assert config.traefik.desired_count == 2
        assert config.traefik.log_level == "INFO"
        assert config.traefik.region == "us-east-1"

    def test_credentials_read_from_environment(self):
        """Test that Traefik credentials come from environment variables"""
        config = TraefikEcsConfig.from_context({}, {
            "AWS_ACCESS_KEY_ID": "AKIAEXAMPLE",
            "AWS_SECRET_ACCESS_KEY_ARN": "arn:aws:secretsmanager:eu-central-1:123456789012:secret:traefik-AbCdEf",
        })
        assert config.traefik.access_key_id == "AKIAEXAMPLE"
        assert config.traefik.secret_access_key_arn.endswith("traefik-AbCdEf")

    def test_empty_credentials_are_ignored(self):
        """Test that empty environment variables count as unset"""
        config = TraefikEcsConfig.from_context({}, {
            "AWS_ACCESS_KEY_ID": "",
            "AWS_SECRET_ACCESS_KEY_ARN": "",
        })
        assert config.traefik.access_key_id is None
        assert config.traefik.secret_access_key_arn is None

    def test_non_integer_desired_count_rejected(self):
        """Test that a non-numeric desired count is a configuration error"""
        with pytest.raises(ConfigurationError, match="whoami_desired_count"):
            TraefikEcsConfig.from_context({"whoami_desired_count": "many"}, {})

    def test_non_integer_error_hides_int_conversion(self):
        """Test that the int() failure is not chained onto the configuration error"""
        with pytest.raises(ConfigurationError) as excinfo:
            TraefikEcsConfig.from_context({"traefik_desired_count": "one"}, {})
        assert excinfo.value.__cause__ is None
        assert excinfo.value.__suppress_context__ is True

    def test_direct_ingress_cidr_from_context(self):
        """Test that direct ingress is off unless a CIDR is given"""
        assert TraefikEcsConfig.from_context({}, {}).security_groups.direct_ingress_cidr is None
        config = TraefikEcsConfig.from_context({"direct_ingress_cidr": "10.0.0.0/8"}, {})
        assert config.security_groups.direct_ingress_cidr == "10.0.0.0/8"


class TestValidation:
    """Test configuration validation"""

    def test_access_key_without_secret_rejected(self):
        """Test that an access key id alone is rejected"""
        with pytest.raises(ConfigurationError, match="must be set together"):
            TraefikEcsConfig.from_context({}, {"AWS_ACCESS_KEY_ID": "AKIAEXAMPLE"})

    def test_secret_without_access_key_rejected(self):
        """Test that a secret ARN alone is rejected"""
        config = TraefikEcsConfig.default()
        config.traefik.secret_access_key_arn = "arn:aws:secretsmanager:eu-central-1:123456789012:secret:x-AbCdEf"
        with pytest.raises(ConfigurationError):
            config.validate()

    def test_negative_desired_count_rejected(self):
        """Test that negative desired counts are rejected"""
        config = TraefikEcsConfig.default()
        config.whoami.desired_count = -1
        with pytest.raises(ConfigurationError, match="desired_count"):
            config.validate()

    def test_zero_desired_count_allowed(self):
        """Test that a service can be scaled to zero"""
        config = TraefikEcsConfig.default()
        config.whoami.desired_count = 0
        config.validate()

    @pytest.mark.parametrize("cpu,memory", [
        (256, 4096), (300, 512), (1024, 1024), (8192, 17408), (16384, 131072)
    ])
    def test_invalid_fargate_task_size_rejected(self, cpu, memory):
        """Test that unsupported Fargate cpu/memory pairs are rejected"""
        config = TraefikEcsConfig.default()
        config.traefik.task_definition = TaskDefinitionConfig(cpu=cpu, memory_limit_mib=memory)
        with pytest.raises(ConfigurationError, match="traefik task"):
            config.validate()

    @pytest.mark.parametrize("cpu,memory", [
        (256, 2048), (512, 4096), (4096, 30720),
        (8192, 16384), (8192, 61440), (16384, 32768), (16384, 122880)
    ])
    def test_valid_fargate_task_size_accepted(self, cpu, memory):
        """Test that supported Fargate cpu/memory pairs are accepted"""
        config = TraefikEcsConfig.default()
        config.whoami.task_definition = TaskDefinitionConfig(cpu=cpu, memory_limit_mib=memory)
        config.validate()

    def test_out_of_range_port_rejected(self):
        """Test that ports outside 1-65535 are rejected"""
        config = TraefikEcsConfig.default()
        config.traefik.api_port = 70000
        with pytest.raises(ConfigurationError, match="70000"):
            config.validate()

    def test_custom_vpc_requires_id(self):
        """Test that disabling the default VPC requires a VPC id"""
        config = TraefikEcsConfig.default()
        config.network.use_default_vpc = False
        with pytest.raises(ConfigurationError, match="vpc_id"):
            config.validate()

    @pytest.mark.parametrize("level", ["DEBUG", "INFO", "WARN", "ERROR", "FATAL", "PANIC"])
    def test_traefik_log_levels_accepted(self, level):
        """Test that every Traefik log level passes validation"""
        config = TraefikEcsConfig.default()
        config.traefik.log_level = level
        config.validate()

    def test_unknown_traefik_log_level_rejected(self):
        """Test that a level Traefik does not know is rejected"""
        with pytest.raises(ConfigurationError, match="VERBOSE"):
            TraefikEcsConfig.from_context({"traefik_log_level": "verbose"}, {})
