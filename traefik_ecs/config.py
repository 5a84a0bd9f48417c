"""Configuration management for Traefik ECS infrastructure"""
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple


# Fargate task size combinations accepted by ECS (cpu units -> memory MiB)
FARGATE_CPU_MEMORY: Dict[int, Tuple[int, ...]] = {
    256: (512, 1024, 2048),
    512: tuple(range(1024, 4096 + 1, 1024)),
    1024: tuple(range(2048, 8192 + 1, 1024)),
    2048: tuple(range(4096, 16384 + 1, 1024)),
    4096: tuple(range(8192, 30720 + 1, 1024)),
    8192: tuple(range(16384, 61440 + 1, 4096)),
    16384: tuple(range(32768, 122880 + 1, 8192)),
}

# Log levels accepted by Traefik v2 --log.level
TRAEFIK_LOG_LEVELS: Tuple[str, ...] = ("DEBUG", "INFO", "WARN", "ERROR", "FATAL", "PANIC")


class ConfigurationError(ValueError):
    """Raised when the infrastructure configuration is invalid"""


@dataclass
class NetworkConfig:
    """VPC lookup configuration"""
    use_default_vpc: bool = True
    vpc_id: Optional[str] = None


@dataclass
class SecurityGroupConfig:
    """Security group port configuration"""
    web_ports: Tuple[int, ...] = (80, 8080)
    traefik_ports: Tuple[int, ...] = (80, 8080)
    container_port: int = 80
    ingress_cidr: str = "0.0.0.0/0"
    # Also admit this CIDR straight to the Traefik and container ports
    direct_ingress_cidr: Optional[str] = None


@dataclass
class EcsClusterConfig:
    """ECS cluster configuration"""
    cluster_name: str = "traefik-cluster-demo"
    enable_container_insights: bool = False


@dataclass
class IamConfig:
    """IAM role and policy configuration"""
    traefik_role_name: str = "traefik"
    traefik_policy_name: str = "traefik_policy"
    traefik_policy_sid: str = "main"
    traefik_policy_actions: List[str] = field(default_factory=lambda: [
        "ecs:ListClusters",
        "ecs:DescribeClusters",
        "ecs:ListTasks",
        "ecs:DescribeTasks",
        "ecs:DescribeContainerInstances",
        "ecs:DescribeTaskDefinition",
        "ec2:DescribeInstances",
    ])
    execution_managed_policy: str = "service-role/AmazonECSTaskExecutionRolePolicy"


@dataclass
class TargetGroupConfig:
    """Application Load Balancer target group configuration"""
    name: str
    port: int
    health_check_path: str = "/"
    healthy_http_codes: str = "200-399"


@dataclass
class LoadBalancerConfig:
    """Application Load Balancer configuration"""
    traefik_target_group: TargetGroupConfig = None
    traefik_api_target_group: TargetGroupConfig = None

    def __post_init__(self):
        if self.traefik_target_group is None:
            # Traefik answers 404 on / until a router matches
            self.traefik_target_group = TargetGroupConfig(
                name="traefik",
                port=80,
                healthy_http_codes="200-202,404"
            )
        if self.traefik_api_target_group is None:
            # The dashboard redirects / to /dashboard/
            self.traefik_api_target_group = TargetGroupConfig(
                name="traefikapi",
                port=8080,
                healthy_http_codes="200-202,300-302"
            )


@dataclass
class TaskDefinitionConfig:
    """ECS task definition configuration"""
    cpu: int = 256
    memory_limit_mib: int = 512


@dataclass
class WhoamiConfig:
    """Demo whoami service configuration"""
    family: str = "whoami"
    container_name: str = "whoami"
    image: str = "containous/whoami:v1.5.0"
    container_port: int = 80
    desired_count: int = 3
    service_name: str = "whoami"
    router_name: str = "whoami"
    log_group_name: str = "/ecs/whoami"
    task_definition: TaskDefinitionConfig = None

    def __post_init__(self):
        if self.task_definition is None:
            self.task_definition = TaskDefinitionConfig()


@dataclass
class TraefikConfig:
    """Traefik reverse proxy service configuration"""
    family: str = "traefik"
    container_name: str = "traefik"
    image: str = "traefik:v2.7"
    web_port: int = 80
    api_port: int = 8080
    desired_count: int = 1
    service_name: str = "traefik"
    log_level: str = "DEBUG"
    api_insecure: bool = True
    exposed_by_default: bool = False
    region: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key_arn: Optional[str] = None
    log_group_name: str = "/ecs/traefik"
    task_definition: TaskDefinitionConfig = None

    def __post_init__(self):
        if self.task_definition is None:
            self.task_definition = TaskDefinitionConfig()


@dataclass
class TraefikEcsConfig:
    """Main configuration for Traefik ECS infrastructure"""
    network: NetworkConfig
    security_groups: SecurityGroupConfig
    ecs_cluster: EcsClusterConfig
    iam: IamConfig
    load_balancer: LoadBalancerConfig
    whoami: WhoamiConfig
    traefik: TraefikConfig

    @classmethod
    def default(cls) -> "TraefikEcsConfig":
        """Create default configuration for the whoami demo"""
        return cls(
            network=NetworkConfig(),
            security_groups=SecurityGroupConfig(),
            ecs_cluster=EcsClusterConfig(),
            iam=IamConfig(),
            load_balancer=LoadBalancerConfig(),
            whoami=WhoamiConfig(),
            traefik=TraefikConfig()
        )

    @classmethod
    def from_context(
        cls,
        context: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None
    ) -> "TraefikEcsConfig":
        """
        Build configuration from CDK context values and environment variables.

        Context keys override the defaults. Traefik's static AWS credentials
        are only ever read from the environment so they stay out of cdk.json.

        Args:
            context: CDK context values (cdk.json or -c key=value)
            environ: Environment variables, defaults to os.environ

        Raises:
            ConfigurationError: If the resulting configuration is invalid
        """
        context = context or {}
        environ = os.environ if environ is None else environ
        config = cls.default()

        vpc_id = context.get("vpc_id")
        if vpc_id:
            config.network.vpc_id = vpc_id
            config.network.use_default_vpc = False

        if context.get("cluster_name"):
            config.ecs_cluster.cluster_name = context["cluster_name"]
        if "container_insights" in context:
            config.ecs_cluster.enable_container_insights = _as_bool(
                context["container_insights"]
            )

        if "whoami_desired_count" in context:
            config.whoami.desired_count = _as_int(
                "whoami_desired_count", context["whoami_desired_count"]
            )
        if "traefik_desired_count" in context:
            config.traefik.desired_count = _as_int(
                "traefik_desired_count", context["traefik_desired_count"]
            )
        if context.get("traefik_image"):
            config.traefik.image = context["traefik_image"]
        if context.get("whoami_image"):
            config.whoami.image = context["whoami_image"]
        if context.get("traefik_log_level"):
            config.traefik.log_level = str(context["traefik_log_level"]).upper()
        if context.get("traefik_region"):
            config.traefik.region = context["traefik_region"]
        if context.get("direct_ingress_cidr"):
            config.security_groups.direct_ingress_cidr = context["direct_ingress_cidr"]

        config.traefik.access_key_id = environ.get("AWS_ACCESS_KEY_ID") or None
        config.traefik.secret_access_key_arn = (
            environ.get("AWS_SECRET_ACCESS_KEY_ARN") or None
        )

        config.validate()
        return config

    def validate(self) -> None:
        """
        Check the configuration for values AWS would reject at deploy time.

        Raises:
            ConfigurationError: On the first invalid value found
        """
        if not self.network.use_default_vpc and not self.network.vpc_id:
            raise ConfigurationError(
                "vpc_id is required when use_default_vpc is disabled"
            )

        ports = list(self.security_groups.web_ports)
        ports += list(self.security_groups.traefik_ports)
        ports += [
            self.security_groups.container_port,
            self.load_balancer.traefik_target_group.port,
            self.load_balancer.traefik_api_target_group.port,
            self.whoami.container_port,
            self.traefik.web_port,
            self.traefik.api_port,
        ]
        for port in ports:
            if not 1 <= port <= 65535:
                raise ConfigurationError(f"Port {port} is out of range")

        for name, service in (("whoami", self.whoami), ("traefik", self.traefik)):
            if service.desired_count < 0:
                raise ConfigurationError(
                    f"{name} desired_count must not be negative, "
                    f"got {service.desired_count}"
                )
            _validate_task_size(name, service.task_definition)

        if self.traefik.log_level not in TRAEFIK_LOG_LEVELS:
            raise ConfigurationError(
                f"traefik log_level {self.traefik.log_level!r} is not one of "
                f"{', '.join(TRAEFIK_LOG_LEVELS)}"
            )

        if bool(self.traefik.access_key_id) != bool(self.traefik.secret_access_key_arn):
            raise ConfigurationError(
                "AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY_ARN must be set together"
            )


def _validate_task_size(name: str, task_definition: TaskDefinitionConfig) -> None:
    memory_options = FARGATE_CPU_MEMORY.get(task_definition.cpu)
    if memory_options is None:
        raise ConfigurationError(
            f"{name} task cpu {task_definition.cpu} is not a Fargate size"
        )
    if task_definition.memory_limit_mib not in memory_options:
        raise ConfigurationError(
            f"{name} task memory {task_definition.memory_limit_mib} MiB is not "
            f"valid for {task_definition.cpu} cpu units"
        )


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _as_int(key: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Context value {key}={value!r} is not an integer") from None
