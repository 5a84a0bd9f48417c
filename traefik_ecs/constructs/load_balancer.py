"""Application Load Balancer construct with Traefik target groups and listeners"""
from aws_cdk import (
    aws_ec2 as ec2,
    aws_elasticloadbalancingv2 as elbv2
)
from constructs import Construct

from traefik_ecs.config import LoadBalancerConfig, TargetGroupConfig


class LoadBalancerConstruct(Construct):
    """
    Construct for the internet-facing load balancer in front of Traefik.

    Port 80 forwards to Traefik's web entry point and port 8080 forwards to
    the Traefik dashboard. Both target groups register tasks by IP, as
    Fargate tasks in awsvpc mode require.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        vpc: ec2.IVpc,
        subnets: ec2.SubnetSelection,
        security_group: ec2.ISecurityGroup,
        config: LoadBalancerConfig
    ) -> None:
        """
        Initialize the load balancer construct.

        Args:
            scope: Parent construct
            construct_id: Unique identifier for this construct
            vpc: VPC for the load balancer and target groups
            subnets: Subnets the load balancer is placed in
            security_group: Security group guarding the load balancer
            config: Target group settings
        """
        super().__init__(scope, construct_id)

        self._load_balancer = elbv2.ApplicationLoadBalancer(
            self, "LoadBalancer",
            vpc=vpc,
            internet_facing=True,
            vpc_subnets=subnets,
            security_group=security_group
        )

        self._traefik_tg = self._create_target_group(
            "TraefikTargetGroup", vpc, config.traefik_target_group
        )
        self._traefik_api_tg = self._create_target_group(
            "TraefikApiTargetGroup", vpc, config.traefik_api_target_group
        )

        self._create_listener(
            "TraefikListener", config.traefik_target_group.port, self._traefik_tg
        )
        self._create_listener(
            "TraefikApiListener", config.traefik_api_target_group.port, self._traefik_api_tg
        )

    def _create_target_group(
        self,
        construct_id: str,
        vpc: ec2.IVpc,
        config: TargetGroupConfig
    ) -> elbv2.ApplicationTargetGroup:
        """Create an HTTP target group for IP targets"""
        return elbv2.ApplicationTargetGroup(
            self, construct_id,
            target_group_name=config.name,
            vpc=vpc,
            port=config.port,
            protocol=elbv2.ApplicationProtocol.HTTP,
            target_type=elbv2.TargetType.IP,
            health_check=elbv2.HealthCheck(
                path=config.health_check_path,
                healthy_http_codes=config.healthy_http_codes
            )
        )

    def _create_listener(
        self,
        construct_id: str,
        port: int,
        target_group: elbv2.IApplicationTargetGroup
    ) -> elbv2.ApplicationListener:
        """Create an HTTP listener forwarding to a target group"""
        # Ingress is managed by the web security group
        return self._load_balancer.add_listener(
            construct_id,
            port=port,
            protocol=elbv2.ApplicationProtocol.HTTP,
            open=False,
            default_target_groups=[target_group]
        )

    @property
    def load_balancer(self) -> elbv2.ApplicationLoadBalancer:
        """Get the Application Load Balancer"""
        return self._load_balancer

    @property
    def load_balancer_dns_name(self) -> str:
        """Get the load balancer DNS name"""
        return self._load_balancer.load_balancer_dns_name

    @property
    def traefik_target_group(self) -> elbv2.ApplicationTargetGroup:
        """Get the target group for Traefik's web entry point"""
        return self._traefik_tg

    @property
    def traefik_api_target_group(self) -> elbv2.ApplicationTargetGroup:
        """Get the target group for the Traefik dashboard"""
        return self._traefik_api_tg
