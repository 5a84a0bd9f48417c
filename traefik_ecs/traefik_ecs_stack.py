from typing import Optional

from aws_cdk import (
    Stack,
    CfnOutput
)
from constructs import Construct

from traefik_ecs.config import TraefikEcsConfig
from traefik_ecs.constructs.ecs_cluster import EcsClusterConstruct
from traefik_ecs.constructs.fargate_service import FargateServiceConstruct
from traefik_ecs.constructs.iam_roles import IamRolesConstruct
from traefik_ecs.constructs.load_balancer import LoadBalancerConstruct
from traefik_ecs.constructs.networking import NetworkingConstruct
from traefik_ecs.constructs.security_groups import SecurityGroupsConstruct
from traefik_ecs.definitions import (
    traefik_command,
    traefik_credentials,
    whoami_docker_labels
)


class TraefikEcsStack(Stack):

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: Optional[TraefikEcsConfig] = None,
        **kwargs
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        config = config or TraefikEcsConfig.default()
        config.validate()

        # Read back the default VPC and its public subnets
        networking = NetworkingConstruct(self, "Networking", config.network)

        security_groups = SecurityGroupsConstruct(
            self, "SecurityGroups",
            vpc=networking.vpc,
            config=config.security_groups
        )

        ecs_cluster = EcsClusterConstruct(
            self, "EcsCluster",
            vpc=networking.vpc,
            config=config.ecs_cluster
        )
        cluster = ecs_cluster.cluster

        iam_roles = IamRolesConstruct(self, "IamRoles", config.iam)

        # Load balancer listening on 80 (Traefik) and 8080 (dashboard)
        load_balancer = LoadBalancerConstruct(
            self, "LoadBalancer",
            vpc=networking.vpc,
            subnets=networking.public_subnets,
            security_group=security_groups.web_sg,
            config=config.load_balancer
        )

        # whoami is reached through Traefik only, matched on the ALB host name
        whoami = FargateServiceConstruct(
            self, "Whoami",
            cluster=cluster,
            family=config.whoami.family,
            container_name=config.whoami.container_name,
            image=config.whoami.image,
            container_ports=[config.whoami.container_port],
            log_group_name=config.whoami.log_group_name,
            task_definition_config=config.whoami.task_definition,
            service_name=config.whoami.service_name,
            desired_count=config.whoami.desired_count,
            subnets=networking.public_subnets,
            security_group=security_groups.container_sg,
            execution_role=iam_roles.execution_role,
            docker_labels=whoami_docker_labels(
                config.whoami.router_name,
                load_balancer.load_balancer_dns_name
            )
        )

        credentials_environment, credentials_secrets = traefik_credentials(
            config.traefik.access_key_id,
            config.traefik.secret_access_key_arn
        )

        traefik = FargateServiceConstruct(
            self, "Traefik",
            cluster=cluster,
            family=config.traefik.family,
            container_name=config.traefik.container_name,
            image=config.traefik.image,
            container_ports=[config.traefik.web_port, config.traefik.api_port],
            log_group_name=config.traefik.log_group_name,
            task_definition_config=config.traefik.task_definition,
            service_name=config.traefik.service_name,
            desired_count=config.traefik.desired_count,
            subnets=networking.public_subnets,
            security_group=security_groups.traefik_sg,
            execution_role=iam_roles.execution_role,
            task_role=iam_roles.traefik_role,
            environment=credentials_environment,
            secret_arns=credentials_secrets,
            entry_point=traefik_command(
                cluster_name=ecs_cluster.cluster_name,
                region=config.traefik.region or self.region,
                log_level=config.traefik.log_level,
                api_insecure=config.traefik.api_insecure,
                exposed_by_default=config.traefik.exposed_by_default
            ),
            essential=True
        )

        traefik.register_target(
            load_balancer.traefik_target_group,
            config.traefik.web_port
        )
        traefik.register_target(
            load_balancer.traefik_api_target_group,
            config.traefik.api_port
        )
        traefik.service.node.add_dependency(load_balancer.traefik_target_group)

        # Traefik needs its discovery policy before it starts polling ECS
        traefik.service.node.add_dependency(iam_roles.traefik_policy)

        self._whoami = whoami
        self._traefik = traefik
        self._load_balancer = load_balancer

        CfnOutput(
            self, "url",
            value=load_balancer.load_balancer_dns_name,
            description="DNS name of the load balancer in front of Traefik"
        )

        CfnOutput(
            self, "TraefikDashboardUrl",
            value=f"http://{load_balancer.load_balancer_dns_name}:{config.traefik.api_port}/dashboard/",
            description="URL of the Traefik dashboard"
        )

        CfnOutput(
            self, "ClusterName",
            value=cluster.cluster_name,
            description="Name of the ECS cluster Traefik discovers services in"
        )

    @property
    def whoami(self) -> FargateServiceConstruct:
        """Get the whoami service construct"""
        return self._whoami

    @property
    def traefik(self) -> FargateServiceConstruct:
        """Get the Traefik service construct"""
        return self._traefik

    @property
    def load_balancer(self) -> LoadBalancerConstruct:
        """Get the load balancer construct"""
        return self._load_balancer
