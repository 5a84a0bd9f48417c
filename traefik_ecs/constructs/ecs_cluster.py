"""ECS cluster Traefik discovers the demo services in"""
from aws_cdk import (
    aws_ecs as ecs,
    aws_ec2 as ec2
)
from constructs import Construct

from traefik_ecs.config import EcsClusterConfig


class EcsClusterConstruct(Construct):
    """
    Fargate-only ECS cluster with a fixed name.

    Traefik's ECS provider is pointed at the cluster by name, so the name is
    taken from configuration instead of being generated by CloudFormation.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        vpc: ec2.IVpc,
        config: EcsClusterConfig
    ) -> None:
        super().__init__(scope, construct_id)

        insights = (
            ecs.ContainerInsights.ENABLED
            if config.enable_container_insights
            else ecs.ContainerInsights.DISABLED
        )

        self._cluster = ecs.Cluster(
            self, "Cluster",
            vpc=vpc,
            cluster_name=config.cluster_name,
            container_insights_v2=insights
        )

    @property
    def cluster(self) -> ecs.Cluster:
        """Get the ECS cluster"""
        return self._cluster

    @property
    def cluster_name(self) -> str:
        """Get the cluster name token for Traefik's --providers.ecs.clusters flag"""
        return self._cluster.cluster_name
