"""Networking construct for looking up an existing VPC"""
from aws_cdk import aws_ec2 as ec2
from constructs import Construct

from traefik_ecs.config import NetworkConfig


class NetworkingConstruct(Construct):
    """
    Construct for reading back an existing VPC and its public subnets.

    Nothing is created here. The VPC is resolved at synth time through a
    context lookup, so the stack needs a concrete account and region.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: NetworkConfig
    ) -> None:
        """
        Initialize the networking construct.

        Args:
            scope: Parent construct
            construct_id: Unique identifier for this construct
            config: VPC lookup settings
        """
        super().__init__(scope, construct_id)

        if config.use_default_vpc:
            self._vpc = ec2.Vpc.from_lookup(self, "Vpc", is_default=True)
        else:
            self._vpc = ec2.Vpc.from_lookup(self, "Vpc", vpc_id=config.vpc_id)

        self._public_subnets = ec2.SubnetSelection(
            subnet_type=ec2.SubnetType.PUBLIC
        )

    @property
    def vpc(self) -> ec2.IVpc:
        """Get the VPC"""
        return self._vpc

    @property
    def public_subnets(self) -> ec2.SubnetSelection:
        """Get the public subnet selection used by the load balancer and tasks"""
        return self._public_subnets
