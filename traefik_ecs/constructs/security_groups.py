"""Security groups construct for the load balancer, Traefik and containers"""
from aws_cdk import aws_ec2 as ec2
from constructs import Construct

from traefik_ecs.config import SecurityGroupConfig


class SecurityGroupsConstruct(Construct):
    """
    Construct for the three security groups traffic flows through.

    Internet -> web (load balancer) -> traefik -> container (whoami).
    Every group allows unrestricted egress. An optional direct ingress CIDR
    also opens the Traefik and container ports without going through the ALB.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        vpc: ec2.IVpc,
        config: SecurityGroupConfig
    ) -> None:
        """
        Initialize the security groups construct.

        Args:
            scope: Parent construct
            construct_id: Unique identifier for this construct
            vpc: VPC the security groups belong to
            config: Port and CIDR settings
        """
        super().__init__(scope, construct_id)

        self._web_sg = ec2.SecurityGroup(
            self, "WebSg",
            vpc=vpc,
            description="Allow http traffic to the load balancer",
            allow_all_outbound=True
        )
        for port in config.web_ports:
            self._web_sg.add_ingress_rule(
                ec2.Peer.ipv4(config.ingress_cidr),
                ec2.Port.tcp(port),
                f"Allow tcp {port} from {config.ingress_cidr}"
            )

        self._traefik_sg = ec2.SecurityGroup(
            self, "TraefikSg",
            vpc=vpc,
            description="Allow http and https traffic from ALB",
            allow_all_outbound=True
        )
        for port in config.traefik_ports:
            self._traefik_sg.add_ingress_rule(
                self._web_sg,
                ec2.Port.tcp(port),
                f"Allow tcp {port} from the load balancer"
            )

        self._container_sg = ec2.SecurityGroup(
            self, "ContainerSg",
            vpc=vpc,
            description="Allow traffic from traefik",
            allow_all_outbound=True
        )
        self._container_sg.add_ingress_rule(
            self._traefik_sg,
            ec2.Port.tcp(config.container_port),
            f"Allow tcp {config.container_port} from traefik"
        )

        if config.direct_ingress_cidr:
            self._allow_direct_ingress(config)

    def _allow_direct_ingress(self, config: SecurityGroupConfig) -> None:
        """Open the Traefik and container ports to a CIDR, bypassing the ALB"""
        peer = ec2.Peer.ipv4(config.direct_ingress_cidr)
        for port in config.traefik_ports:
            self._traefik_sg.add_ingress_rule(
                peer,
                ec2.Port.tcp(port),
                f"Allow tcp {port} from {config.direct_ingress_cidr}"
            )
        self._container_sg.add_ingress_rule(
            peer,
            ec2.Port.tcp(config.container_port),
            f"Allow tcp {config.container_port} from {config.direct_ingress_cidr}"
        )

    @property
    def web_sg(self) -> ec2.SecurityGroup:
        """Get the load balancer security group"""
        return self._web_sg

    @property
    def traefik_sg(self) -> ec2.SecurityGroup:
        """Get the Traefik task security group"""
        return self._traefik_sg

    @property
    def container_sg(self) -> ec2.SecurityGroup:
        """Get the application container security group"""
        return self._container_sg
