"""IAM roles construct for ECS task execution and Traefik service discovery"""
from aws_cdk import aws_iam as iam
from constructs import Construct

from traefik_ecs.config import IamConfig


class IamRolesConstruct(Construct):
    """
    Construct for creating IAM roles and permissions.

    Creates the task execution role shared by both task definitions and the
    Traefik task role. The Traefik role gets a customer managed policy that
    lets its ECS provider discover running tasks.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: IamConfig
    ) -> None:
        """
        Initialize the IAM roles construct.

        Args:
            scope: Parent construct
            construct_id: Unique identifier for this construct
            config: IAM configuration settings
        """
        super().__init__(scope, construct_id)

        self._execution_role = self._create_execution_role(
            config.execution_managed_policy
        )

        self._traefik_role = iam.Role(
            self, "TraefikTaskRole",
            role_name=config.traefik_role_name,
            assumed_by=iam.ServicePrincipal("ecs-tasks.amazonaws.com")
        )

        self._traefik_policy = self._create_traefik_policy(config)

    def _create_execution_role(self, managed_policy_name: str) -> iam.Role:
        """Create IAM execution role ECS uses to pull images and write logs"""
        return iam.Role(
            self, "ExecutionRole",
            assumed_by=iam.ServicePrincipal("ecs-tasks.amazonaws.com"),
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    managed_policy_name
                )
            ]
        )

    def _create_traefik_policy(self, config: IamConfig) -> iam.ManagedPolicy:
        """Create the Traefik discovery policy and attach it to the Traefik role"""
        return iam.ManagedPolicy(
            self, "TraefikPolicy",
            managed_policy_name=config.traefik_policy_name,
            statements=[
                iam.PolicyStatement(
                    sid=config.traefik_policy_sid,
                    effect=iam.Effect.ALLOW,
                    actions=list(config.traefik_policy_actions),
                    resources=["*"]
                )
            ],
            roles=[self._traefik_role]
        )

    @property
    def execution_role(self) -> iam.Role:
        """Get the task execution role"""
        return self._execution_role

    @property
    def traefik_role(self) -> iam.Role:
        """Get the Traefik task role"""
        return self._traefik_role

    @property
    def traefik_policy(self) -> iam.ManagedPolicy:
        """Get the Traefik discovery policy"""
        return self._traefik_policy
