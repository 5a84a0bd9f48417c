"""Fargate service construct with task definition, container and log group"""
from typing import Dict, List, Optional
from aws_cdk import (
    aws_ec2 as ec2,
    aws_ecs as ecs,
    aws_elasticloadbalancingv2 as elbv2,
    aws_iam as iam,
    aws_logs as logs,
    aws_secretsmanager as secretsmanager,
    RemovalPolicy
)
from constructs import Construct

from traefik_ecs.config import TaskDefinitionConfig


class FargateServiceConstruct(Construct):
    """
    Construct for creating a single-container Fargate service.

    Creates the log group, task definition, container and ECS service. Tasks
    run in public subnets with a public IP so they can pull images without a
    NAT gateway. Load balancer registration is optional and done through
    register_target.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        cluster: ecs.ICluster,
        family: str,
        container_name: str,
        image: str,
        container_ports: List[int],
        log_group_name: str,
        task_definition_config: TaskDefinitionConfig,
        service_name: str,
        desired_count: int,
        subnets: ec2.SubnetSelection,
        security_group: ec2.ISecurityGroup,
        execution_role: iam.IRole,
        task_role: Optional[iam.IRole] = None,
        environment: Optional[Dict[str, str]] = None,
        secret_arns: Optional[Dict[str, str]] = None,
        docker_labels: Optional[Dict[str, str]] = None,
        entry_point: Optional[List[str]] = None,
        essential: bool = True
    ) -> None:
        """
        Initialize the Fargate service construct.

        Args:
            scope: Parent construct
            construct_id: Unique identifier for this construct
            cluster: ECS cluster to deploy the service to
            family: Task definition family
            container_name: Name of the single container
            image: Public registry image reference
            container_ports: TCP ports the container listens on
            log_group_name: CloudWatch log group for container output
            task_definition_config: Task CPU and memory
            service_name: ECS service name
            desired_count: Number of tasks to keep running
            subnets: Subnets the tasks are placed in
            security_group: Security group attached to the tasks
            execution_role: IAM role ECS uses to start the task
            task_role: IAM role assumed by the container, if any
            environment: Plain environment variables
            secret_arns: Secrets Manager secret ARNs keyed by variable name
            docker_labels: Docker labels on the container
            entry_point: Container entry point override
            essential: Whether the task stops when this container stops
        """
        super().__init__(scope, construct_id)

        self._log_group = logs.LogGroup(
            self, "LogGroup",
            log_group_name=log_group_name,
            retention=logs.RetentionDays.ONE_WEEK,
            removal_policy=RemovalPolicy.DESTROY
        )

        self._task_definition = ecs.FargateTaskDefinition(
            self, "TaskDef",
            family=family,
            execution_role=execution_role,
            task_role=task_role,
            cpu=task_definition_config.cpu,
            memory_limit_mib=task_definition_config.memory_limit_mib
        )

        container_kwargs = {
            "container_name": container_name,
            "image": ecs.ContainerImage.from_registry(image),
            "essential": essential,
            "logging": ecs.LogDrivers.aws_logs(
                log_group=self._log_group,
                stream_prefix=family
            ),
            "port_mappings": [
                # awsvpc requires the host port to equal the container port
                ecs.PortMapping(
                    container_port=port,
                    host_port=port,
                    protocol=ecs.Protocol.TCP
                )
                for port in container_ports
            ]
        }

        if environment:
            container_kwargs["environment"] = dict(environment)
        if secret_arns:
            container_kwargs["secrets"] = self._import_secrets(secret_arns)
        if docker_labels:
            container_kwargs["docker_labels"] = dict(docker_labels)
        if entry_point:
            container_kwargs["entry_point"] = list(entry_point)

        self._container = self._task_definition.add_container(
            container_name,
            **container_kwargs
        )

        self._service = ecs.FargateService(
            self, "Service",
            cluster=cluster,
            service_name=service_name,
            task_definition=self._task_definition,
            desired_count=desired_count,
            assign_public_ip=True,
            vpc_subnets=subnets,
            security_groups=[security_group]
        )

    def _import_secrets(self, secret_arns: Dict[str, str]) -> Dict[str, ecs.Secret]:
        """Reference existing Secrets Manager secrets by their complete ARN"""
        secrets = {}
        for name, arn in secret_arns.items():
            secret = secretsmanager.Secret.from_secret_complete_arn(
                self, f"Secret-{name}", arn
            )
            secrets[name] = ecs.Secret.from_secrets_manager(secret)
        return secrets

    def register_target(
        self,
        target_group: elbv2.ApplicationTargetGroup,
        container_port: int
    ) -> None:
        """
        Register the service's container port with a load balancer target group.

        Args:
            target_group: Target group the tasks are registered in
            container_port: Container port the target group forwards to
        """
        target_group.add_target(
            self._service.load_balancer_target(
                container_name=self._container.container_name,
                container_port=container_port
            )
        )

    @property
    def service(self) -> ecs.FargateService:
        """Get the Fargate service"""
        return self._service

    @property
    def task_definition(self) -> ecs.FargateTaskDefinition:
        """Get the task definition"""
        return self._task_definition

    @property
    def container(self) -> ecs.ContainerDefinition:
        """Get the container definition"""
        return self._container

    @property
    def log_group(self) -> logs.LogGroup:
        """Get the container log group"""
        return self._log_group
