#!/usr/bin/env python3
import os

import aws_cdk as cdk

from traefik_ecs.config import TraefikEcsConfig
from traefik_ecs.traefik_ecs_stack import TraefikEcsStack


app = cdk.App()

context = app.node.try_get_context("traefik_ecs") or {}
config = TraefikEcsConfig.from_context(context, os.environ)

TraefikEcsStack(
    app,
    app.node.try_get_context("stack_name") or "TraefikEcsStack",
    config=config,
    # The default VPC lookup needs a concrete account and region
    env=cdk.Environment(
        account=os.getenv("CDK_DEFAULT_ACCOUNT"),
        region=os.getenv("CDK_DEFAULT_REGION")
    )
)

app.synth()
