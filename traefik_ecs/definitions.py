"""Container definition payload builders for Traefik and the whoami demo"""
from typing import Dict, List, Optional, Tuple


def host_rule(host: str) -> str:
    """Build a Traefik router rule matching requests for a single host"""
    return f"Host(`{host}`)"


def whoami_docker_labels(router_name: str, host: str) -> Dict[str, str]:
    """
    Build the Docker labels Traefik's ECS provider reads to route to whoami.

    Args:
        router_name: Name of the Traefik HTTP router
        host: Host name the router matches, usually the load balancer DNS name

    Returns:
        Docker labels for the whoami container
    """
    return {
        "traefik.enable": "true",
        f"traefik.http.routers.{router_name}.rule": host_rule(host),
    }


def traefik_command(
    cluster_name: str,
    region: str,
    log_level: str = "DEBUG",
    api_insecure: bool = True,
    exposed_by_default: bool = False
) -> List[str]:
    """
    Build the Traefik entry point with the ECS provider scoped to one cluster.

    Args:
        cluster_name: ECS cluster Traefik discovers tasks in
        region: AWS region of the cluster
        log_level: Traefik log level
        api_insecure: Serve the dashboard and API on the traefik entry point (8080)
        exposed_by_default: Route to every task, not only those labelled traefik.enable

    Returns:
        Entry point argv for the Traefik container
    """
    command = [
        "traefik",
        f"--providers.ecs.clusters={cluster_name}",
        f"--providers.ecs.region={region}",
        f"--log.level={log_level}",
    ]
    if not exposed_by_default:
        command.append("--providers.ecs.exposedByDefault=false")
    if api_insecure:
        command.append("--api.insecure=true")
    return command


def traefik_credentials(
    access_key_id: Optional[str],
    secret_access_key_arn: Optional[str]
) -> Tuple[Dict[str, str], Dict[str, str]]:
    """
    Split optional static AWS credentials into container environment and secrets.

    Returns:
        Tuple of (environment variables, secret ARNs keyed by variable name)
    """
    environment = {}
    secrets = {}
    if access_key_id:
        environment["AWS_ACCESS_KEY_ID"] = access_key_id
    if secret_access_key_arn:
        secrets["AWS_SECRET_ACCESS_KEY"] = secret_access_key_arn
    return environment, secrets
