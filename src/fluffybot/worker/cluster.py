import logging
from kubernetes import client, config


logger = logging.getLogger(__name__)


class ClusterUnavailableError(Exception):
    """No Kubernetes configuration could be loaded."""


def load_cluster_clients() -> tuple[client.BatchV1Api, client.CoreV1Api]:
    """Build Job and Pod API clients, preferring in-cluster credentials."""
    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes config")
    except config.ConfigException:
        # Local development
        try:
            config.load_kube_config()
            logger.info("Loaded kubeconfig")
        except config.ConfigException as e:
            raise ClusterUnavailableError(f"No Kubernetes config available: {e}") from e

    return client.BatchV1Api(), client.CoreV1Api()
