"""Kubernetes API client for discovering the hosts that run selected pods."""

from __future__ import annotations

import logging

import urllib3
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.client.rest import ApiException
from kubernetes.config import ConfigException

from ..config import KubernetesConfig
from ..exceptions import ConfigError, MembershipError
from .models import Instance, PodPhase

logger = logging.getLogger(__name__)


class KubernetesClient:
    """Lists pods matching a label selector across all namespaces.

    Each pod becomes an :class:`Instance` carrying the IP of the node it is
    scheduled on, since nginx proxies to a NodePort on those hosts.
    """

    def __init__(self, config: KubernetesConfig):
        self._selector = config.label_selector
        self._timeout = config.request_timeout_seconds
        self._core = k8s_client.CoreV1Api(self._build_api_client(config))

    @staticmethod
    def _build_api_client(config: KubernetesConfig) -> k8s_client.ApiClient:
        """Load credentials from the kubeconfig file, or the in-cluster service account."""
        try:
            if config.kubeconfig:
                logger.debug("Loading kubeconfig from %s", config.kubeconfig)
                return k8s_config.new_client_from_config(config_file=config.kubeconfig)

            logger.debug("No kubeconfig configured, using in-cluster config")
            configuration = k8s_client.Configuration()
            k8s_config.load_incluster_config(client_configuration=configuration)
            return k8s_client.ApiClient(configuration)
        except (ConfigException, OSError) as exc:
            source = config.kubeconfig or "in-cluster service account"
            raise ConfigError(f"Could not load Kubernetes credentials from {source}: {exc}") from exc

    def list_candidates(self) -> list[Instance]:
        """Return every pod matching the selector, whatever its phase."""
        try:
            pods = self._core.list_pod_for_all_namespaces(
                label_selector=self._selector,
                _request_timeout=self._timeout,
            )
        except ApiException as exc:
            raise MembershipError(
                f"Pod list failed with HTTP {exc.status}: {exc.reason}"
            ) from exc
        except (urllib3.exceptions.HTTPError, OSError) as exc:
            raise MembershipError(f"Could not reach the Kubernetes API: {exc}") from exc

        instances = [self._to_instance(pod) for pod in (pods.items or [])]
        logger.info(
            "Listed %d pods for selector %s", len(instances), self._selector,
            extra={"host_count": len(instances)},
        )
        return instances

    @staticmethod
    def _to_instance(pod) -> Instance:
        meta = pod.metadata
        status = pod.status
        identity = f"{meta.namespace}/{meta.name}" if meta is not None else "<unnamed>"
        if status is None:
            return Instance(identity=identity, host_address=None, phase=PodPhase.UNKNOWN)
        return Instance(
            identity=identity,
            host_address=status.host_ip or None,
            phase=PodPhase.parse(status.phase),
        )
