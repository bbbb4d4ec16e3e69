"""
HTTP client for the cluster management endpoint.
"""

import logging
from typing import Any, Dict, Optional

import requests

from shard_rebalancer.config import RebalancerSettings
from shard_rebalancer.exception import DecodeError, SettingsApplyError, TransportError
from shard_rebalancer.model import AllocationSettings, ClusterHealth, RoutingSnapshot

logger = logging.getLogger(__name__)


class ClusterClient:
    """Read cluster health and routing state, write transient settings"""

    def __init__(self, settings: Optional[RebalancerSettings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or RebalancerSettings()
        self.session = session or requests.Session()
        self.session.auth = self.settings.auth
        self.session.verify = self.settings.ssl_verify

    def url_for(self, path: str) -> str:
        return f"{self.settings.base_url}{path}"

    def _get(self, path: str) -> Dict[str, Any]:
        url = self.url_for(path)
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, timeout=self.settings.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as ex:
            raise TransportError(f"Request failed: GET {url}: {ex}", url=url) from ex
        return self._decode(response)

    @staticmethod
    def _decode(response: requests.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as ex:
            raise DecodeError(f"Response is not valid JSON: {ex}", url=response.url) from ex
        if not isinstance(data, dict):
            raise DecodeError(f"Response is not a JSON object: {type(data).__name__}", url=response.url)
        return data

    def fetch_health(self) -> ClusterHealth:
        """Get cluster health, only `status` is required to be present"""
        path = "/_cluster/health"
        data = self._get(path)
        try:
            return ClusterHealth.from_dict(data)
        except (KeyError, TypeError) as ex:
            raise DecodeError(f"Unexpected cluster health response: {data}", url=self.url_for(path)) from ex

    def fetch_routing_state(self) -> RoutingSnapshot:
        """Get the routing table, grouped by node"""
        path = "/_cluster/state/routing_nodes"
        data = self._get(path)
        try:
            return RoutingSnapshot.from_dict(data)
        except (KeyError, TypeError) as ex:
            raise DecodeError(f"Unexpected cluster state response: {ex!r}", url=self.url_for(path)) from ex

    def apply_settings(self, settings: AllocationSettings) -> Dict[str, Any]:
        """Submit a transient settings directive, return the acknowledgement"""
        url = self.url_for("/_cluster/settings")
        payload = settings.to_dict()
        logger.debug(f"PUT {url}: {payload}")
        try:
            response = self.session.put(url, json=payload, timeout=self.settings.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as ex:
            raise SettingsApplyError(f"Applying settings failed: {payload}: {ex}", url=url) from ex
        try:
            acknowledgement = self._decode(response)
        except DecodeError as ex:
            raise SettingsApplyError(f"Applying settings failed: {ex}", url=url) from ex
        logger.debug(f"Response: {acknowledgement}")
        return acknowledgement
