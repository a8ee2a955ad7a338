# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Per-scenario device identities.

Every scenario gets a brand new device so runs never share state on the
backend side.
"""

import base64
import logging
import threading
import uuid
from typing import Optional, Set

from ..collaborators.base import RegistrationBackend
from ..errors import ProvisionError
from ..models import DeviceIdentity, ScenarioSpec

logger = logging.getLogger(__name__)


def random_device_id() -> str:
    """Random Astarte device id: 128 bit UUID, url-safe base64, unpadded."""
    return base64.urlsafe_b64encode(uuid.uuid4().bytes).decode("ascii").rstrip("=")


class IdentityProvisioner:
    """Obtains a device id plus a pairing token or credentials secret."""

    def __init__(self, registration: RegistrationBackend, pairing_scope: str = "pairing"):
        self.registration = registration
        self.pairing_scope = pairing_scope
        self._issued: Set[str] = set()
        self._lock = threading.Lock()

    def _claim(self, spec: ScenarioSpec, device_id: str) -> None:
        with self._lock:
            if device_id in self._issued:
                raise ProvisionError(spec.name, f"device id {device_id} was already issued in this run")
            self._issued.add(device_id)

    def provision(self, spec: ScenarioSpec) -> DeviceIdentity:
        """
        Provision a fresh identity for one scenario.

        Raises:
            ProvisionError: id generation, registration or token request failed
        """
        try:
            device_id = self.registration.generate_device_id()
        except Exception as e:
            raise ProvisionError(spec.name, f"device id generation failed: {e}") from e
        if not device_id:
            raise ProvisionError(spec.name, "empty device id")
        self._claim(spec, device_id)

        if spec.needs_pairing_token:
            try:
                token = self.registration.generate_pairing_token(self.pairing_scope)
            except Exception as e:
                raise ProvisionError(spec.name, f"pairing token request failed: {e}") from e
            if not token:
                raise ProvisionError(spec.name, "empty pairing token")
            logger.info(f"{spec.name}: device {device_id} gets a pairing token")
            return DeviceIdentity(device_id=device_id, pairing_token=token, api_token=self._api_token(spec))

        try:
            secret = self.registration.register_device(device_id)
        except Exception as e:
            raise ProvisionError(spec.name, f"registration of {device_id} failed: {e}") from e
        if not secret:
            raise ProvisionError(spec.name, f"empty credentials secret for {device_id}")
        logger.info(f"{spec.name}: device {device_id} registered")
        return DeviceIdentity(device_id=device_id, credentials_secret=secret, api_token=self._api_token(spec))

    def _api_token(self, spec: ScenarioSpec) -> Optional[str]:
        if not spec.token_scope:
            return None
        try:
            token = self.registration.generate_pairing_token(spec.token_scope)
        except Exception as e:
            raise ProvisionError(spec.name, f"{spec.token_scope} token request failed: {e}") from e
        if not token:
            raise ProvisionError(spec.name, f"empty {spec.token_scope} token")
        return token
