#!/usr/bin/env python

"""
    reference_loader.py:
    Provides the image reference loader used while the CDK app is
    synthesized to decide which image a container based Lambda function
    is deployed with.

    Resolution order:
    1. digest recorded for the service in the image manifest
    2. environment variable <SERVICE>_IMAGE_TAG (e.g. CHEF_IMAGE_TAG)
    3. the "latest" tag
"""

import logging
import os
from typing import Mapping, Optional

from images.exceptions import ManifestError
from images.manifest import DEFAULT_TAG, ImageManifest, tag_variable_name

logger = logging.getLogger()
logger.setLevel(logging.DEBUG)


class ImageReferenceLoader:
    """
        Resolves the image reference (digest or tag) of a service.

        The manifest path and the environment are passed in explicitly;
        the loader never raises and always returns a reference. Whether
        the reference exists in the registry is only known when the
        function is provisioned.
    """

    def __init__(
            self,
            manifest_path: str,
            environ: Optional[Mapping[str, str]] = None
        ) -> None:
        self.manifest_path = manifest_path
        self.environ = os.environ if environ is None else environ

    def _manifest_digest(self, service: str) -> Optional[str]:
        try:
            manifest = ImageManifest.load(self.manifest_path)
        except ManifestError as e:
            logger.warning(f"Failed to parse image manifest {e.path}: {e.reason}")
            return None

        if manifest is None:
            return None

        return manifest.get_digest(service)

    def resolve(self, service: str) -> str:
        digest = self._manifest_digest(service)
        if digest:
            logger.debug(f"{service}: using digest {digest} from {self.manifest_path}")
            return digest

        variable = tag_variable_name(service)
        tag = self.environ.get(variable)
        if tag:
            logger.debug(f"{service}: using {variable}={tag}")
            return tag

        logger.debug(f"{service}: no digest or {variable} found, using '{DEFAULT_TAG}'")
        return DEFAULT_TAG


def load_image_reference(
        service: str,
        manifest_path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None
    ) -> str:
    """
        Load the image reference of a service, reading the manifest from the
        project settings location when no path is given.
    """
    if manifest_path is None:
        from utils.CdkUtils import CdkUtils
        manifest_path = CdkUtils.get_manifest_path()

    return ImageReferenceLoader(manifest_path, environ).resolve(service)
