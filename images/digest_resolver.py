#!/usr/bin/env python

"""
    digest_resolver.py:
    Resolves the <SERVICE>_IMAGE_TAG declarations to ECR image digests
    and writes the image manifest consumed by the image reference loader.

    A run is all or nothing: the manifest is only written once every
    declaration has been resolved, so a failed run leaves any previous
    manifest in place.
"""

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Mapping

from botocore.exceptions import BotoCoreError, ClientError

from images.exceptions import ImageNotFoundError, RegistryError
from images.manifest import (
    DEFAULT_TAG,
    ImageManifest,
    ManifestEntry,
    is_digest,
    service_name
)
from images.registry import EcrRegistry

logger = logging.getLogger()
logger.setLevel(logging.DEBUG)

DEFAULT_MAX_WORKERS = 4


def collect_declarations(*sources: Mapping[str, str]) -> dict:
    """
        Collects the image tag declarations from one or more mappings of
        variable name to value, keyed by service name. Later sources
        override earlier ones.
    """
    declarations = {}
    for source in sources:
        for variable, value in source.items():
            service = service_name(variable)
            if service is None or value is None:
                continue
            declarations[service] = value
    return declarations


class DigestResolver:
    """Resolves image tag declarations into an ImageManifest."""

    def __init__(
            self,
            registry: EcrRegistry,
            max_workers: int = DEFAULT_MAX_WORKERS
        ) -> None:
        self.registry = registry
        self.max_workers = max_workers

    def resolve_declaration(self, service: str, value: str) -> ManifestEntry:
        # a digest is accepted as is, the tag it was built from is unknown
        if is_digest(value):
            return ManifestEntry(tag=DEFAULT_TAG, digest=value)

        logger.info(f"Resolving {service}:{value}...")

        try:
            digest = self.registry.describe_image(repository=service, tag=value)
        except (ClientError, BotoCoreError) as e:
            raise RegistryError(service, value, str(e)) from e

        if not digest:
            raise ImageNotFoundError(service, value)

        if not is_digest(digest):
            raise RegistryError(service, value, f"unexpected digest {digest!r}")

        return ManifestEntry(tag=value, digest=digest)

    def resolve(self, declarations: Mapping[str, str]) -> ImageManifest:
        """
            Resolves every declaration. Raises RegistryCredentialsError before
            any lookup when the credentials are unusable, and the first
            ImageResolutionError raised by a lookup otherwise.
        """
        self.registry.verify_credentials()

        if not declarations:
            logger.warning("No *_IMAGE_TAG declarations found")
            return ImageManifest()

        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        try:
            futures = {
                service: executor.submit(self.resolve_declaration, service, value)
                for service, value in declarations.items()
            }
            done, _ = wait(futures.values(), return_when=FIRST_EXCEPTION)

            for service, future in futures.items():
                if future in done and future.exception() is not None:
                    raise future.exception()
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

        entries = {}
        for service, future in futures.items():
            entry = future.result()
            logger.info(f"  {service}: tag={entry.tag}, digest={entry.digest}")
            entries[service] = entry

        return ImageManifest(entries)

    def run(self, declarations: Mapping[str, str], manifest_path: str) -> ImageManifest:
        manifest = self.resolve(declarations)
        manifest.write(manifest_path)
        logger.info(f"Generated {manifest_path}")
        return manifest
