#!/usr/bin/env python

"""
    exceptions.py:
    Errors raised while resolving container image tags to digests
    and while reading the image manifest.
"""


class ImageResolutionError(Exception):
    """Base class for failures of a digest resolution run."""


class RegistryCredentialsError(ImageResolutionError):
    """The registry credentials are missing or unusable."""


class ImageNotFoundError(ImageResolutionError):
    """A declared tag does not resolve to any image in the registry."""

    def __init__(self, service: str, tag: str) -> None:
        self.service = service
        self.tag = tag
        super().__init__(f"Image {service}:{tag} not found in ECR")


class RegistryError(ImageResolutionError):
    """The registry lookup for a declaration failed for any other reason."""

    def __init__(self, service: str, tag: str, reason: str) -> None:
        self.service = service
        self.tag = tag
        super().__init__(f"Unable to resolve {service}:{tag}: {reason}")


class ManifestError(Exception):
    """The image manifest exists but could not be parsed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse {path}: {reason}")
