#!/usr/bin/env python

"""
    manifest.py:
    Provides the image manifest which maps a service name to the
    tag and the immutable digest of the container image it is
    deployed with, along with the helpers shared by the digest
    resolver and the image reference loader.
"""

import json
import logging
import os
import re
import stat
import tempfile
from typing import Mapping, Optional

from images.exceptions import ManifestError

logger = logging.getLogger()
logger.setLevel(logging.DEBUG)

DEFAULT_TAG = "latest"
IMAGE_TAG_SUFFIX = "_IMAGE_TAG"

DIGEST_PATTERN = re.compile(r"sha256:[0-9a-f]{64}")
TAG_VARIABLE_PATTERN = re.compile(r"([A-Z][A-Z0-9]*)" + IMAGE_TAG_SUFFIX)


def is_digest(value: str) -> bool:
    """True when the value is a sha256 content digest."""
    return isinstance(value, str) and DIGEST_PATTERN.fullmatch(value) is not None


def tag_variable_name(service: str) -> str:
    """chef -> CHEF_IMAGE_TAG"""
    return f"{service.upper()}{IMAGE_TAG_SUFFIX}"


def service_name(variable_name: str) -> Optional[str]:
    """PREPPER_IMAGE_TAG -> prepper, or None if the name is not a tag declaration."""
    match = TAG_VARIABLE_PATTERN.fullmatch(variable_name)
    if match is None:
        return None
    return match.group(1).lower()


def _file_mode(path: str) -> int:
    if os.path.exists(path):
        return stat.S_IMODE(os.stat(path).st_mode)

    # mkstemp creates 0600 files, apply the umask to 0666 like open() does
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


class ManifestEntry:
    """The resolved image of a single service."""

    def __init__(self, tag: str, digest: str) -> None:
        self.tag = tag
        self.digest = digest

    def __eq__(self, other) -> bool:
        if not isinstance(other, ManifestEntry):
            return NotImplemented
        return self.tag == other.tag and self.digest == other.digest

    def __repr__(self) -> str:
        return f"ManifestEntry(tag={self.tag!r}, digest={self.digest!r})"

    def to_dict(self) -> dict:
        return {
            "tag": self.tag,
            "digest": self.digest
        }


class ImageManifest:
    """
        Point in time snapshot of the resolved images, keyed by
        lowercase service name.

        The manifest is written wholesale by the digest resolver and
        only ever read by the image reference loader. Entries read back
        from disk keep whatever they contained; validation happens on
        lookup so that a single bad entry does not hide the others.
    """

    def __init__(self, entries: Optional[Mapping[str, ManifestEntry]] = None) -> None:
        self._entries = dict(entries or {})
        self._raw = {name: entry.to_dict() for name, entry in self._entries.items()}

    @property
    def entries(self) -> dict:
        return dict(self._entries)

    def get_digest(self, service: str) -> Optional[str]:
        """
            Returns the digest recorded for the service, or None when the
            service is absent, its entry is not an object, or the digest is
            missing or does not have the sha256 form.
        """
        entry = self._raw.get(service)
        if not isinstance(entry, dict):
            return None

        digest = entry.get("digest")
        if not digest:
            return None

        if not is_digest(digest):
            logger.warning(
                f"Ignoring invalid digest {digest!r} recorded for {service} in the image manifest"
            )
            return None

        return digest

    def to_json(self) -> str:
        return json.dumps(
            {name: entry.to_dict() for name, entry in self._entries.items()},
            indent=2
        ) + "\n"

    def write(self, path: str) -> None:
        """
            Replaces the manifest at path with this manifest.

            The content is written to a temporary file in the same directory
            and renamed over the target, so readers see either the previous
            manifest or the new one. The file keeps the mode of the manifest
            it replaces; a new manifest gets the mode open() would give it.
        """
        directory = os.path.dirname(os.path.abspath(path))
        fd, tmp_path = tempfile.mkstemp(prefix=".image-manifest-", dir=directory)
        try:
            with os.fdopen(fd, "w") as tmp_file:
                tmp_file.write(self.to_json())
            os.chmod(tmp_path, _file_mode(path))
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    @classmethod
    def from_dict(cls, data: dict) -> "ImageManifest":
        manifest = cls()
        manifest._raw = dict(data)
        for name, entry in data.items():
            if isinstance(entry, dict) and "digest" in entry:
                manifest._entries[name] = ManifestEntry(
                    tag=entry.get("tag", DEFAULT_TAG),
                    digest=entry["digest"]
                )
        return manifest

    @classmethod
    def load(cls, path: str) -> Optional["ImageManifest"]:
        """
            Reads the manifest at path. Returns None when the file does not
            exist and raises ManifestError when it cannot be parsed.
        """
        if not os.path.isfile(path):
            return None

        try:
            with open(path, "r") as manifest_file:
                data = json.load(manifest_file)
        except (OSError, ValueError) as e:
            raise ManifestError(path, str(e)) from e

        if not isinstance(data, dict):
            raise ManifestError(path, f"expected a JSON object, got {type(data).__name__}")

        return cls.from_dict(data)
