import json

CHEF_DIGEST = "sha256:" + "a" * 64
PREPPER_DIGEST = "sha256:" + "b" * 64


class FakeRegistry:
    """In memory stand-in for EcrRegistry."""

    def __init__(self, images=None, credentials_error=None, errors=None):
        self.images = images or {}
        self.credentials_error = credentials_error
        self.errors = errors or {}
        self.lookups = []
        self.credentials_checked = False

    def verify_credentials(self):
        self.credentials_checked = True
        if self.credentials_error is not None:
            raise self.credentials_error
        return "123456789012"

    def describe_image(self, repository, tag):
        self.lookups.append((repository, tag))
        if (repository, tag) in self.errors:
            raise self.errors[(repository, tag)]
        return self.images.get((repository, tag))


def write_json(path, data):
    with open(path, 'w') as file:
        file.write(json.dumps(data))


def read_bytes(path):
    with open(path, 'rb') as file:
        return file.read()
