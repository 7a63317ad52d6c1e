import json
import os

from botocore.exceptions import ReadTimeoutError
from expects import be_empty, be_false, be_true, contain, equal, expect, raise_error

from images.digest_resolver import DigestResolver, collect_declarations
from images.exceptions import ImageNotFoundError, RegistryCredentialsError, RegistryError
from images.manifest import ManifestEntry
from tests.utils.fakes import CHEF_DIGEST, PREPPER_DIGEST, FakeRegistry, read_bytes, write_json


class TestCollectDeclarations:

    def test_only_image_tag_variables(self):
        declarations = collect_declarations({
            "CHEF_IMAGE_TAG": "v1",
            "PREPPER_IMAGE_TAG": "v3.0.0",
            "HOME": "/root",
            "IMAGE_TAG": "v0"
        })

        expect(declarations).to(equal({"chef": "v1", "prepper": "v3.0.0"}))

    def test_later_sources_win(self):
        declarations = collect_declarations(
            {"CHEF_IMAGE_TAG": "v1", "PREPPER_IMAGE_TAG": "v3.0.0"},
            {"CHEF_IMAGE_TAG": "v2"}
        )

        expect(declarations).to(equal({"chef": "v2", "prepper": "v3.0.0"}))

    def test_valueless_declarations_are_skipped(self):
        expect(collect_declarations({"CHEF_IMAGE_TAG": None})).to(be_empty)


class TestDigestResolver:

    def test_resolves_tags(self, fake_registry):
        manifest = DigestResolver(fake_registry).resolve({"chef": "v1", "prepper": "v3.0.0"})

        expect(manifest.entries).to(equal({
            "chef": ManifestEntry(tag="v1", digest=CHEF_DIGEST),
            "prepper": ManifestEntry(tag="v3.0.0", digest=PREPPER_DIGEST)
        }))

    def test_digest_passes_through_without_lookup(self, fake_registry):
        manifest = DigestResolver(fake_registry).resolve({"chef": CHEF_DIGEST})

        expect(manifest.entries["chef"]).to(equal(ManifestEntry(tag="latest", digest=CHEF_DIGEST)))
        expect(fake_registry.lookups).to(be_empty)

    def test_credentials_checked_before_lookups(self, manifest_path):
        registry = FakeRegistry(credentials_error=RegistryCredentialsError("AWS credentials not configured"))

        resolver = DigestResolver(registry)

        expect(lambda: resolver.run({"chef": "v1"}, manifest_path)).to(raise_error(RegistryCredentialsError))
        expect(registry.lookups).to(be_empty)
        expect(os.path.exists(manifest_path)).to(be_false)

    def test_unknown_tag_names_service_and_tag(self, fake_registry):
        resolver = DigestResolver(fake_registry)

        expect(lambda: resolver.resolve({"chef": "v1", "prepper": "v404"})).to(
            raise_error(ImageNotFoundError, "Image prepper:v404 not found in ECR")
        )

    def test_registry_timeout_fails_run(self, manifest_path):
        registry = FakeRegistry(
            images={("chef", "v1"): CHEF_DIGEST},
            errors={("prepper", "v2"): ReadTimeoutError(endpoint_url="https://api.ecr.eu-central-1.amazonaws.com")}
        )

        resolver = DigestResolver(registry)

        expect(lambda: resolver.run({"chef": "v1", "prepper": "v2"}, manifest_path)).to(raise_error(RegistryError))
        expect(os.path.exists(manifest_path)).to(be_false)

    def test_failed_run_keeps_previous_manifest(self, fake_registry, manifest_path):
        write_json(manifest_path, {"chef": {"tag": "v0", "digest": PREPPER_DIGEST}})
        before = read_bytes(manifest_path)

        resolver = DigestResolver(fake_registry)

        expect(lambda: resolver.run({"chef": "v1", "prepper": "missing"}, manifest_path)).to(
            raise_error(ImageNotFoundError)
        )
        expect(read_bytes(manifest_path)).to(equal(before))

    def test_run_writes_manifest(self, fake_registry, manifest_path):
        DigestResolver(fake_registry, max_workers=2).run(
            {"chef": "v1", "prepper": PREPPER_DIGEST},
            manifest_path
        )

        with open(manifest_path) as file:
            data = json.load(file)

        expect(data).to(equal({
            "chef": {"tag": "v1", "digest": CHEF_DIGEST},
            "prepper": {"tag": "latest", "digest": PREPPER_DIGEST}
        }))
        expect(fake_registry.credentials_checked).to(be_true)
        expect(fake_registry.lookups).to(equal([("chef", "v1")]))

    def test_run_overwrites_manifest_wholesale(self, fake_registry, manifest_path):
        write_json(manifest_path, {"prepper": {"tag": "v0", "digest": PREPPER_DIGEST}})

        DigestResolver(fake_registry).run({"chef": "v1"}, manifest_path)

        with open(manifest_path) as file:
            data = json.load(file)

        expect(list(data.keys())).to(equal(["chef"]))

    def test_no_declarations(self, fake_registry, manifest_path):
        manifest = DigestResolver(fake_registry).run({}, manifest_path)

        expect(manifest.entries).to(be_empty)
        with open(manifest_path) as file:
            expect(json.load(file)).to(equal({}))

    def test_lookups_use_service_as_repository(self, fake_registry):
        DigestResolver(fake_registry).resolve({"chef": "v1"})

        expect(fake_registry.lookups).to(contain(("chef", "v1")))

    def test_malformed_registry_digest_fails_run(self, manifest_path):
        registry = FakeRegistry(images={("chef", "v1"): "sha256:abc"})

        resolver = DigestResolver(registry)

        expect(lambda: resolver.run({"chef": "v1"}, manifest_path)).to(
            raise_error(RegistryError, "Unable to resolve chef:v1: unexpected digest 'sha256:abc'")
        )
        expect(os.path.exists(manifest_path)).to(be_false)

    def test_digest_with_trailing_newline_is_looked_up(self, fake_registry):
        value = CHEF_DIGEST + "\n"

        expect(lambda: DigestResolver(fake_registry).resolve({"chef": value})).to(
            raise_error(ImageNotFoundError)
        )
        expect(fake_registry.lookups).to(equal([("chef", value)]))
