#!/usr/bin/env python

"""
    cli_resolve_image_digests.py: An image digest resolution CLI utility that:
        * reads the *_IMAGE_TAG declarations from the environment and, optionally, a .env file
        * resolves each tag to its ECR image digest (digests are accepted as is)
        * writes the image manifest consumed when the CDK app is synthesized

    The manifest is only written when every declaration resolves.
"""

import argparse
import logging
import os
import sys

from botocore.exceptions import BotoCoreError
from dotenv import dotenv_values

from images.digest_resolver import DigestResolver, collect_declarations
from images.exceptions import ImageResolutionError
from images.registry import EcrRegistry
from utils.CdkUtils import CdkUtils

logger = logging.getLogger()


def build_parser() -> argparse.ArgumentParser:
    images_config = CdkUtils.get_project_settings()["images"]

    parser = argparse.ArgumentParser(prog='resolve-image-digests')

    parser.add_argument(
        '--env-file',
        help='dotenv file with *_IMAGE_TAG declarations, e.g. .env',
        type=str,
        default=None,
        required=False
    )

    parser.add_argument(
        '--manifest',
        help='path of the image manifest to write',
        type=str,
        default=CdkUtils.get_manifest_path(),
        required=False
    )

    parser.add_argument(
        '--region',
        help='AWS Region',
        type=str,
        default=os.getenv('CDK_DEFAULT_REGION'),
        required=False
    )

    parser.add_argument(
        '--timeout',
        help='timeout in seconds of each registry query',
        type=float,
        default=images_config["registryTimeoutSeconds"],
        required=False
    )

    parser.add_argument(
        '--max-workers',
        help='number of registry queries issued concurrently',
        type=int,
        default=images_config["maxWorkers"],
        required=False
    )

    return parser


def main(argv=None, environ=None, registry=None) -> int:
    args = build_parser().parse_args(argv)
    environ = os.environ if environ is None else environ

    sources = [environ]
    if args.env_file is not None:
        if not os.path.isfile(args.env_file):
            logger.error(f"{args.env_file} not found")
            return 1
        sources.append(dotenv_values(args.env_file))

    declarations = collect_declarations(*sources)

    logger.info("Resolving image digests...")

    try:
        if registry is None:
            registry = EcrRegistry(region=args.region, timeout=args.timeout)

        DigestResolver(registry, max_workers=args.max_workers).run(
            declarations,
            args.manifest
        )
    except (ImageResolutionError, BotoCoreError) as e:
        logger.error(f"ERROR resolving image digests: {str(e)}")
        return 1

    return 0


def run() -> None:
    # set logging
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=logging.INFO
    )
    sys.exit(main())


if __name__ == "__main__":
    run()
