#!/usr/bin/env python

"""
    cli_image_reference.py: prints the image reference each kitchen service
    would be deployed with, e.g.

        chef=sha256:3f1c...
        prepper=v1.2.3

    See images/reference_loader.py for the resolution order.
"""

import argparse
import logging
import sys

from images.reference_loader import ImageReferenceLoader
from utils.CdkUtils import CdkUtils


def main(argv=None, environ=None, out=None) -> int:
    out = sys.stdout if out is None else out

    parser = argparse.ArgumentParser(prog='image-reference')

    parser.add_argument(
        'services',
        help='services to resolve, defaults to every configured service',
        nargs='*',
        default=CdkUtils.get_project_settings()["images"]["services"]
    )

    parser.add_argument(
        '--manifest',
        help='path of the image manifest to read',
        type=str,
        default=CdkUtils.get_manifest_path(),
        required=False
    )

    args = parser.parse_args(argv)

    loader = ImageReferenceLoader(args.manifest, environ)
    for service in args.services:
        out.write(f"{service}={loader.resolve(service)}\n")

    return 0


def run() -> None:
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=logging.WARNING
    )
    sys.exit(main())


if __name__ == "__main__":
    run()
