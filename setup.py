import setuptools


with open("README.md") as fp:
    long_description = fp.read()


setuptools.setup(
    name="kitchen_image_references",
    version="0.0.1",

    description="CDK app for the Kitchen services with ECR image digest resolution and pinning.",
    long_description=long_description,
    long_description_content_type="text/markdown",

    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),

    install_requires=[
        "aws-cdk-lib>=2.116.0",
        "constructs>=10.0.0",
        "boto3",
        "botocore",
        "python-dotenv",
    ],

    extras_require={
        "test": [
            "pytest",
            "expects",
        ],
    },

    entry_points={
        "console_scripts": [
            "resolve-image-digests=client.cli_resolve_image_digests:run",
            "image-reference=client.cli_image_reference:run",
        ],
    },

    python_requires=">=3.9",

    classifiers=[
        "Development Status :: 4 - Beta",

        "Intended Audience :: Developers",

        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",

        "Topic :: Utilities",

        "Typing :: Typed",
    ],
)
