import os
from setuptools import setup, find_namespace_packages

# locate files relative to this setup.py
HERE = os.path.abspath(os.path.dirname(__file__))


def parse_requirements(rel_path):
    path = os.path.join(HERE, rel_path)
    with open(path, "r") as f:
        lines = f.read().splitlines()
    return [line.strip() for line in lines if line.strip() and not line.startswith("#")]


setup(
    name="rbstraverse",
    version="0.1.0",
    description="Generate RBS declarations for methods defined by ActiveSupport macros",
    long_description=open(os.path.join(HERE, "README.md")).read(),
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=["rbstraverse", "rbstraverse.*"]),
    package_data={"rbstraverse": ["requirements.txt"], "rbstraverse.mcp": ["tool_descriptions.toml"]},
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",
    install_requires=parse_requirements("rbstraverse/requirements.txt"),
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "rbstraverse=rbstraverse.main:main",
            "rbstraverse-mcp=rbstraverse.mcp.server:main",
        ],
    },
    include_package_data=True,
)
