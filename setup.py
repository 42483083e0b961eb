from setuptools import setup, find_packages

setup(
    name="cwlwalk",
    version="0.1.0",
    description="Expands CWL workflows ($import, $include, $mixin, run:) and extracts their step DAG and docker images",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "pyyaml",
        "networkx",
        "graphviz",
        "pydantic>=2",
    ],
    extras_require={
        "test": [
            "pytest",
            "hypothesis",
            "hypothesis-jsonschema",
        ],
    },
    entry_points={
        "console_scripts": [
            "cwlwalk=cwlwalk.main:main",
        ],
    },
)
