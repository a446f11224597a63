"""
StreamFuse: Operator Fusion Optimizer for Stream Processing Pipelines

Rewrites a linear pipeline of stream operators by fusing adjacent
compatible operators into single composite operators:
1. Catalog-driven fusibility with a category classification table
2. Registry of fusion laws (map/filter/scan/reduce/flatMap/tap)
3. Greedy single-pass rewriting iterated to a fixpoint
4. Provenance metadata and optional fusion tracing on every fused node
"""

from setuptools import setup, find_packages

setup(
    name="streamfuse",
    version="1.0.0",
    description="Operator Fusion Optimizer for Stream Processing Pipelines",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    author="StreamFuse Team",
    python_requires=">=3.10",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy>=1.24.0",
        "tabulate>=0.9",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
        ]
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Compilers",
        "Topic :: Software Development :: Libraries",
    ],
)
