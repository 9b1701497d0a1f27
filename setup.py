"""
KAN Playground - spline-edge Kolmogorov-Arnold Networks

A from-scratch implementation: B-spline edges, hand-written backprop.
"""

from setuptools import setup, find_packages

setup(
    name="kan-playground",
    version="1.0.0",
    author="KAN Playground",
    description="Kolmogorov-Arnold Networks with B-spline edges and hand-written backprop",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["kan_engine", "kan_engine.*", "kan_utils", "kan_utils.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.20.0",
    ],
    extras_require={
        "dev": ["pytest", "torch>=1.10.0", "black", "isort"],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
    ],
    keywords="machine-learning, neural-networks, kolmogorov-arnold, splines",
)
