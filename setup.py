"""
Setup script for ws-loader, a minimal single-request HTTP client.
"""

from setuptools import setup

setup(
    name="ws-loader",
    version="0.1.0",
    description="Minimal single-request HTTP client with normalized responses",
    author="Vipin",
    author_email="vipin@example.com",
    packages=["ws_loader", "ws_loader.cli", "ws_loader.clients", "ws_loader.core", "ws_loader.utils"],
    install_requires=[
        "click>=8.0.0",
        "rich>=10.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0.0"],
    },
    entry_points={
        "console_scripts": [
            "ws-loader=ws_loader.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Internet :: WWW/HTTP",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.11",
)
