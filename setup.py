"""Setup configuration for unwatermark package."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="unwatermark",
    version="0.1.0",
    author="Unwatermark Team",
    description="Remove light gray watermarks from images and PDFs",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["unwatermark", "unwatermark.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "opencv-python>=4.8.0",
        "numpy>=1.24.0",
        "PyMuPDF>=1.23.0",  # PDF rendering and page assembly
        "Flask>=2.3.0",  # HTTP API
        "tqdm>=4.65.0",  # For progress bars
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "unwatermark=unwatermark.cli:main",
        ],
    },
)
