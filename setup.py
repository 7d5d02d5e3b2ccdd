"""Setup script for smart_image package."""

from setuptools import setup, find_packages

setup(
    name="smart_image",
    version="1.0.0",
    description="Size-bounded overview, tiles and crops of design images for vision models",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pymupdf>=1.23.0",
        "pillow>=9.1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov",
        ],
    },
    entry_points={
        "console_scripts": [
            "smart-image=smart_image.cli:main",
        ],
    },
)
